"""Graph generators running on the dataflow engine."""

from rmatgen.generators.base import BaseGenerator
from rmatgen.generators.rmat import GenerateEdges, RMatGraph
from rmatgen.generators.utils import vertex_set

__all__ = [
    "BaseGenerator",
    "GenerateEdges",
    "RMatGraph",
    "vertex_set",
]
