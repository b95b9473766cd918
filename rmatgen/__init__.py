"""Parallel, reproducible R-MAT random graph generation."""

from rmatgen.config import (
    DEFAULT_A,
    DEFAULT_B,
    DEFAULT_C,
    DEFAULT_NOISE,
    ExecutionConfig,
    NoiseConfig,
    RMatConfig,
    RMatConstants,
)
from rmatgen.engine import DataSet, ExecutionEnvironment
from rmatgen.generators import RMatGraph
from rmatgen.graph import Graph
from rmatgen.randomness import (
    DEFAULT_SEED,
    MersenneTwisterFactory,
    PCG64Factory,
    PhiloxFactory,
    get_random_factory,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_A",
    "DEFAULT_B",
    "DEFAULT_C",
    "DEFAULT_NOISE",
    "DEFAULT_SEED",
    "DataSet",
    "ExecutionConfig",
    "ExecutionEnvironment",
    "Graph",
    "MersenneTwisterFactory",
    "NoiseConfig",
    "PCG64Factory",
    "PhiloxFactory",
    "RMatConfig",
    "RMatConstants",
    "RMatGraph",
    "get_random_factory",
]
