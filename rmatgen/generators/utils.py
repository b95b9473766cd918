"""Dataflow helpers shared by graph generators."""

from __future__ import annotations

from typing import Iterator, Optional

from rmatgen.engine import DataSet


def _endpoints(edge: tuple[int, int]) -> Iterator[int]:
    source, target = edge
    yield source
    yield target


def vertex_set(edges: DataSet, parallelism: Optional[int] = None) -> DataSet:
    """
    Derive the distinct vertex ids referenced by *edges*.

    Every edge emits both endpoints, which are then grouped by id with one
    id kept per group. The edges are never gathered on a single worker.
    """
    return (
        edges
        .flat_map(_endpoints, parallelism=parallelism, name="Emit vertex ids")
        .distinct(parallelism=parallelism, name="Vertex set")
    )
