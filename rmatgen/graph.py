"""Directed, unit-valued graph container backed by pandas DataFrames."""

from __future__ import annotations

from typing import Any

import networkx as nx
import numpy as np
import pandas as pd

from rmatgen.engine import DataSet

EDGE_COLUMNS = ["source", "target"]


class Graph:
    """
    A directed graph whose vertices and edges carry no values.

    Vertex ids are unsigned integers. Edges are kept in generation order
    and may repeat; no deduplication is applied to them.

    Parameters
    ----------
    vertices : pandas.DataFrame
        One ``id`` column.
    edges : pandas.DataFrame
        ``source`` and ``target`` columns.
    """

    directed = True

    def __init__(self, vertices: pd.DataFrame, edges: pd.DataFrame) -> None:
        self.vertices = vertices
        self.edges = edges

    @classmethod
    def from_dataset(cls, vertices: DataSet, edges: DataSet) -> "Graph":
        """Collect a vertex data set of ids and an edge data set of pairs."""
        vertex_ids = np.fromiter(vertices.collect(), dtype=np.uint64)
        edge_pairs = np.array(edges.collect(), dtype=np.uint64).reshape(-1, 2)
        return cls(
            pd.DataFrame({"id": np.sort(vertex_ids)}),
            pd.DataFrame(edge_pairs, columns=EDGE_COLUMNS),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def number_of_vertices(self) -> int:
        return len(self.vertices)

    def number_of_edges(self) -> int:
        return len(self.edges)

    def vertex_ids(self) -> list[int]:
        return self.vertices["id"].tolist()

    def edge_list(self) -> list[tuple[int, int]]:
        """Edges as ``(source, target)`` tuples of Python ints."""
        return list(zip(self.edges["source"].tolist(), self.edges["target"].tolist()))

    def out_degrees(self) -> pd.Series:
        """Out-degree per vertex id, counting duplicate edges."""
        return self._degrees("source")

    def in_degrees(self) -> pd.Series:
        """In-degree per vertex id, counting duplicate edges."""
        return self._degrees("target")

    def _degrees(self, column: str) -> pd.Series:
        counts = self.edges[column].value_counts()
        degrees = counts.reindex(self.vertices["id"], fill_value=0)
        degrees.index.name = "id"
        degrees.name = "degree"
        return degrees

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_networkx(self) -> nx.MultiDiGraph:
        """Convert to a ``networkx.MultiDiGraph``, keeping duplicate edges."""
        G = nx.MultiDiGraph()
        G.add_nodes_from(self.vertex_ids())
        G.add_edges_from(self.edge_list())
        return G

    def to_dict(self, generator_name: str = "rmat", params: dict[str, Any] | None = None) -> dict:
        """
        Convert to the standard graph instance dict::

            {
                "nodes": [0, 1, 2, ...],
                "edges": [{"source": 0, "target": 1, "weight": 1.0}, ...],
                "metadata": {"generator": "rmat", "size": 3, "params": {...}},
            }
        """
        edges = [
            {"source": source, "target": target, "weight": 1.0}
            for source, target in self.edge_list()
        ]
        return {
            "nodes": self.vertex_ids(),
            "edges": edges,
            "metadata": {
                "generator": generator_name,
                "size": self.number_of_vertices(),
                "params": dict(params or {}),
            },
        }

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} vertices={self.number_of_vertices()} "
            f"edges={self.number_of_edges()}>"
        )
