"""Abstract base class for all graph generators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from rmatgen.graph import Graph


class BaseGenerator(ABC):
    """
    Base class for graph generators running on an execution environment.

    Subclasses set ``name`` and implement :meth:`generate`. The
    parallelism applies to every stage of the generated dataflow; when
    left unset the environment's default parallelism is used.
    """

    name: str = "base"

    def __init__(self) -> None:
        self.parallelism: Optional[int] = None

    def set_parallelism(self, parallelism: int) -> "BaseGenerator":
        """Set the number of workers used by :meth:`generate`."""
        if parallelism < 1:
            raise ValueError(f"Parallelism must be at least 1, got {parallelism}")
        self.parallelism = parallelism
        return self

    @abstractmethod
    def generate(self) -> Graph:
        """
        Generate a graph.

        Returns
        -------
        Graph
            The generated vertices and edges.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
