"""
Recursive Matrix (R-MAT) graph generator.

See "R-MAT: A Recursive Model for Graph Mining" (Chakrabarti, Zhan and
Faloutsos, SDM 2004).

Each edge is grown one bit at a time: at every level the adjacency matrix
is split into four quadrants and one is picked with probabilities
A, B, C and D = 1 - A - B - C. After ``scale`` levels the chosen cell is
the edge. The work is split into independently seeded blocks so the
edges can be produced on any number of workers with the same result.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

import numpy as np

from rmatgen.config import (
    DEFAULT_A,
    DEFAULT_B,
    DEFAULT_C,
    DEFAULT_NOISE,
    RMatConfig,
    check_constants,
    check_noise,
)
from rmatgen.engine import ExecutionEnvironment
from rmatgen.generators.base import BaseGenerator
from rmatgen.generators.utils import vertex_set
from rmatgen.graph import Graph
from rmatgen.randomness import BlockInfo, GeneratorFactoryBase, RandomGenerable, get_random_factory

logger = logging.getLogger(__name__)

_ONE = np.float32(1.0)

# Random draws per bit when noise is enabled: one for the quadrant and one
# for each of the four perturbed parameters.
NOISE_CYCLES_PER_BIT = 5


class RMatGraph(BaseGenerator):
    """
    Generates directed power-law graphs using the R-MAT model.

    Edges are not deduplicated, so the graph may contain parallel edges
    and self-loops. Vertices are the distinct endpoints of the edges, so
    ids in ``[0, vertex_count)`` that no edge touches are absent.

    Parameters
    ----------
    env : ExecutionEnvironment
        Environment running the generation dataflow.
    random_factory : GeneratorFactoryBase
        Source of seeded random blocks.
    vertex_count : int
        Upper bound (exclusive) on vertex ids.
    edge_count : int
        Number of edges to generate.

    Example
    -------
    >>> env = ExecutionEnvironment(parallelism=4)
    >>> graph = (
    ...     RMatGraph(env, PCG64Factory(seed=42), 1 << 10, 1 << 14)
    ...     .set_noise(True, 0.1)
    ...     .generate()
    ... )
    """

    name = "rmat"

    def __init__(
        self,
        env: ExecutionEnvironment,
        random_factory: GeneratorFactoryBase,
        vertex_count: int,
        edge_count: int,
    ) -> None:
        super().__init__()
        if vertex_count <= 0:
            raise ValueError(f"Vertex count must be greater than zero, got {vertex_count}")
        if edge_count <= 0:
            raise ValueError(f"Edge count must be greater than zero, got {edge_count}")

        self.env = env
        self.random_factory = random_factory
        self.vertex_count = vertex_count
        self.edge_count = edge_count

        self.a = DEFAULT_A
        self.b = DEFAULT_B
        self.c = DEFAULT_C
        self.noise_enabled = False
        self.noise = DEFAULT_NOISE
        self.max_attempts_per_edge: Optional[int] = None

    @classmethod
    def from_config(
        cls, config: RMatConfig, env: Optional[ExecutionEnvironment] = None,
    ) -> "RMatGraph":
        """Build a generator from a validated :class:`RMatConfig`."""
        if env is None:
            env = ExecutionEnvironment(
                parallelism=config.execution.parallelism,
                use_processes=config.execution.use_processes,
                show_progress=config.execution.show_progress,
            )
        factory = get_random_factory(config.random_generator)(seed=config.seed)
        generator = (
            cls(env, factory, config.vertex_count, config.edge_count)
            .set_constants(config.constants.a, config.constants.b, config.constants.c)
            .set_noise(config.noise.enabled, config.noise.noise)
            .set_max_attempts_per_edge(config.max_attempts_per_edge)
        )
        if config.execution.parallelism is not None:
            generator.set_parallelism(config.execution.parallelism)
        return generator

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_constants(self, a: float, b: float, c: float) -> "RMatGraph":
        """
        Set the probabilities for recursively subdividing the matrix.

        Parameters
        ----------
        a : float
            Likelihood of source bit = 0, target bit = 0.
        b : float
            Likelihood of source bit = 0, target bit = 1.
        c : float
            Likelihood of source bit = 1, target bit = 0.
        """
        check_constants(a, b, c)
        self.a = a
        self.b = b
        self.c = c
        return self

    def set_noise(self, noise_enabled: bool, noise: float) -> "RMatGraph":
        """
        Enable and configure noise.

        When enabled, A, B, C and D are each scaled by a random factor in
        ``[1 - noise/2, 1 + noise/2)`` and renormalized after every bit.
        """
        check_noise(noise)
        self.noise_enabled = noise_enabled
        self.noise = noise
        return self

    def set_max_attempts_per_edge(self, max_attempts: Optional[int]) -> "RMatGraph":
        """Bound the out-of-range retries per edge; ``None`` is unbounded."""
        if max_attempts is not None and max_attempts < 1:
            raise ValueError(f"Max attempts per edge must be at least 1, got {max_attempts}")
        self.max_attempts_per_edge = max_attempts
        return self

    @property
    def scale(self) -> int:
        """Number of bits in the largest vertex id."""
        return (self.vertex_count - 1).bit_length()

    def params(self) -> dict[str, Any]:
        """Generator settings, as recorded in the graph dict metadata."""
        return {
            "vertex_count": self.vertex_count,
            "edge_count": self.edge_count,
            "a": self.a,
            "b": self.b,
            "c": self.c,
            "noise_enabled": self.noise_enabled,
            "noise": self.noise,
            "seed": self.random_factory.seed,
        }

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self) -> Graph:
        scale = self.scale
        parallelism = self.parallelism or self.env.parallelism

        cycles_per_edge = NOISE_CYCLES_PER_BIT * scale if self.noise_enabled else scale
        blocks = self.random_factory.get_random_generables(self.edge_count, cycles_per_edge)
        logger.info(
            "Generating %d edges over %d vertices (scale=%d) in %d blocks",
            self.edge_count, self.vertex_count, scale, len(blocks),
        )

        edges = (
            self.env
            .from_collection(blocks, name="Random generators")
            .rebalance(parallelism, name="Rebalance")
            .flat_map(
                GenerateEdges(
                    self.vertex_count, scale, self.a, self.b, self.c,
                    self.noise_enabled, self.noise, self.max_attempts_per_edge,
                ),
                parallelism=parallelism,
                name="RMat graph edges",
            )
        )

        vertices = vertex_set(edges, parallelism)

        graph = Graph.from_dataset(vertices, edges)
        logger.info(
            "Generated R-MAT graph with %d vertices and %d edges",
            graph.number_of_vertices(), graph.number_of_edges(),
        )
        return graph


class GenerateEdges:
    """
    Produces the edges of one block.

    Instances are shipped to worker processes, so they hold only the
    immutable configuration. The per-edge probabilities live in locals
    of :meth:`__call__`.
    """

    def __init__(
        self,
        vertex_count: int,
        scale: int,
        a: float,
        b: float,
        c: float,
        noise_enabled: bool,
        noise: float,
        max_attempts_per_edge: Optional[int] = None,
    ) -> None:
        self.vertex_count = vertex_count
        self.scale = scale
        self.base_a = np.float32(a)
        self.base_b = np.float32(b)
        self.base_c = np.float32(c)
        self.base_d = _ONE - self.base_a - self.base_b - self.base_c
        self.noise_enabled = noise_enabled
        self.noise = np.float32(noise)
        self.max_attempts_per_edge = max_attempts_per_edge

    def __call__(self, block: BlockInfo) -> Iterator[tuple[int, int]]:
        rng = block.random_generable
        edges_to_generate = block.element_count
        attempts = 0

        while edges_to_generate > 0:
            x = 0
            y = 0

            # matrix constants are reset for each edge
            a = self.base_a
            b = self.base_b
            c = self.base_c
            d = self.base_d

            for _ in range(self.scale):
                x <<= 1
                y <<= 1

                draw = rng.next_uniform_float()

                if draw > a:
                    if draw <= a + b:
                        y += 1
                    elif draw <= a + b + c:
                        x += 1
                    else:
                        x += 1
                        y += 1

                if self.noise_enabled:
                    a, b, c, d = self._perturb(rng, a, b, c, d)

            # when vertex_count is not a power of two, discard out-of-range cells
            if x < self.vertex_count and y < self.vertex_count:
                yield x, y
                edges_to_generate -= 1
                attempts = 0
            else:
                attempts += 1
                if self.max_attempts_per_edge is not None and attempts >= self.max_attempts_per_edge:
                    raise RuntimeError(
                        f"Block {block.block_index}: no edge below vertex count "
                        f"{self.vertex_count} after {attempts} attempts"
                    )

    def _perturb(
        self,
        rng: RandomGenerable,
        a: np.float32,
        b: np.float32,
        c: np.float32,
        d: np.float32,
    ) -> tuple[np.float32, np.float32, np.float32, np.float32]:
        """Scale each parameter by a random factor, then renormalize to one."""
        low = 1.0 - float(self.noise / 2)

        # the factor is bounded below by zero, so parameters stay non-negative
        a = np.float32(float(a) * (low + float(rng.next_uniform_float() * self.noise)))
        b = np.float32(float(b) * (low + float(rng.next_uniform_float() * self.noise)))
        c = np.float32(float(c) * (low + float(rng.next_uniform_float() * self.noise)))
        d = np.float32(float(d) * (low + float(rng.next_uniform_float() * self.noise)))

        norm = _ONE / (a + b + c + d)
        a = a * norm
        b = b * norm
        c = c * norm

        # subtract rather than scale d to limit rounding error
        d = _ONE - a - b - c
        return a, b, c, d
