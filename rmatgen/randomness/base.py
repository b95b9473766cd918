"""Abstract seedable random sources and the block partitioner built on them."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

# Blocks are created on a single node and then distributed, so this limit
# should stay well above the largest expected parallelism.
MAXIMUM_BLOCK_COUNT = 1 << 15


def block_seed(base_seed: int, block_index: int) -> np.random.SeedSequence:
    """Derive the seed of block *block_index* from the factory's base seed."""
    return np.random.SeedSequence(base_seed, spawn_key=(block_index,))


class RandomGenerable(ABC):
    """
    A deterministic source of single-precision uniform floats.

    Each block owns exactly one of these, so no state is ever shared
    between blocks running on different workers.
    """

    @abstractmethod
    def next_uniform_float(self) -> np.float32:
        """Return the next uniform ``float32`` in ``[0, 1)``."""


class NumpyRandomGenerable(RandomGenerable):
    """
    :class:`RandomGenerable` backed by a numpy bit generator.

    The bit generator is only built on the first draw, so a block
    descriptor can be created and pickled to a worker process cheaply.
    Draws are prefetched in chunks of ``buffer_size`` floats.

    Parameters
    ----------
    bit_generator : type
        A ``numpy.random.BitGenerator`` subclass, e.g. ``numpy.random.PCG64``.
    seed : numpy.random.SeedSequence
        Seed of this stream.
    buffer_size : int, default 4096
        Number of floats drawn per refill.
    """

    def __init__(
        self,
        bit_generator: type[np.random.BitGenerator],
        seed: np.random.SeedSequence,
        buffer_size: int = 4096,
    ) -> None:
        self.bit_generator = bit_generator
        self.seed = seed
        self.buffer_size = buffer_size
        self._generator: np.random.Generator | None = None
        self._buffer = np.empty(0, dtype=np.float32)
        self._position = 0

    def generator(self) -> np.random.Generator:
        """Return the underlying numpy generator, creating it if needed."""
        if self._generator is None:
            self._generator = np.random.Generator(self.bit_generator(self.seed))
        return self._generator

    def next_uniform_float(self) -> np.float32:
        if self._position >= len(self._buffer):
            self._buffer = self.generator().random(self.buffer_size, dtype=np.float32)
            self._position = 0
        value = self._buffer[self._position]
        self._position += 1
        return value

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} {self.bit_generator.__name__} "
            f"spawn_key={self.seed.spawn_key}>"
        )


@dataclass(frozen=True)
class BlockInfo:
    """One independent unit of generation work."""

    random_generable: RandomGenerable
    block_index: int
    block_count: int
    first_element: int
    element_count: int


class GeneratorFactoryBase(ABC):
    """
    Splits a random workload into independently seeded blocks.

    The number of blocks is a function of the total work only
    (``element_count * cycles_per_element``), never of the parallelism
    used to process them, so the union of the generated elements is the
    same however the blocks are spread over workers.
    """

    name: str = "base"

    #: Random values per block. Large relative to the cost of creating a
    #: generator, small relative to the cost of the whole computation.
    cycles_per_block: int = 1 << 20

    def __init__(self, seed: int, cycles_per_block: int | None = None) -> None:
        if seed < 0:
            raise ValueError(f"Seed must be non-negative, got {seed}")
        self.seed = seed
        if cycles_per_block is not None:
            if cycles_per_block <= 0:
                raise ValueError(
                    f"Cycles per block must be positive, got {cycles_per_block}"
                )
            self.cycles_per_block = cycles_per_block

    @abstractmethod
    def create_generable(self, block_index: int) -> RandomGenerable:
        """Build the random source of block *block_index*."""

    def get_random_generables(
        self, element_count: int, cycles_per_element: int,
    ) -> list[BlockInfo]:
        """
        Partition *element_count* elements into seeded blocks.

        Parameters
        ----------
        element_count : int
            Total number of elements to produce across all blocks.
        cycles_per_element : int
            Expected random draws per element; sizes the blocks.

        Returns
        -------
        list[BlockInfo]
            Blocks in index order whose element counts sum to
            *element_count*.
        """
        if element_count <= 0:
            raise ValueError(f"Element count must be positive, got {element_count}")

        block_count = min(
            element_count * cycles_per_element // self.cycles_per_block + 1,
            MAXIMUM_BLOCK_COUNT,
            element_count,
        )

        elements_per_block, remainder = divmod(element_count, block_count)

        blocks: list[BlockInfo] = []
        first_element = 0
        for block_index in range(block_count):
            # the last `remainder` blocks take one extra element
            count = elements_per_block + (1 if block_index >= block_count - remainder else 0)
            blocks.append(BlockInfo(
                random_generable=self.create_generable(block_index),
                block_index=block_index,
                block_count=block_count,
                first_element=first_element,
                element_count=count,
            ))
            first_element += count

        logger.debug(
            "Partitioned %d elements into %d blocks (%s, seed=%d)",
            element_count, block_count, self.name, self.seed,
        )
        return blocks

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} seed={self.seed}>"
