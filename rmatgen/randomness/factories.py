"""Concrete block-partitioning factories over numpy bit generators."""

from __future__ import annotations

import numpy as np

from rmatgen.randomness.base import (
    GeneratorFactoryBase,
    NumpyRandomGenerable,
    RandomGenerable,
    block_seed,
)

DEFAULT_SEED = 0x4B6F7E18198DE7A4


class NumpyGeneratorFactory(GeneratorFactoryBase):
    """Factory producing one :class:`NumpyRandomGenerable` per block."""

    bit_generator: type[np.random.BitGenerator] = np.random.PCG64

    def __init__(self, seed: int = DEFAULT_SEED, cycles_per_block: int | None = None) -> None:
        super().__init__(seed, cycles_per_block)

    def create_generable(self, block_index: int) -> RandomGenerable:
        return NumpyRandomGenerable(self.bit_generator, block_seed(self.seed, block_index))


class PCG64Factory(NumpyGeneratorFactory):
    """Blocks seeded from numpy's default PCG64 generator."""

    name = "pcg64"
    bit_generator = np.random.PCG64
    cycles_per_block = 1 << 20


class PhiloxFactory(NumpyGeneratorFactory):
    """Blocks seeded from the counter-based Philox generator."""

    name = "philox"
    bit_generator = np.random.Philox
    cycles_per_block = 1 << 20


class MersenneTwisterFactory(NumpyGeneratorFactory):
    """
    Blocks seeded from MT19937.

    Mersenne Twister has a large state to initialise, so it gets larger
    blocks than the other generators.
    """

    name = "mt19937"
    bit_generator = np.random.MT19937
    cycles_per_block = 1 << 22
