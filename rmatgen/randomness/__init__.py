"""Seedable random sources partitioned into independent blocks."""

from rmatgen.randomness.base import (
    MAXIMUM_BLOCK_COUNT,
    BlockInfo,
    GeneratorFactoryBase,
    NumpyRandomGenerable,
    RandomGenerable,
    block_seed,
)
from rmatgen.randomness.factories import (
    DEFAULT_SEED,
    MersenneTwisterFactory,
    NumpyGeneratorFactory,
    PCG64Factory,
    PhiloxFactory,
)

# Registry: name → class
RANDOM_FACTORY_REGISTRY: dict[str, type[NumpyGeneratorFactory]] = {
    "pcg64": PCG64Factory,
    "philox": PhiloxFactory,
    "mt19937": MersenneTwisterFactory,
}


def get_random_factory(name: str) -> type[NumpyGeneratorFactory]:
    """Look up a random factory class by name."""
    if name not in RANDOM_FACTORY_REGISTRY:
        available = ", ".join(sorted(RANDOM_FACTORY_REGISTRY))
        raise ValueError(f"Unknown random generator '{name}'. Available: {available}")
    return RANDOM_FACTORY_REGISTRY[name]


def list_random_factories() -> list[str]:
    """Return the names of all available random factories."""
    return sorted(RANDOM_FACTORY_REGISTRY.keys())


__all__ = [
    "BlockInfo",
    "DEFAULT_SEED",
    "GeneratorFactoryBase",
    "MAXIMUM_BLOCK_COUNT",
    "MersenneTwisterFactory",
    "NumpyGeneratorFactory",
    "NumpyRandomGenerable",
    "PCG64Factory",
    "PhiloxFactory",
    "RANDOM_FACTORY_REGISTRY",
    "RandomGenerable",
    "block_seed",
    "get_random_factory",
    "list_random_factories",
]
