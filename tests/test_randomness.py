"""Tests for seeded random blocks."""

import numpy as np
import pytest

from rmatgen.randomness import (
    MAXIMUM_BLOCK_COUNT,
    RANDOM_FACTORY_REGISTRY,
    MersenneTwisterFactory,
    NumpyRandomGenerable,
    PCG64Factory,
    PhiloxFactory,
    block_seed,
    get_random_factory,
    list_random_factories,
)


# ── Helpers ──────────────────────────────────────────────────────────

def _draws(generable, n=10):
    return [generable.next_uniform_float() for _ in range(n)]


# ── Registry ─────────────────────────────────────────────────────────

def test_registry_lists_all():
    assert len(RANDOM_FACTORY_REGISTRY) == 3
    assert list_random_factories() == ["mt19937", "pcg64", "philox"]


def test_get_factory():
    assert get_random_factory("pcg64") is PCG64Factory
    assert get_random_factory("philox") is PhiloxFactory
    assert get_random_factory("mt19937") is MersenneTwisterFactory


def test_get_factory_unknown():
    with pytest.raises(ValueError, match="Unknown random generator"):
        get_random_factory("nope")


# ── Block partitioning ───────────────────────────────────────────────

class TestBlockPartitioning:
    def test_small_workload_is_one_block(self):
        blocks = PCG64Factory(seed=1).get_random_generables(100, 10)
        assert len(blocks) == 1
        assert blocks[0].element_count == 100
        assert blocks[0].first_element == 0
        assert blocks[0].block_count == 1

    def test_counts_sum_to_request(self):
        blocks = PCG64Factory(seed=1, cycles_per_block=100).get_random_generables(1000, 7)
        assert len(blocks) == 7000 // 100 + 1
        assert sum(b.element_count for b in blocks) == 1000
        assert all(b.element_count > 0 for b in blocks)
        assert [b.block_index for b in blocks] == list(range(len(blocks)))
        assert all(b.block_count == len(blocks) for b in blocks)

    def test_blocks_are_contiguous(self):
        blocks = PCG64Factory(seed=1, cycles_per_block=100).get_random_generables(1000, 7)
        offset = 0
        for b in blocks:
            assert b.first_element == offset
            offset += b.element_count
        assert offset == 1000

    def test_remainder_goes_to_last_blocks(self):
        blocks = PCG64Factory(seed=1, cycles_per_block=100).get_random_generables(1000, 7)
        counts = [b.element_count for b in blocks]
        # 1000 elements over 71 blocks: 14 each, the last 6 get 15
        assert counts[:-6] == [14] * 65
        assert counts[-6:] == [15] * 6

    def test_never_more_blocks_than_elements(self):
        blocks = PCG64Factory(seed=1, cycles_per_block=1).get_random_generables(5, 100)
        assert len(blocks) == 5
        assert all(b.element_count == 1 for b in blocks)

    def test_block_count_is_capped(self):
        blocks = PCG64Factory(seed=1, cycles_per_block=1).get_random_generables(100_000, 1)
        assert len(blocks) == MAXIMUM_BLOCK_COUNT
        assert sum(b.element_count for b in blocks) == 100_000

    def test_zero_cycles(self):
        blocks = PCG64Factory(seed=1).get_random_generables(10, 0)
        assert len(blocks) == 1

    @pytest.mark.parametrize("count", [0, -5])
    def test_non_positive_count_raises(self, count):
        with pytest.raises(ValueError, match="Element count must be positive"):
            PCG64Factory(seed=1).get_random_generables(count, 3)

    def test_invalid_factory_settings(self):
        with pytest.raises(ValueError, match="Seed"):
            PCG64Factory(seed=-1)
        with pytest.raises(ValueError, match="Cycles per block"):
            PCG64Factory(seed=1, cycles_per_block=0)

    def test_mersenne_twister_uses_larger_blocks(self):
        assert MersenneTwisterFactory.cycles_per_block > PCG64Factory.cycles_per_block


# ── Seeding ──────────────────────────────────────────────────────────

class TestSeeding:
    @pytest.mark.parametrize("factory_cls", [PCG64Factory, PhiloxFactory, MersenneTwisterFactory])
    def test_same_seed_same_streams(self, factory_cls):
        first = factory_cls(seed=7, cycles_per_block=10).get_random_generables(50, 5)
        second = factory_cls(seed=7, cycles_per_block=10).get_random_generables(50, 5)
        for a, b in zip(first, second):
            assert _draws(a.random_generable) == _draws(b.random_generable)

    def test_blocks_have_distinct_streams(self):
        blocks = PCG64Factory(seed=7, cycles_per_block=10).get_random_generables(50, 5)
        streams = [tuple(_draws(b.random_generable)) for b in blocks]
        assert len(set(streams)) == len(streams)

    def test_different_seeds_differ(self):
        a = PCG64Factory(seed=1).get_random_generables(10, 1)[0]
        b = PCG64Factory(seed=2).get_random_generables(10, 1)[0]
        assert _draws(a.random_generable) != _draws(b.random_generable)

    def test_block_seed_depends_on_index(self):
        assert block_seed(3, 0).spawn_key == (0,)
        assert block_seed(3, 4).spawn_key == (4,)
        assert block_seed(3, 4).entropy == 3


# ── Generables ───────────────────────────────────────────────────────

class TestNumpyRandomGenerable:
    def test_single_precision_unit_interval(self):
        generable = NumpyRandomGenerable(np.random.PCG64, block_seed(0, 0))
        values = _draws(generable, 1000)
        assert all(isinstance(v, np.float32) for v in values)
        assert all(0.0 <= v < 1.0 for v in values)

    def test_refills_continue_the_stream(self):
        seed = block_seed(9, 2)
        small = NumpyRandomGenerable(np.random.MT19937, seed, buffer_size=3)
        expected = np.random.Generator(np.random.MT19937(seed)).random(10, dtype=np.float32)
        assert _draws(small, 10) == expected.tolist()

    def test_generator_is_lazy(self):
        generable = NumpyRandomGenerable(np.random.PCG64, block_seed(0, 0))
        assert generable._generator is None
        generable.next_uniform_float()
        assert generable._generator is not None
