"""Tests for the dataflow execution engine."""

import os

import pytest

from rmatgen.engine import DataSet, ExecutionEnvironment
from rmatgen.generators.utils import _endpoints


# ── Dummy functions ──────────────────────────────────────────────────

def _duplicate(record):
    return [record, record]


def _fail(record):
    raise RuntimeError("intentional failure")


# ── Environment ──────────────────────────────────────────────────────

class TestExecutionEnvironment:
    def test_default_parallelism(self):
        env = ExecutionEnvironment()
        assert env.parallelism == (os.cpu_count() or 1)

    def test_invalid_parallelism(self):
        with pytest.raises(ValueError, match="Parallelism"):
            ExecutionEnvironment(parallelism=0)

    def test_from_collection(self):
        env = ExecutionEnvironment(parallelism=4, use_processes=False)
        ds = env.from_collection(range(5), name="numbers")
        assert isinstance(ds, DataSet)
        assert ds.parallelism == 1
        assert ds.name == "numbers"
        assert ds.collect() == [0, 1, 2, 3, 4]


# ── Data sets ────────────────────────────────────────────────────────

class TestDataSet:
    @pytest.fixture()
    def env(self):
        return ExecutionEnvironment(parallelism=3, use_processes=False)

    def test_rebalance_round_robin(self, env):
        ds = env.from_collection(range(7)).rebalance()
        assert ds.partitions == [[0, 3, 6], [1, 4], [2, 5]]
        assert ds.count() == 7

    def test_rebalance_explicit_parallelism(self, env):
        ds = env.from_collection(range(4)).rebalance(2)
        assert ds.partitions == [[0, 2], [1, 3]]

    def test_rebalance_does_not_mutate_input(self, env):
        source = env.from_collection(range(4))
        source.rebalance(2)
        assert source.partitions == [[0, 1, 2, 3]]

    def test_flat_map_threads(self, env):
        ds = env.from_collection(range(6)).rebalance().flat_map(_duplicate)
        assert sorted(ds.collect()) == [0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5]
        assert ds.parallelism == 3

    def test_flat_map_keeps_partition_order(self, env):
        ds = env.from_collection(range(6)).rebalance().flat_map(_duplicate)
        assert ds.partitions[0] == [0, 0, 3, 3]

    def test_flat_map_processes(self):
        env = ExecutionEnvironment(parallelism=2, use_processes=True)
        ds = env.from_collection([(0, 1), (2, 3), (4, 5)]).rebalance().flat_map(_endpoints)
        assert sorted(ds.collect()) == [0, 1, 2, 3, 4, 5]

    def test_flat_map_inline(self):
        env = ExecutionEnvironment(parallelism=1)
        ds = env.from_collection([(0, 1)]).flat_map(_endpoints)
        assert ds.collect() == [0, 1]

    def test_flat_map_propagates_errors(self, env):
        with pytest.raises(RuntimeError, match="intentional"):
            env.from_collection(range(3)).rebalance().flat_map(_fail)

    def test_flat_map_invalid_parallelism(self, env):
        with pytest.raises(ValueError, match="Parallelism"):
            env.from_collection(range(3)).flat_map(_duplicate, parallelism=0)

    def test_distinct(self, env):
        ds = env.from_collection([3, 1, 3, 2, 1, 3]).distinct()
        assert sorted(ds.collect()) == [1, 2, 3]
        assert ds.parallelism == 3

    def test_distinct_keeps_first_per_key(self, env):
        records = [(1, "a"), (2, "b"), (1, "c"), (2, "d")]
        ds = env.from_collection(records).distinct(key=lambda r: r[0], parallelism=2)
        assert sorted(ds.collect()) == [(1, "a"), (2, "b")]

    def test_distinct_empty(self, env):
        assert env.from_collection([]).distinct().collect() == []

    def test_progress_bar(self):
        env = ExecutionEnvironment(parallelism=2, use_processes=False, show_progress=True)
        ds = env.from_collection(range(4)).rebalance().flat_map(_duplicate, name="Duplicate")
        assert ds.count() == 8
