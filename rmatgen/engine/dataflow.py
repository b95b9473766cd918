"""
In-process dataflow engine.

A small, eager stand-in for a distributed batch engine: a collection is
turned into a partitioned :class:`DataSet`, partitions are spread over a
fixed number of workers, and per-element functions run on a process (or
thread) pool. Every operation returns a new :class:`DataSet`; the input
is never mutated.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any, Callable, Hashable, Iterable, Optional

import pandas as pd
from tqdm import tqdm

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers that run inside a worker
# ---------------------------------------------------------------------------

def _flat_map_partition(items: list, fn: Callable[[Any], Iterable[Any]]) -> list:
    """Apply *fn* to every item of a partition and flatten the results."""
    out: list = []
    for item in items:
        out.extend(fn(item))
    return out


def _identity(record: Any) -> Any:
    return record


def _distinct_partition(items: list, key: Callable[[Any], Hashable]) -> list:
    """Group a partition by key and keep the first record of each group."""
    if not items:
        return []
    frame = pd.DataFrame({"key": [key(item) for item in items]})
    first_rows = frame.groupby("key", sort=True).head(1).index
    return [items[i] for i in first_rows]


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

class ExecutionEnvironment:
    """
    Entry point of a dataflow program.

    Parameters
    ----------
    parallelism : int | None
        Default number of partitions and workers. ``None`` uses
        ``os.cpu_count()``.
    use_processes : bool, default True
        Run partitions on a :class:`ProcessPoolExecutor`. Functions and
        records must then be picklable. If False a thread pool is used.
    show_progress : bool, default False
        Show a ``tqdm`` progress bar over partitions.
    """

    def __init__(
        self,
        parallelism: int | None = None,
        use_processes: bool = True,
        show_progress: bool = False,
    ) -> None:
        if parallelism is None:
            parallelism = os.cpu_count() or 1
        _check_parallelism(parallelism)
        self.parallelism = parallelism
        self.use_processes = use_processes
        self.show_progress = show_progress

    def from_collection(self, items: Iterable[Any], name: str = "Collection") -> "DataSet":
        """Materialize a finite collection as a single-partition data source."""
        items = list(items)
        logger.debug("Source '%s' with %d elements", name, len(items))
        return DataSet(self, [items], name)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _executor(self, workers: int) -> Executor:
        if self.use_processes:
            return ProcessPoolExecutor(max_workers=workers)
        return ThreadPoolExecutor(max_workers=workers)

    def run_partitions(
        self,
        fn: Callable[..., list],
        partitions: list[list],
        parallelism: int,
        name: str,
        *args: Any,
    ) -> list[list]:
        """Run ``fn(partition, *args)`` for each partition, preserving order."""
        workers = min(parallelism, len(partitions))
        if workers <= 1:
            results = [fn(partition, *args) for partition in partitions]
        else:
            with self._executor(workers) as executor:
                futures = [executor.submit(fn, partition, *args) for partition in partitions]
                results = [
                    future.result()
                    for future in tqdm(
                        futures, desc=name, unit="partition", disable=not self.show_progress,
                    )
                ]
        logger.debug("Stage '%s' ran %d partitions on %d workers", name, len(partitions), max(workers, 1))
        return results

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} parallelism={self.parallelism} "
            f"processes={self.use_processes}>"
        )


def _check_parallelism(parallelism: int) -> None:
    if parallelism < 1:
        raise ValueError(f"Parallelism must be at least 1, got {parallelism}")


# ---------------------------------------------------------------------------
# Data sets
# ---------------------------------------------------------------------------

class DataSet:
    """An immutable, partitioned collection of records."""

    def __init__(self, env: ExecutionEnvironment, partitions: list[list], name: str) -> None:
        self.env = env
        self.partitions = partitions
        self.name = name

    @property
    def parallelism(self) -> int:
        return len(self.partitions)

    def rebalance(self, parallelism: Optional[int] = None, name: str = "Rebalance") -> "DataSet":
        """Redistribute records round-robin over *parallelism* partitions."""
        if parallelism is None:
            parallelism = self.env.parallelism
        _check_parallelism(parallelism)
        partitions: list[list] = [[] for _ in range(parallelism)]
        for i, record in enumerate(self._records()):
            partitions[i % parallelism].append(record)
        return DataSet(self.env, partitions, name)

    def flat_map(
        self,
        fn: Callable[[Any], Iterable[Any]],
        parallelism: Optional[int] = None,
        name: str = "FlatMap",
    ) -> "DataSet":
        """Apply *fn* to every record, concatenating its outputs per partition."""
        if parallelism is None:
            parallelism = self.env.parallelism
        _check_parallelism(parallelism)
        results = self.env.run_partitions(
            _flat_map_partition, self.partitions, parallelism, name, fn,
        )
        return DataSet(self.env, results, name)

    def distinct(
        self,
        key: Callable[[Any], Hashable] = _identity,
        parallelism: Optional[int] = None,
        name: str = "Distinct",
    ) -> "DataSet":
        """
        Keep one record per key.

        Records are hash-partitioned by key so that equal keys meet in the
        same partition, then each partition is grouped by key and the
        first record of every group is kept.
        """
        if parallelism is None:
            parallelism = self.env.parallelism
        _check_parallelism(parallelism)
        shuffled: list[list] = [[] for _ in range(parallelism)]
        for record in self._records():
            shuffled[hash(key(record)) % parallelism].append(record)
        results = self.env.run_partitions(
            _distinct_partition, shuffled, parallelism, name, key,
        )
        return DataSet(self.env, results, name)

    def collect(self) -> list:
        """Return all records, partition by partition."""
        return list(self._records())

    def count(self) -> int:
        return sum(len(partition) for partition in self.partitions)

    def _records(self):
        for partition in self.partitions:
            yield from partition

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} partitions={self.parallelism}>"
