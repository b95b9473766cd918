"""Eager in-process dataflow engine used to run generation blocks."""

from rmatgen.engine.dataflow import DataSet, ExecutionEnvironment

__all__ = ["DataSet", "ExecutionEnvironment"]
