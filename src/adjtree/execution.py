"""Query execution seam.

Relations render SQL and hand it to an ``IQueryExecutor``; connection
handling, timeouts and cancellation belong to the executor's engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pyspark.sql import SparkSession


class IQueryExecutor(ABC):
    """Interface for running a SQL statement and returning its records."""

    @abstractmethod
    def execute(self, sql: str) -> list[Mapping[str, Any]]:
        """
        Run *sql* and return all result records.

        Args:
            sql: A complete SQL statement.

        Returns:
            One mapping of column name to value per result row, in result order.
        """
        ...


class SparkQueryExecutor(IQueryExecutor):
    """Runs statements on a ``SparkSession``."""

    def __init__(self, spark: "SparkSession") -> None:
        self._spark = spark

    def execute(self, sql: str) -> list[Mapping[str, Any]]:
        return [row.asDict(recursive=True) for row in self._spark.sql(sql).collect()]
