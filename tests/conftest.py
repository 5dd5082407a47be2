"""Pytest configuration and fixtures."""

import re
import sqlite3
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import pytest

from adjtree import HierarchyContext
from adjtree.common.schema import EntityProperty, HierarchySchema
from adjtree.execution import IQueryExecutor


class RecordingExecutor(IQueryExecutor):
    """Executor returning canned records and remembering every statement."""

    def __init__(self, records: list[Mapping[str, Any]] | None = None) -> None:
        self.records = records or []
        self.statements: list[str] = []

    def execute(self, sql: str) -> list[Mapping[str, Any]]:
        self.statements.append(sql)
        return [dict(record) for record in self.records]


# Databricks array functions and their SQLite equivalents; paths become
# comma-delimited strings such as ",3,2,"
_SQLITE_ARRAY_FUNCTIONS = [
    (
        re.compile(r"CONCAT\(([\w.]+), ARRAY\(([\w.]+)\)\)"),
        r"\1 || \2 || ','",
    ),
    (
        re.compile(r"ARRAY_CONTAINS\(([\w.]+), ([\w.]+)\)"),
        r"(instr(\1, ',' || \2 || ',') > 0)",
    ),
    (re.compile(r"\bARRAY\(([\w.]+)\)"), r"',' || \1 || ','"),
]


def to_sqlite(sql: str) -> str:
    """Rewrite the array functions of a rendered statement for SQLite."""
    for pattern, replacement in _SQLITE_ARRAY_FUNCTIONS:
        sql = pattern.sub(replacement, sql)
    return sql


class SQLiteQueryExecutor(IQueryExecutor):
    """Executes rendered statements on an in-memory ``categories`` table."""

    def __init__(self, rows: list[tuple[int, int | None, str]]) -> None:
        self.connection = sqlite3.connect(":memory:")
        self.connection.execute(
            "CREATE TABLE categories (id INTEGER PRIMARY KEY, parent_id INTEGER, name TEXT)"
        )
        self.connection.executemany("INSERT INTO categories VALUES (?, ?, ?)", rows)
        self.statements: list[str] = []

    def execute(self, sql: str) -> list[Mapping[str, Any]]:
        self.statements.append(sql)
        cursor = self.connection.execute(to_sqlite(sql))
        columns = [description[0] for description in cursor.description]
        records = [dict(zip(columns, row)) for row in cursor.fetchall()]
        for data in records:
            data["path"] = [int(key) for key in data["path"].strip(",").split(",")]
        return records

    def close(self) -> None:
        self.connection.close()


def record(
    id: int,
    parent_id: int | None,
    depth: int,
    path: list[int],
    link_key: int,
    name: str | None = None,
) -> dict[str, Any]:
    """Build a result record as the recursive query returns it."""
    return {
        "id": id,
        "parent_id": parent_id,
        "name": name or f"node-{id}",
        "depth": depth,
        "path": path,
        "link_key": link_key,
    }


@pytest.fixture
def category_schema() -> HierarchySchema:
    """Categories table: id, parent_id, name."""
    return HierarchySchema(
        name="Category",
        table_name="categories",
        properties=[EntityProperty("name", str)],
    )


@pytest.fixture
def ctx(category_schema: HierarchySchema) -> HierarchyContext:
    """Context without an executor, for SQL rendering tests."""
    return HierarchyContext(category_schema)


@pytest.fixture
def sqlite_hierarchy(
    category_schema: HierarchySchema,
) -> Iterator[Callable[[list[tuple[int, int | None, str]]], HierarchyContext]]:
    """Factory for contexts executing against an in-memory SQLite table."""
    executors: list[SQLiteQueryExecutor] = []

    def factory(rows: list[tuple[int, int | None, str]]) -> HierarchyContext:
        executor = SQLiteQueryExecutor(rows)
        executors.append(executor)
        return HierarchyContext(category_schema, executor)

    yield factory
    for executor in executors:
        executor.close()
