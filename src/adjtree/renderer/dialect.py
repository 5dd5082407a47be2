"""Databricks SQL dialect constants.

Literal rendering, comparison operators and the array function templates
used by recursive traversal expressions.  These are pure data plus tiny
formatting helpers, so that the renderers stay "stupid and safe".
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any


class UnionStrategy(Enum):
    """How the anchor and recursive step of a recursive CTE are combined."""

    UNION = "UNION"
    UNION_ALL = "UNION ALL"


# Comparison operators accepted by the query builder
COMPARISON_OPERATORS: frozenset[str] = frozenset(
    {"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "RLIKE"}
)

# Array functions for path bookkeeping
ARRAY_TEMPLATE = "ARRAY({0})"
ARRAY_APPEND_TEMPLATE = "CONCAT({0}, ARRAY({1}))"
ARRAY_CONTAINS_TEMPLATE = "ARRAY_CONTAINS({0}, {1})"

# Predicate that never matches (empty IN lists)
FALSE_PREDICATE = "1 = 0"


def render_literal(value: Any) -> str:
    """Render a Python value as a Databricks SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        escaped = value.replace("'", "''")
        return f"'{escaped}'"
    if isinstance(value, (tuple, list)):
        return f"({', '.join(render_literal(v) for v in value)})"
    raise TypeError(f"Cannot render {type(value).__name__} as a SQL literal")


def render_column_list(columns: str | Sequence[str]) -> str:
    """Render a column or a composite column tuple."""
    if isinstance(columns, str):
        return columns
    if len(columns) == 1:
        return columns[0]
    return f"({', '.join(columns)})"
