"""Minimal SQL query builder.

Conditions are rendered to SQL text as soon as they are added; the builder
only keeps strings and the structure needed to assemble the statement.
Rendering of the full statement is delegated to ``SQLRenderer``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from adjtree.renderer.dialect import (
    COMPARISON_OPERATORS,
    FALSE_PREDICATE,
    render_column_list,
    render_literal,
)
from adjtree.renderer.render_context import RenderContext

if TYPE_CHECKING:
    from adjtree.query.recursive import RecursiveExpression


@dataclass(frozen=True)
class TableRef:
    """A table in a FROM or JOIN clause, optionally aliased."""

    name: str
    alias: str | None = None

    @property
    def qualifier(self) -> str:
        """Identifier used to qualify columns: the alias, else the bare table name."""
        return self.alias or self.name.rsplit(".", 1)[-1]

    def render(self) -> str:
        if self.alias and self.alias != self.name:
            return f"{self.name} AS {self.alias}"
        return self.name


@dataclass(frozen=True)
class Expression:
    """Raw SQL fragment, rendered verbatim."""

    sql: str

    def replace_qualifier(self, old: str, new: str) -> Expression:
        """Return a copy with every ``old.`` column qualifier replaced by ``new.``."""
        pattern = rf"(?<![\w.]){re.escape(old)}\."
        return Expression(re.sub(pattern, f"{new}.", self.sql))

    def __str__(self) -> str:
        return self.sql


Column = str | Expression


@dataclass(frozen=True)
class JoinClause:
    table: TableRef
    condition: str
    kind: str = "JOIN"


class QueryBuilder:
    """Builds a single SELECT statement, optionally preceded by recursive CTEs."""

    def __init__(
        self,
        table: str | TableRef,
        context: RenderContext | None = None,
    ) -> None:
        self.from_ = table if isinstance(table, TableRef) else TableRef(table)
        self.columns: list[Column] = []
        self.joins: list[JoinClause] = []
        self.wheres: list[str] = []
        self.orders: list[str] = []
        self.expressions: list[RecursiveExpression] = []
        if context is None:
            context = RenderContext()
            context.claim(self.from_.qualifier)
        self.context = context

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def qualify(self, column: str) -> str:
        """Qualify *column* with the FROM table qualifier unless already qualified."""
        if "." in column:
            return column
        return f"{self.from_.qualifier}.{column}"

    def from_table(self, table: str | TableRef) -> QueryBuilder:
        self.from_ = table if isinstance(table, TableRef) else TableRef(table)
        return self

    def select(self, columns: Column | Sequence[Column]) -> QueryBuilder:
        if isinstance(columns, (str, Expression)):
            columns = [columns]
        self.columns = list(columns)
        return self

    def join(
        self, table: str | TableRef, first: str, operator: str, second: str
    ) -> QueryBuilder:
        table = table if isinstance(table, TableRef) else TableRef(table)
        self._check_operator(operator)
        self.joins.append(JoinClause(table, f"{first} {operator} {second}"))
        return self

    def where(self, column: str, operator: str, value: Any) -> QueryBuilder:
        """Add ``column <op> literal``. A None value with ``=`` renders IS NULL."""
        self._check_operator(operator)
        if value is None and operator in ("=", "!=", "<>"):
            negation = "" if operator == "=" else "NOT "
            self.wheres.append(f"{column} IS {negation}NULL")
        else:
            self.wheres.append(f"{column} {operator} {render_literal(value)}")
        return self

    def where_in(
        self, columns: str | Sequence[str], values: Sequence[Any]
    ) -> QueryBuilder:
        """Add ``column IN (...)``; tuple columns render tuple membership."""
        if not values:
            self.wheres.append(FALSE_PREDICATE)
            return self
        rendered = ", ".join(render_literal(v) for v in values)
        self.wheres.append(f"{render_column_list(columns)} IN ({rendered})")
        return self

    def where_column(self, first: str, operator: str, second: str) -> QueryBuilder:
        self._check_operator(operator)
        self.wheres.append(f"{first} {operator} {second}")
        return self

    def where_raw(self, sql: str) -> QueryBuilder:
        self.wheres.append(sql)
        return self

    def where_exists(self, query: QueryBuilder, negate: bool = False) -> QueryBuilder:
        from adjtree.renderer.sql_renderer import SQLRenderer

        inner = SQLRenderer().render_query(query, depth=1)
        prefix = "NOT EXISTS" if negate else "EXISTS"
        self.wheres.append(f"{prefix} (\n{inner}\n)")
        return self

    def order_by(self, column: str, direction: str = "ASC") -> QueryBuilder:
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Invalid order direction: {direction}")
        self.orders.append(f"{column} {direction}")
        return self

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_sql(self, pretty: bool = True) -> str:
        from adjtree.renderer.sql_renderer import SQLRenderer

        return SQLRenderer(config={"pretty": pretty}).render_query(self)

    @staticmethod
    def _check_operator(operator: str) -> None:
        if operator.upper() not in COMPARISON_OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
