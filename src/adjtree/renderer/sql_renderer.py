"""SQL Renderer - Converts query builders to Databricks SQL with WITH RECURSIVE support."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from adjtree.common.logging import ILoggable
from adjtree.renderer.recursive_cte_renderer import RecursiveCTERenderer

if TYPE_CHECKING:
    from adjtree.query.builder import QueryBuilder


class SQLRenderer:
    """
    Renders a ``QueryBuilder`` to Databricks SQL.

    Recursive expressions registered on the query are emitted as a leading
    ``WITH RECURSIVE`` clause; the query itself becomes the final SELECT.
    """

    def __init__(
        self,
        logger: ILoggable | None = None,
        *,
        config: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize the SQL renderer.

        Args:
            logger: Optional logger for debugging.
            config: Optional configuration dictionary.
                Supported keys:
                - 'pretty': Multi-line output with comments (default True).
                  When False the statement is collapsed onto one line and
                  comments are dropped.
        """
        self._logger = logger
        self._config = config or {}

    def render_query(self, query: QueryBuilder, depth: int = 0) -> str:
        """
        Render *query* to SQL.

        Args:
            query: The query to render.
            depth: Nesting level; sub-queries are indented accordingly.

        Returns:
            The rendered Databricks SQL statement (no trailing semicolon).
        """
        pad = query.context.indent(depth)
        lines: list[str] = []

        if query.expressions:
            cte_renderer = RecursiveCTERenderer(query.context, self.render_select)
            ctes = [
                cte_renderer.render_recursive_cte(expr, depth)
                for expr in query.expressions
            ]
            lines.append(f"{pad}WITH RECURSIVE")
            lines.append(",\n".join(ctes))

        lines.extend(self.render_select(query, depth))

        if query.orders:
            lines.append(f"{pad}ORDER BY {', '.join(query.orders)}")

        sql = "\n".join(lines)
        if self._logger:
            self._logger.debug(
                f"Rendered query on {query.from_.render()} "
                f"with {len(query.expressions)} recursive expression(s)"
            )
        if depth == 0 and not self._config.get("pretty", True):
            return self._collapse(sql)
        return sql

    def render_select(self, query: QueryBuilder, depth: int) -> list[str]:
        """Render the SELECT ... FROM ... JOIN ... WHERE body of *query*."""
        pad = query.context.indent(depth)
        lines: list[str] = []

        columns = [str(c) for c in query.columns] or ["*"]
        if len(columns) == 1:
            lines.append(f"{pad}SELECT {columns[0]}")
        else:
            lines.append(f"{pad}SELECT")
            lines.append(",\n".join(f"{pad}  {c}" for c in columns))

        lines.append(f"{pad}FROM {query.from_.render()}")
        for join in query.joins:
            lines.append(f"{pad}{join.kind} {join.table.render()} ON {join.condition}")

        if query.wheres:
            lines.append(f"{pad}WHERE {query.wheres[0]}")
            for where in query.wheres[1:]:
                lines.append(f"{pad}  AND {where}")
        return lines

    @staticmethod
    def _collapse(sql: str) -> str:
        """Join non-comment lines with single spaces."""
        parts = [
            line.strip()
            for line in sql.splitlines()
            if line.strip() and not line.strip().startswith("--")
        ]
        return " ".join(parts)
