"""Recursive CTE renderer: WITH RECURSIVE generation for hierarchy traversal.

Renders one ``RecursiveExpression`` (anchor + recursive step joined by the
expression's union strategy) as a named CTE body.  SELECT bodies are rendered
through a callback supplied by ``SQLRenderer`` so both renderers format
SELECT/FROM/JOIN/WHERE identically.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from adjtree.common.exceptions import AdjTreeInternalErrorException

if TYPE_CHECKING:
    from adjtree.query.builder import QueryBuilder
    from adjtree.query.recursive import RecursiveExpression
    from adjtree.renderer.render_context import RenderContext


class RecursiveCTERenderer:
    """Renders WITH RECURSIVE CTE bodies for hierarchy traversal."""

    def __init__(
        self,
        ctx: "RenderContext",
        render_select_fn: Callable[["QueryBuilder", int], list[str]],
    ) -> None:
        self._ctx = ctx
        self._render_select = render_select_fn

    def render_recursive_cte(self, expr: "RecursiveExpression", depth: int = 0) -> str:
        """Render ``name AS (anchor UNION [ALL] step)`` at *depth* nesting."""
        if not expr.anchor.columns or not expr.step.columns:
            raise AdjTreeInternalErrorException(
                f"Recursive expression '{expr.name}' has no projection"
            )

        pad = self._ctx.indent(depth)
        lines: list[str] = []
        lines.append(f"{pad}  {expr.name} AS (")

        if expr.initial_depth == 0:
            lines.append(f"{pad}    -- Anchor: origin rows (depth = 0)")
        else:
            lines.append(
                f"{pad}    -- Anchor: directly linked rows (depth = {expr.initial_depth})"
            )
        lines.extend(self._render_select(expr.anchor, depth + 2))

        lines.append("")
        lines.append(f"{pad}    {expr.union.value}")
        lines.append("")

        lines.append(
            f"{pad}    -- Recursive step: extend paths towards {expr.direction.target}"
        )
        lines.extend(self._render_select(expr.step, depth + 2))

        lines.append(f"{pad}  )")
        return "\n".join(lines)
