"""Recursive traversal expressions over an adjacency list table.

``HierarchyQuery.with_relationship_expression`` composes an anchor query and
a recursive step into a ``WITH RECURSIVE`` CTE and points the query at it.
Every CTE row carries three metadata columns:

- ``depth``: signed distance from the anchor's origin (negative towards
  parents, positive towards children).
- ``path``: ARRAY of keys from the anchor row to the current row.  A
  candidate whose key is already in the path is not produced, which stops
  traversal on cycles.
- ``link_key``: key of the directly linked row the current row was reached
  from.  For self-inclusive anchors it is the row's own key.

Example (ancestors, origin excluded, table ``nodes``)::

    WITH RECURSIVE nodes_tree AS (
      SELECT nodes.id, nodes.parent_id, -1 AS depth,
             ARRAY(nodes.id) AS path, nodes_link.id AS link_key
      FROM nodes
      JOIN nodes AS nodes_link ON nodes_link.parent_id = nodes.id
      WHERE nodes_link.id = 4
      UNION ALL
      SELECT nodes.id, nodes.parent_id, r.depth - 1 AS depth,
             CONCAT(r.path, ARRAY(nodes.id)) AS path, r.id AS link_key
      FROM nodes
      JOIN nodes_tree AS r ON r.parent_id = nodes.id
      WHERE NOT ARRAY_CONTAINS(r.path, nodes.id)
    )
    SELECT * FROM nodes_tree AS nodes
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from adjtree.common.schema import HierarchySchema
from adjtree.query.builder import QueryBuilder, TableRef
from adjtree.renderer.dialect import (
    ARRAY_APPEND_TEMPLATE,
    ARRAY_CONTAINS_TEMPLATE,
    ARRAY_TEMPLATE,
    UnionStrategy,
)
from adjtree.renderer.render_context import RenderContext

Constraint = Callable[[QueryBuilder], object]


class TraversalDirection(Enum):
    """Direction of a recursive step along the parent pointer."""

    ASC = "asc"
    DESC = "desc"

    @property
    def target(self) -> str:
        return "parents" if self is TraversalDirection.ASC else "children"


@dataclass
class RecursiveExpression:
    """One recursive CTE: anchor query, recursive step and union strategy."""

    name: str
    anchor: QueryBuilder
    step: QueryBuilder
    union: UnionStrategy
    direction: TraversalDirection
    initial_depth: int


class HierarchyQuery(QueryBuilder):
    """Query over a hierarchical table that knows its schema."""

    STEP_ALIAS = "r"

    def __init__(
        self,
        schema: HierarchySchema,
        table: str | TableRef | None = None,
        context: RenderContext | None = None,
    ) -> None:
        super().__init__(table or TableRef(schema.table_name), context)
        self.schema = schema

    @staticmethod
    def link_alias(qualifier: str) -> str:
        """Alias of the table copy that links anchor rows to their origin."""
        return f"{qualifier}_link"

    @staticmethod
    def expression_name(qualifier: str) -> str:
        return f"{qualifier}_tree"

    def with_relationship_expression(
        self,
        direction: TraversalDirection,
        constraint: Constraint,
        initial_depth: int,
        from_: TableRef | None = None,
        columns: Sequence[str] | None = None,
        union: UnionStrategy = UnionStrategy.UNION_ALL,
    ) -> HierarchyQuery:
        """Register a recursive expression and read from it.

        Args:
            direction: Which way the recursive step follows the parent pointer.
            constraint: Called with the anchor query to restrict the origins.
            initial_depth: Depth of anchor rows. ``0`` makes the anchor the
                origin rows themselves; any other value anchors on the rows
                linked to the origins through the link alias.
            from_: Table reference for the node table inside the expression,
                used to alias the table. Defaults to this query's FROM.
            columns: Node columns carried through the expression. Defaults to
                all schema columns.
            union: How the anchor and recursive step are combined.

        Returns:
            This query, now reading ``FROM <name>_tree AS <qualifier>``.
        """
        node = from_ or self.from_
        name = self.expression_name(node.qualifier)
        columns = list(columns or self.schema.column_names)

        anchor = self._build_anchor(direction, node, columns, initial_depth)
        constraint(anchor)
        step = self._build_step(direction, node, columns, name)

        self.expressions.append(
            RecursiveExpression(
                name=name,
                anchor=anchor,
                step=step,
                union=union,
                direction=direction,
                initial_depth=initial_depth,
            )
        )
        self.from_table(TableRef(name, node.qualifier))
        return self

    def _build_anchor(
        self,
        direction: TraversalDirection,
        node: TableRef,
        columns: list[str],
        initial_depth: int,
    ) -> QueryBuilder:
        s = self.schema
        q = node.qualifier
        anchor = QueryBuilder(node, self.context)
        link_key = f"{q}.{s.key_column}"

        if initial_depth != 0:
            link = TableRef(s.table_name, self.link_alias(q))
            if direction is TraversalDirection.ASC:
                anchor.join(
                    link, f"{link.qualifier}.{s.parent_key_column}", "=", f"{q}.{s.key_column}"
                )
            else:
                anchor.join(
                    link, f"{link.qualifier}.{s.key_column}", "=", f"{q}.{s.parent_key_column}"
                )
            link_key = f"{link.qualifier}.{s.key_column}"

        anchor.select([
            *(f"{q}.{c}" for c in columns),
            f"{initial_depth} AS {s.depth_column}",
            f"{ARRAY_TEMPLATE.format(f'{q}.{s.key_column}')} AS {s.path_column}",
            f"{link_key} AS {s.link_column}",
        ])
        return anchor

    def _build_step(
        self,
        direction: TraversalDirection,
        node: TableRef,
        columns: list[str],
        name: str,
    ) -> QueryBuilder:
        s = self.schema
        q = node.qualifier
        r = self.STEP_ALIAS
        step = QueryBuilder(node, self.context)

        if direction is TraversalDirection.ASC:
            step.join(
                TableRef(name, r), f"{r}.{s.parent_key_column}", "=", f"{q}.{s.key_column}"
            )
            next_depth = f"{r}.{s.depth_column} - 1"
        else:
            step.join(
                TableRef(name, r), f"{r}.{s.key_column}", "=", f"{q}.{s.parent_key_column}"
            )
            next_depth = f"{r}.{s.depth_column} + 1"

        path = ARRAY_APPEND_TEMPLATE.format(f"{r}.{s.path_column}", f"{q}.{s.key_column}")
        step.select([
            *(f"{q}.{c}" for c in columns),
            f"{next_depth} AS {s.depth_column}",
            f"{path} AS {s.path_column}",
            f"{r}.{s.key_column} AS {s.link_column}",
        ])

        # Cycle stop: never revisit a key already on the path
        step.where_raw(
            "NOT " + ARRAY_CONTAINS_TEMPLATE.format(f"{r}.{s.path_column}", f"{q}.{s.key_column}")
        )
        if s.max_depth is not None:
            if direction is TraversalDirection.ASC:
                step.where_raw(f"{r}.{s.depth_column} > -{s.max_depth}")
            else:
                step.where_raw(f"{r}.{s.depth_column} < {s.max_depth}")
        return step
