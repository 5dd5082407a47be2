"""Ancestors relation: every node reachable by following parent pointers."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from adjtree.query.builder import Column, Expression, QueryBuilder, TableRef
from adjtree.query.recursive import HierarchyQuery, TraversalDirection
from adjtree.relations.base import Origin, RecursiveRelation
from adjtree.renderer.dialect import UnionStrategy


class Ancestors(RecursiveRelation):
    """Recursive relation resolving the ancestors of one or many nodes.

    With ``and_self`` the origin itself is returned at depth 0; otherwise the
    traversal starts at the parent (depth -1) and is linked back to the
    origin through a second alias of the table.
    """

    def add_constraints(self) -> None:
        """Constrain the anchor to the parent node's key."""
        if not self.constraints_enabled():
            return

        column = self._anchor_column()
        (key,) = self.get_keys([self.parent])

        def constraint(query: QueryBuilder) -> None:
            query.where(column, "=", key)

        self.add_expression(constraint)

    def add_eager_constraints(self, models: Sequence[Origin]) -> None:
        """Constrain the anchor to the keys of all *models*.

        Without the origins in the result, origins sharing an ancestor reach
        it through separate branches; ``UNION`` collapses those branches
        before the rows are regrouped.
        """
        column = self._anchor_column()
        keys = self.get_keys(models)
        union = self.mode.batch_union

        if self._logger:
            self._logger.debug(
                f"Ancestors eager plan: mode={self.mode.value}, "
                f"origins={len(keys)}, union={union.value}"
            )

        def constraint(query: QueryBuilder) -> None:
            query.where_in(column, keys)

        self.add_expression(constraint, union=union)

    def get_relation_existence_query(
        self,
        query: HierarchyQuery,
        parent_query: QueryBuilder,
        columns: Sequence[Column] = ("*",),
    ) -> HierarchyQuery:
        query.context = parent_query.context
        # Outer traversals read ``<q>_tree AS <q>``: equal qualifiers shadow the outer row
        if query.from_.qualifier == parent_query.from_.qualifier:
            return self.get_relation_existence_query_for_self_relation(
                query, parent_query, columns
            )

        first = (
            f"{query.from_.qualifier}.{self.parent_key}"
            if self.and_self
            else self.get_qualified_related_pivot_key_name(query.from_.qualifier)
        )
        second = parent_query.qualify(self.parent_key)

        def constraint(q: QueryBuilder) -> None:
            q.where_column(first, "=", second)

        return self.add_expression(constraint, query.select(columns))

    def get_relation_existence_query_for_self_relation(
        self,
        query: HierarchyQuery,
        parent_query: QueryBuilder,
        columns: Sequence[Column] = ("*",),
    ) -> HierarchyQuery:
        """Correlated subquery when inner and outer query read the same table.

        The inner table is aliased with a fresh relation count hash so its
        columns cannot be confused with the outer query's.
        """
        query.context = parent_query.context
        table = query.from_.name
        qualifier = query.from_.qualifier
        alias = self.get_relation_count_hash(query)
        if self._logger:
            self._logger.debug(f"Aliasing self-referencing '{table}' as '{alias}'")

        columns = [
            self.replace_table_hash(c, qualifier, alias)
            if isinstance(c, Expression)
            else c
            for c in columns
        ]

        first = (
            f"{alias}.{self.parent_key}"
            if self.and_self
            else self.get_qualified_related_pivot_key_name(alias)
        )
        second = parent_query.qualify(self.parent_key)

        def constraint(q: QueryBuilder) -> None:
            q.where_column(first, "=", second)

        return self.add_expression(
            constraint, query.select(columns), TableRef(table, alias)
        )

    def add_expression(
        self,
        constraint: Callable[[QueryBuilder], object],
        query: HierarchyQuery | None = None,
        from_: TableRef | None = None,
        union: UnionStrategy = UnionStrategy.UNION_ALL,
    ) -> HierarchyQuery:
        """Register the ancestors traversal on *query* (default: the relation's)."""
        query = query or self.query
        return query.with_relationship_expression(
            TraversalDirection.ASC,
            constraint,
            self.mode.initial_depth,
            from_,
            None,
            union,
        )

    def _anchor_column(self) -> str:
        if self.and_self:
            return self.get_qualified_parent_key_name()
        return self.get_qualified_related_pivot_key_name()
