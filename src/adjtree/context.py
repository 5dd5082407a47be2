"""HierarchyContext: one hierarchy schema bound to an executor."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from adjtree.common.logging import ILoggable
from adjtree.common.schema import HierarchySchema
from adjtree.execution import IQueryExecutor, SparkQueryExecutor
from adjtree.models import Node
from adjtree.query.builder import Column, QueryBuilder, TableRef
from adjtree.query.recursive import HierarchyQuery
from adjtree.relations.ancestors import Ancestors
from adjtree.relations.base import RecursiveRelation

if TYPE_CHECKING:
    from pyspark.sql import SparkSession


class HierarchyContext:
    """Entry point for ancestor queries over one hierarchical table.

    Example:
        ctx = HierarchyContext(schema, spark=spark)
        rows = ctx.ancestors({"id": 4}).get_results()
        nodes = ctx.load_ancestors([Node({"id": 4}), Node({"id": 7})])
    """

    def __init__(
        self,
        schema: HierarchySchema,
        executor: IQueryExecutor | None = None,
        *,
        spark: "SparkSession | None" = None,
        logger: ILoggable | None = None,
    ) -> None:
        if executor is None and spark is not None:
            executor = SparkQueryExecutor(spark)
        self.schema = schema
        self.executor = executor
        self._logger = logger

    def new_query(self, alias: str | None = None) -> HierarchyQuery:
        return HierarchyQuery(self.schema, TableRef(self.schema.table_name, alias))

    def ancestors(
        self, node: Node | Mapping[str, Any], and_self: bool = False
    ) -> Ancestors:
        """Relation for the ancestors of a single node."""
        return Ancestors(
            self.new_query(), node, and_self, self.executor, self._logger
        )

    def eager_ancestors(
        self, nodes: Sequence[Node | Mapping[str, Any]], and_self: bool = False
    ) -> Ancestors:
        """Relation for the ancestors of a batch of nodes, resolved in one query."""
        with RecursiveRelation.no_constraints():
            relation = Ancestors(
                self.new_query(), Node(), and_self, self.executor, self._logger
            )
        relation.add_eager_constraints(nodes)
        return relation

    def ancestors_sql(
        self, keys: Sequence[Any], and_self: bool = False, pretty: bool = True
    ) -> str:
        """Render the traversal for *keys*: a single-origin plan for one key."""
        origins = [{self.schema.key_column: key} for key in keys]
        if len(origins) == 1:
            relation = self.ancestors(origins[0], and_self)
        else:
            relation = self.eager_ancestors(origins, and_self)
        return relation.to_sql(pretty=pretty)

    def load_ancestors(
        self,
        nodes: Sequence[Node],
        and_self: bool = False,
        relation: str = "ancestors",
    ) -> Sequence[Node]:
        """Eager-load ancestors onto *nodes* as ``node.relations[relation]``."""
        ancestors = self.eager_ancestors(nodes, and_self)
        return ancestors.match(nodes, ancestors.get_eager(), relation)

    def where_has_ancestors(
        self,
        parent_query: QueryBuilder,
        callback: Callable[[HierarchyQuery], object] | None = None,
        and_self: bool = False,
        columns: Sequence[Column] = ("*",),
        negate: bool = False,
    ) -> QueryBuilder:
        """Keep rows of *parent_query* with at least one ancestor matching *callback*.

        The callback receives the correlated subquery; qualify its columns
        with ``query.from_.qualifier``, which is aliased when the outer query
        reads the same table.
        """
        with RecursiveRelation.no_constraints():
            relation = Ancestors(
                self.new_query(), Node(), and_self, self.executor, self._logger
            )
        query = relation.get_relation_existence_query(
            self.new_query(), parent_query, columns
        )
        if callback is not None:
            callback(query)
        return parent_query.where_exists(query, negate=negate)
