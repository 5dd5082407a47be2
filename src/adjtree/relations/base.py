"""Shared machinery of recursive relations.

A relation wraps a ``HierarchyQuery`` for one parent node (lazy access) or
for a batch of nodes (eager loading), executes it once and regroups the
flattened rows per origin.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from adjtree.common.exceptions import AdjTreeException, InvalidOriginKeyError
from adjtree.common.logging import ILoggable
from adjtree.execution import IQueryExecutor
from adjtree.models import Node, TraversalRow
from adjtree.query.builder import Column, Expression, QueryBuilder
from adjtree.query.recursive import HierarchyQuery
from adjtree.relations.mode import TraversalMode

_constraints_enabled: ContextVar[bool] = ContextVar(
    "adjtree_constraints_enabled", default=True
)

Origin = Node | Mapping[str, Any]


class RecursiveRelation(ABC):
    """Base class for relations resolved with a recursive traversal."""

    def __init__(
        self,
        query: HierarchyQuery,
        parent: Origin,
        and_self: bool = False,
        executor: IQueryExecutor | None = None,
        logger: ILoggable | None = None,
    ) -> None:
        self.query = query
        self.parent = parent
        self.schema = query.schema
        self.mode = TraversalMode.from_flag(and_self)
        self.executor = executor
        self._logger = logger
        self._qualifier = query.from_.qualifier
        self.add_constraints()

    # ------------------------------------------------------------------
    # Constraints toggle
    # ------------------------------------------------------------------

    @staticmethod
    @contextmanager
    def no_constraints() -> Iterator[None]:
        """Build relations without their single-origin constraint.

        Used for eager loading and existence checks, where the caller adds
        its own constraints afterwards.
        """
        token = _constraints_enabled.set(False)
        try:
            yield
        finally:
            _constraints_enabled.reset(token)

    @staticmethod
    def constraints_enabled() -> bool:
        return _constraints_enabled.get()

    # ------------------------------------------------------------------
    # Plan building
    # ------------------------------------------------------------------

    @abstractmethod
    def add_constraints(self) -> None:
        """Constrain the query to the parent node."""
        ...

    @abstractmethod
    def add_eager_constraints(self, models: Sequence[Origin]) -> None:
        """Constrain the query to a batch of origin nodes."""
        ...

    @abstractmethod
    def get_relation_existence_query(
        self,
        query: HierarchyQuery,
        parent_query: QueryBuilder,
        columns: Sequence[Column] = ("*",),
    ) -> HierarchyQuery:
        """Shape *query* as a correlated subquery of *parent_query*."""
        ...

    @property
    def and_self(self) -> bool:
        return self.mode is TraversalMode.INCLUDE_SELF

    @property
    def parent_key(self) -> str:
        return self.schema.key_column

    def get_qualified_parent_key_name(self) -> str:
        return f"{self._qualifier}.{self.parent_key}"

    def get_qualified_related_pivot_key_name(self, qualifier: str | None = None) -> str:
        """Key column of the link alias that joins anchor rows to their origin."""
        link = HierarchyQuery.link_alias(qualifier or self._qualifier)
        return f"{link}.{self.parent_key}"

    def get_keys(self, models: Sequence[Origin], key: str | None = None) -> list[Any]:
        """Return the distinct, sorted keys of *models*.

        Raises:
            InvalidOriginKeyError: If a key is null or missing, or the keys
                do not all have the schema's key type.
        """
        key = key or self.parent_key
        expected = self.schema.key_property.data_type
        keys: list[Any] = []
        for model in models:
            value = model.get(key)
            if value is None:
                raise InvalidOriginKeyError(f"origin {model!r} has no '{key}' value")
            if type(value) is not expected:
                raise InvalidOriginKeyError(
                    f"'{key}' of {model!r} is {type(value).__name__}, "
                    f"expected {expected.__name__}"
                )
            keys.append(value)
        return sorted(set(keys))

    def get_relation_count_hash(
        self, query: QueryBuilder, increment: bool = True
    ) -> str:
        """Return a table alias unique within *query*'s compound statement."""
        if increment:
            return query.context.next_reserved_alias()
        return query.context.current_reserved_alias()

    @staticmethod
    def replace_table_hash(
        expression: Expression, table: str, alias: str
    ) -> Expression:
        """Point column references qualified by *table* at *alias*."""
        return expression.replace_qualifier(table, alias)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def build_dictionary(
        self, results: Sequence[TraversalRow]
    ) -> dict[Any, list[TraversalRow]]:
        return self.mode.build_dictionary(results, self.parent_key)

    def get_results(self) -> list[TraversalRow]:
        """Execute the single-origin plan."""
        return self._execute()

    def get_eager(self) -> list[TraversalRow]:
        """Execute the batched plan."""
        return self._execute()

    def match(
        self,
        models: Sequence[Node],
        results: Sequence[TraversalRow],
        relation: str,
    ) -> Sequence[Node]:
        """Attach each model's rows from the dictionary as *relation*."""
        dictionary = self.build_dictionary(results)
        for model in models:
            model.set_relation(relation, list(dictionary.get(model[self.parent_key], [])))
        return models

    def to_sql(self, pretty: bool = True) -> str:
        return self.query.to_sql(pretty=pretty)

    def _execute(self) -> list[TraversalRow]:
        if self.executor is None:
            raise AdjTreeException("No query executor configured for this relation")
        if not self.query.orders:
            self.query.order_by(self.query.qualify(self.schema.depth_column), "DESC")
            self.query.order_by(self.query.qualify(self.parent_key), "ASC")
            self.query.order_by(self.query.qualify(self.schema.link_column), "ASC")

        records = self.executor.execute(self.query.to_sql())
        if self._logger:
            self._logger.debug(f"{type(self).__name__} returned {len(records)} row(s)")
        return [TraversalRow.from_record(record, self.schema) for record in records]
