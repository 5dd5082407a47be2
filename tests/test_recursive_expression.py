"""Tests for HierarchyQuery.with_relationship_expression and CTE rendering."""

import pytest

from adjtree.common.exceptions import AdjTreeInternalErrorException
from adjtree.common.schema import HierarchySchema
from adjtree.query.builder import QueryBuilder, TableRef
from adjtree.query.recursive import HierarchyQuery, TraversalDirection
from adjtree.renderer.dialect import UnionStrategy
from adjtree.renderer.recursive_cte_renderer import RecursiveCTERenderer
from adjtree.renderer.sql_renderer import SQLRenderer


def _origin(key: int):
    def constraint(query: QueryBuilder) -> None:
        query.where("categories.id", "=", key)

    return constraint


class TestRelationshipExpression:
    """Tests for the expression registered on the query."""

    def test_query_reads_from_expression(self, category_schema: HierarchySchema) -> None:
        query = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.ASC, _origin(4), 0
        )

        assert query.from_ == TableRef("categories_tree", "categories")
        assert query.qualify("depth") == "categories.depth"

    def test_expression_fields(self, category_schema: HierarchySchema) -> None:
        query = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.ASC, _origin(4), 0, union=UnionStrategy.UNION
        )
        (expression,) = query.expressions

        assert expression.name == "categories_tree"
        assert expression.union is UnionStrategy.UNION
        assert expression.direction is TraversalDirection.ASC
        assert expression.initial_depth == 0
        assert expression.anchor.wheres == ["categories.id = 4"]

    def test_descending_step(self, category_schema: HierarchySchema) -> None:
        sql = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.DESC, _origin(1), 0
        ).to_sql()

        assert "-- Recursive step: extend paths towards children" in sql
        assert "JOIN categories_tree AS r ON r.id = categories.parent_id" in sql
        assert "r.depth + 1 AS depth" in sql

    def test_descending_link_alias(self, category_schema: HierarchySchema) -> None:
        def constraint(query: QueryBuilder) -> None:
            query.where("categories_link.id", "=", 1)

        sql = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.DESC, constraint, 1
        ).to_sql()

        assert (
            "JOIN categories AS categories_link "
            "ON categories_link.id = categories.parent_id"
        ) in sql
        assert "1 AS depth" in sql

    def test_descending_max_depth(self) -> None:
        schema = HierarchySchema(name="categories", max_depth=3)
        sql = HierarchyQuery(schema).with_relationship_expression(
            TraversalDirection.DESC, _origin(1), 0
        ).to_sql()

        assert "  AND r.depth < 3" in sql

    def test_from_override_aliases_table(self, category_schema: HierarchySchema) -> None:
        def constraint(query: QueryBuilder) -> None:
            query.where("n.id", "=", 4)

        query = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.ASC, constraint, 0, from_=TableRef("categories", "n")
        )
        sql = query.to_sql()

        assert query.from_ == TableRef("n_tree", "n")
        assert "FROM categories AS n\n" in sql
        assert "JOIN n_tree AS r ON r.parent_id = n.id" in sql

    def test_columns_override(self, category_schema: HierarchySchema) -> None:
        query = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.ASC, _origin(4), 0, columns=["id", "parent_id"]
        )
        (expression,) = query.expressions

        assert expression.anchor.columns == [
            "categories.id",
            "categories.parent_id",
            "0 AS depth",
            "ARRAY(categories.id) AS path",
            "categories.id AS link_key",
        ]

    def test_custom_metadata_columns(self) -> None:
        schema = HierarchySchema(
            name="t", depth_column="lvl", path_column="trail", link_column="via"
        )
        sql = HierarchyQuery(schema).with_relationship_expression(
            TraversalDirection.ASC, lambda q: q.where("t.id", "=", 1), 0
        ).to_sql()

        assert "r.lvl - 1 AS lvl" in sql
        assert "CONCAT(r.trail, ARRAY(t.id)) AS trail" in sql
        assert "r.id AS via" in sql
        assert "NOT ARRAY_CONTAINS(r.trail, t.id)" in sql


class TestRecursiveCTERenderer:
    """Tests for CTE body rendering."""

    def test_missing_projection_fails(self, category_schema: HierarchySchema) -> None:
        query = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.ASC, _origin(4), 0
        )
        (expression,) = query.expressions
        expression.step.columns = []
        renderer = RecursiveCTERenderer(query.context, SQLRenderer().render_select)

        with pytest.raises(AdjTreeInternalErrorException):
            renderer.render_recursive_cte(expression)

    def test_nested_rendering_is_indented(self, category_schema: HierarchySchema) -> None:
        query = HierarchyQuery(category_schema).with_relationship_expression(
            TraversalDirection.ASC, _origin(4), 0
        )
        sql = SQLRenderer().render_query(query, depth=1)

        assert all(line.startswith("  ") for line in sql.splitlines() if line)
        assert sql.startswith("  WITH RECURSIVE\n    categories_tree AS (")
