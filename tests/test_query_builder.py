"""Tests for the query builder, dialect helpers and render context."""

import pytest

from adjtree.common.exceptions import AliasCollisionError
from adjtree.query.builder import Expression, QueryBuilder, TableRef
from adjtree.renderer.dialect import render_column_list, render_literal
from adjtree.renderer.render_context import RenderContext


class TestRenderLiteral:
    """Tests for SQL literal rendering."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "NULL"),
            (True, "TRUE"),
            (False, "FALSE"),
            (42, "42"),
            (1.5, "1.5"),
            ("shoes", "'shoes'"),
            ("it's", "'it''s'"),
            ((1, "a"), "(1, 'a')"),
        ],
    )
    def test_literals(self, value, expected: str) -> None:
        assert render_literal(value) == expected

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            render_literal(object())

    def test_column_list(self) -> None:
        assert render_column_list("t.id") == "t.id"
        assert render_column_list(["t.id"]) == "t.id"
        assert render_column_list(["t.a", "t.b"]) == "(t.a, t.b)"


class TestTableRef:
    def test_plain(self) -> None:
        ref = TableRef("categories")
        assert ref.render() == "categories"
        assert ref.qualifier == "categories"

    def test_aliased(self) -> None:
        ref = TableRef("categories", "c")
        assert ref.render() == "categories AS c"
        assert ref.qualifier == "c"

    def test_qualified_name_uses_bare_table(self) -> None:
        ref = TableRef("catalog.shop.categories")
        assert ref.render() == "catalog.shop.categories"
        assert ref.qualifier == "categories"


class TestQueryBuilder:
    """Tests for QueryBuilder clauses."""

    def test_default_select(self) -> None:
        assert QueryBuilder("t").to_sql() == "SELECT *\nFROM t"

    def test_full_statement(self) -> None:
        query = (
            QueryBuilder(TableRef("categories", "c"))
            .select(["c.id", "c.name"])
            .join(TableRef("categories", "p"), "p.id", "=", "c.parent_id")
            .where("c.name", "=", "shoes")
            .where_column("p.id", "<>", "c.id")
            .order_by("c.id", "desc")
        )

        assert query.to_sql() == (
            "SELECT\n"
            "  c.id,\n"
            "  c.name\n"
            "FROM categories AS c\n"
            "JOIN categories AS p ON p.id = c.parent_id\n"
            "WHERE c.name = 'shoes'\n"
            "  AND p.id <> c.id\n"
            "ORDER BY c.id DESC"
        )

    def test_where_null(self) -> None:
        query = QueryBuilder("t").where("t.a", "=", None).where("t.b", "!=", None)

        assert query.wheres == ["t.a IS NULL", "t.b IS NOT NULL"]

    def test_where_in_tuple_columns(self) -> None:
        query = QueryBuilder("t").where_in(["t.a", "t.b"], [(1, 2), (3, 4)])

        assert query.wheres == ["(t.a, t.b) IN ((1, 2), (3, 4))"]

    def test_where_in_empty(self) -> None:
        query = QueryBuilder("t").where_in("t.id", [])

        assert query.wheres == ["1 = 0"]

    def test_invalid_operator(self) -> None:
        with pytest.raises(ValueError, match="Unsupported operator"):
            QueryBuilder("t").where("t.id", "===", 1)

    def test_invalid_order_direction(self) -> None:
        with pytest.raises(ValueError, match="Invalid order direction"):
            QueryBuilder("t").order_by("t.id", "sideways")

    def test_qualify(self) -> None:
        query = QueryBuilder(TableRef("t", "x"))

        assert query.qualify("id") == "x.id"
        assert query.qualify("y.id") == "y.id"

    def test_new_builder_claims_its_qualifier(self) -> None:
        query = QueryBuilder(TableRef("t", "x"))

        assert query.context.is_claimed("x")

    def test_shared_context_is_kept(self) -> None:
        context = RenderContext()
        query = QueryBuilder("t", context)

        assert query.context is context
        assert not context.is_claimed("t")

    def test_compact_output(self) -> None:
        query = QueryBuilder("t").select(["t.a", "t.b"]).where("t.a", ">", 1)

        assert query.to_sql(pretty=False) == "SELECT t.a, t.b FROM t WHERE t.a > 1"

    def test_compact_output_keeps_literal_spacing(self) -> None:
        query = QueryBuilder("t").where("t.a", "=", "( x )")

        assert query.to_sql(pretty=False) == "SELECT * FROM t WHERE t.a = '( x )'"


class TestExpression:
    """Tests for Expression.replace_qualifier."""

    def test_replaces_column_qualifier(self) -> None:
        expr = Expression("COUNT(t.id) + MAX(t.depth)")

        assert expr.replace_qualifier("t", "a").sql == "COUNT(a.id) + MAX(a.depth)"

    def test_ignores_longer_identifiers(self) -> None:
        expr = Expression("tt.id + t.id + x.t.id")

        assert expr.replace_qualifier("t", "a").sql == "tt.id + a.id + x.t.id"

    def test_escapes_table_name(self) -> None:
        expr = Expression("s.t.id + sxt.id")

        assert expr.replace_qualifier("s.t", "a").sql == "a.id + sxt.id"

    def test_str(self) -> None:
        assert str(Expression("1")) == "1"


class TestRenderContext:
    """Tests for reserved alias bookkeeping."""

    def test_reserved_aliases_increment(self) -> None:
        context = RenderContext()

        assert context.current_reserved_alias() == "adjtree_reserved_0"
        assert context.next_reserved_alias() == "adjtree_reserved_0"
        assert context.next_reserved_alias() == "adjtree_reserved_1"
        assert context.alias_counter == 2
        assert context.is_claimed("adjtree_reserved_1")

    def test_claim_twice_fails(self) -> None:
        context = RenderContext()
        context.claim("c")

        with pytest.raises(AliasCollisionError, match="Alias collision"):
            context.claim("c")

    def test_indent(self) -> None:
        assert RenderContext.indent(0) == ""
        assert RenderContext.indent(2) == "    "
