##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Tests for the `query/builder.py` module.
"""

from typing import Callable

import pytest

from dbtable.exceptions import ConflictingGroupByError, MissingRequiredValueError
from dbtable.query.builder import (
    build_columns,
    build_count,
    build_delete,
    build_from,
    build_insert,
    build_orderby,
    build_select,
    build_update,
    build_where,
    expand_columns,
    parse_orderby,
    render_value,
    resolve_groupby,
)
from dbtable.schema import SchemaDescriptor, column_from_dict
from tests.fixtures.tables import TestTable


class TestExpandColumns:
    """Tests for `expand_columns`."""

    def test_no_columns(self, person_schema: SchemaDescriptor):
        """
        Test that no request expands to no columns.

        Args:
            person_schema: The `person` descriptor.
        """
        assert expand_columns(person_schema, None) == []
        assert expand_columns(person_schema, []) == []

    def test_star_appends_plain_columns(self, person_schema: SchemaDescriptor):
        """
        Test that `*` adds every plain column after the explicit ones, in declaration order.

        Args:
            person_schema: The `person` descriptor.
        """
        assert expand_columns(person_schema, ["group_name", "*"]) == [
            "group_name",
            "id",
            "login",
            "name",
            "age",
            "time",
            "group_id",
            "site_id",
        ]

    def test_star_does_not_repeat_explicit_columns(self, person_schema: SchemaDescriptor):
        """
        Test that columns listed explicitly keep their place and aren't added twice.

        Args:
            person_schema: The `person` descriptor.
        """
        assert expand_columns(person_schema, ["login", "*"]) == [
            "login",
            "id",
            "name",
            "age",
            "time",
            "group_id",
            "site_id",
        ]


class TestBuildColumns:
    """Tests for the column list and FROM clause of a SELECT."""

    def test_star_when_no_columns(self, person_schema: SchemaDescriptor):
        """
        Test that an empty column list selects `*`.

        Args:
            person_schema: The `person` descriptor.
        """
        assert build_columns(person_schema, []) == "*"

    def test_every_column_variant(self, person_schema: SchemaDescriptor):
        """
        Test the rendering of plain, foreign, aliased foreign, and special columns.

        Args:
            person_schema: The `person` descriptor.
        """
        columns = ["id", "group_name", "site_name", "post_count"]
        assert build_columns(person_schema, columns) == (
            "person.id, grp.name AS group_name, site.site_name, COUNT(post.id) AS post_count"
        )
        assert build_from(person_schema, columns) == (
            " FROM person JOIN grp JOIN website AS site LEFT JOIN post ON post.author_id = person.id"
        )

    def test_special_join_without_keyword(self):
        """Test that a special join fragment without a JOIN keyword gets one."""
        schema = SchemaDescriptor(
            table="person",
            columns=[
                column_from_dict("id", {}),
                column_from_dict("tags", {"special": {"select": "tag.names AS tags", "join": "tag ON tag.id = person.id"}}),
            ],
        )
        assert build_from(schema, ["tags"]) == " FROM person JOIN tag ON tag.id = person.id"

    def test_special_join_keyword_detection_is_word_based(self):
        """Test that a table name merely containing `join` still gets a JOIN keyword."""
        schema = SchemaDescriptor(
            table="person",
            columns=[
                column_from_dict("id", {}),
                column_from_dict("joined", {"special": {"select": "rejoined.at AS joined", "join": "rejoined"}}),
            ],
        )
        assert build_from(schema, ["joined"]) == " FROM person JOIN rejoined"


class TestBuildWhere:
    """Tests for `build_where`."""

    def test_no_terms(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that no arguments and no join terms give no WHERE clause.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        assert build_where(person_schema, None, [], quote) == ""
        assert build_where(person_schema, {}, ["id", "login"], quote) == ""

    def test_equality_terms(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that quoted columns are escaped and others are rendered as-is, in argument order.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        assert build_where(person_schema, {"login": "o'neil", "age": 30}, [], quote) == (
            " WHERE person.login = 'o''neil' AND person.age = 30"
        )

    @pytest.mark.parametrize("value", ["IS NULL", None])
    def test_is_null(self, person_schema: SchemaDescriptor, quote: Callable, value):
        """
        Test that the `IS NULL` marker (and None) render as a NULL test.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
            value: The NULL request.
        """
        assert build_where(person_schema, {"name": value}, [], quote) == " WHERE person.name IS NULL"

    def test_foreign_argument_and_join_terms(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that a foreign argument compares against the joined table and that
        requested foreign columns add their join term after the arguments.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        assert build_where(person_schema, {"group_name": "admins"}, ["group_name"], quote) == (
            " WHERE grp.name = 'admins' AND grp.id = person.group_id"
        )

    def test_special_where_fragment(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that a requested special column adds its WHERE fragment.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        assert build_where(person_schema, None, ["post_count"], quote) == " WHERE post.deleted = 0"


class TestGroupBy:
    """Tests for `resolve_groupby`."""

    def test_from_special_column(self, person_schema: SchemaDescriptor):
        """
        Test that a special column's GROUP BY is used.

        Args:
            person_schema: The `person` descriptor.
        """
        assert resolve_groupby(person_schema, ["post_count"]) == "person.id"

    def test_matching_request(self, person_schema: SchemaDescriptor):
        """
        Test that a request equal to the special column's GROUP BY doesn't conflict.

        Args:
            person_schema: The `person` descriptor.
        """
        assert resolve_groupby(person_schema, ["post_count"], "person.id") == "person.id"

    def test_conflicting_request(self, person_schema: SchemaDescriptor):
        """
        Test that two different GROUP BY requests raise `ConflictingGroupByError`.

        Args:
            person_schema: The `person` descriptor.
        """
        with pytest.raises(ConflictingGroupByError):
            resolve_groupby(person_schema, ["post_count"], "person.login")

    def test_caller_only(self, person_schema: SchemaDescriptor):
        """
        Test that the caller's request is used on its own, and that no request gives none.

        Args:
            person_schema: The `person` descriptor.
        """
        assert resolve_groupby(person_schema, [], "age") == "age"
        assert resolve_groupby(person_schema, ["id"]) == ""


class TestOrderBy:
    """Tests for `parse_orderby` and `build_orderby`."""

    @pytest.mark.parametrize(
        "orderby, expected",
        [
            ("-time", " ORDER BY person.time DESC"),
            ("+time", " ORDER BY person.time ASC"),
            ("time", " ORDER BY person.time"),
            ("group_name", " ORDER BY grp.group_name"),
            (None, ""),
            ("", ""),
        ],
    )
    def test_build_orderby(self, person_schema: SchemaDescriptor, orderby: str, expected: str):
        """
        Test the direction prefixes and the table used for foreign columns.

        Args:
            person_schema: The `person` descriptor.
            orderby: The ORDER BY request.
            expected: The expected clause.
        """
        assert build_orderby(person_schema, orderby) == expected

    def test_parse_orderby(self):
        """Test splitting a request into column and direction."""
        assert parse_orderby("-id") == ("id", "DESC")
        assert parse_orderby("+id") == ("id", "ASC")
        assert parse_orderby("id") == ("id", "")


class TestBuildSelect:
    """Tests for `build_select`."""

    def test_minimal_table(self, quote: Callable):
        """
        Test that loading a one-column table with no arguments selects everything.

        Args:
            quote: The escaping function.
        """
        assert build_select(TestTable.descriptor(), [], quote) == "SELECT * FROM test"

    def test_every_clause(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test the order of the clauses of a full SELECT.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        sql = build_select(person_schema, ["id", "post_count"], quote, where={"login": "jdoe"}, orderby="-id")
        assert sql == (
            "SELECT person.id, COUNT(post.id) AS post_count FROM person"
            " LEFT JOIN post ON post.author_id = person.id"
            " WHERE person.login = 'jdoe' AND post.deleted = 0"
            " GROUP BY person.id ORDER BY person.id DESC"
        )


class TestBuildInsert:
    """Tests for `build_insert`."""

    def test_defaults_fill_required_columns(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that unset nullable columns are left out, unset required columns use
        their defaults, and foreign and special columns never appear.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        sql, names = build_insert(person_schema, {"login": "jdoe"}, quote)
        assert sql == "INSERT INTO person (id, login, group_id) VALUES (NULL, 'jdoe', 1)"
        assert names == ["id", "login", "group_id"]

    def test_values_and_null_marker(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that set values are escaped per column and the NULL marker stays a keyword.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        values = {"login": "o'neil", "name": "NULL", "age": 40, "group_name": "admins", "post_count": 3}
        sql, _ = build_insert(person_schema, values, quote)
        assert sql == "INSERT INTO person (id, login, name, age, group_id) VALUES (NULL, 'o''neil', NULL, 40, 1)"

    def test_missing_required_value(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that a required column with no value and no default can't be inserted.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        with pytest.raises(MissingRequiredValueError, match="login"):
            build_insert(person_schema, {"name": "Jane"}, quote)


class TestWriteStatements:
    """Tests for `build_update`, `build_delete` and `build_count`."""

    def test_update_writes_dirty_columns_only(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test that UPDATE sets the dirty columns, in the order they were changed.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        values = {"id": 7, "login": "x", "age": 3, "name": "Jane"}
        assert build_update(person_schema, values, ["age", "login"], "person.id = 7", quote) == (
            "UPDATE person SET age = 3, login = 'x' WHERE person.id = 7"
        )

    def test_delete(self):
        """Test the DELETE statement."""
        assert build_delete(TestTable.descriptor(), "test.id = 1") == "DELETE FROM test WHERE test.id = 1"

    def test_count(self, person_schema: SchemaDescriptor, quote: Callable):
        """
        Test the COUNT statement with and without arguments.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
        """
        assert build_count(person_schema, quote) == "SELECT COUNT(*) AS count FROM person"
        assert build_count(person_schema, quote, {"age": 3}) == "SELECT COUNT(*) AS count FROM person WHERE person.age = 3"

    @pytest.mark.parametrize(
        "column, value, expected",
        [
            ("login", "jdoe", "'jdoe'"),
            ("age", 30, "30"),
            ("name", "NULL", "NULL"),
            ("name", None, "NULL"),
        ],
    )
    def test_render_value(self, person_schema: SchemaDescriptor, quote: Callable, column: str, value, expected: str):
        """
        Test rendering a single value for a write.

        Args:
            person_schema: The `person` descriptor.
            quote: The escaping function.
            column: The column name.
            value: The value to render.
            expected: The expected literal.
        """
        assert render_value(person_schema.column(column), value, quote) == expected
