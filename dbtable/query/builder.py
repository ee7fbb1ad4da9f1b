##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
SQL text assembly for table descriptions.

Every function in this module is pure: it reads a `SchemaDescriptor` and the
caller's arguments and returns SQL text. Escaping of quoted columns is
delegated to the `quote` callable of the database handle.

The generated statements have these shapes:

    SELECT <cols> FROM <table> [JOIN ...] [WHERE ...] [GROUP BY col] [ORDER BY col [ASC|DESC]]
    INSERT INTO <table> (<cols>) VALUES (<vals>)
    UPDATE <table> SET <col> = <val>, ... WHERE <terms>
    DELETE FROM <table> WHERE <terms>
    SELECT COUNT(*) AS count FROM <table> [WHERE ...]
"""

import re
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from dbtable.exceptions import ConflictingGroupByError, MissingRequiredValueError
from dbtable.schema.columns import NULL, ColumnDefinition
from dbtable.schema.descriptor import ALL_COLUMNS, SchemaDescriptor


Quote = Callable[[Any], str]

IS_NULL = "IS NULL"
"""A `where` value that renders as `<column> IS NULL`."""

_JOIN_KEYWORD = re.compile(r"\bjoin\b", re.IGNORECASE)


def expand_columns(schema: SchemaDescriptor, columns: Optional[Iterable[str]]) -> List[str]:
    """
    Replace the `*` marker with every plain column that isn't already listed.

    Explicit columns keep their order; the columns added for `*` follow in
    declaration order.

    Args:
        schema: The table description.
        columns: The requested columns, possibly containing `*`. None means no columns.

    Returns:
        The expanded list of column names.
    """
    if not columns:
        return []
    columns = list(columns)
    expanded = [column for column in columns if column != ALL_COLUMNS]
    if ALL_COLUMNS in columns:
        expanded.extend(
            column.name for column in schema.plain_columns() if column.name not in expanded
        )
    return expanded


def column_reference(schema: SchemaDescriptor, column: ColumnDefinition) -> str:
    """
    The qualified name used to compare against a column in a WHERE clause.

    Args:
        schema: The table description.
        column: The column definition.

    Returns:
        `<foreign table>.<source column>` for foreign columns, `<table>.<column>` otherwise.
    """
    if column.is_foreign:
        return f"{column.foreign.table}.{column.source_column}"
    return f"{schema.table}.{column.name}"


def render_value(column: ColumnDefinition, value: Any, quote: Quote) -> str:
    """
    Render a value for an INSERT or UPDATE.

    The NULL marker always renders as the SQL keyword. Quoted columns are
    escaped with `quote`; other columns are rendered as-is.

    Args:
        column: The column the value belongs to.
        value: The value to render.
        quote: The database handle's escaping function.

    Returns:
        The SQL literal.
    """
    if value is None or value == NULL:
        return NULL
    if column.quoted:
        return quote(value)
    return str(value)


def join_terms(*term_lists: Iterable[str]) -> str:
    """AND-join every term of every list."""
    return " AND ".join(term for terms in term_lists for term in terms)


def join_terms_for(schema: SchemaDescriptor, columns: Iterable[str]) -> List[str]:
    """
    The terms that tie foreign and special columns to the base table.

    Args:
        schema: The table description.
        columns: The requested column names.

    Returns:
        One `<ftable>.<rkey> = <table>.<lkey>` term per foreign column and one
        term per special `where` fragment, in column order.
    """
    terms = []
    for name in columns:
        column = schema.column(name)
        if column.is_foreign:
            terms.append(f"{column.foreign.table}.{column.foreign.rkey} = {schema.table}.{column.foreign.lkey}")
        elif column.is_special and column.special.where:
            terms.append(column.special.where)
    return terms


def build_columns(schema: SchemaDescriptor, columns: Sequence[str]) -> str:
    """
    Build the column list of a SELECT.

    Args:
        schema: The table description.
        columns: Expanded column names (see `expand_columns`).

    Returns:
        The column list, or `*` when no columns were requested.
    """
    if not columns:
        return "*"

    parts = []
    for name in columns:
        column = schema.column(name)
        if column.is_foreign:
            if column.foreign.actual_column:
                parts.append(f"{column.foreign.table}.{column.foreign.actual_column} AS {name}")
            else:
                parts.append(f"{column.foreign.table}.{name}")
        elif column.is_special:
            # A special column without a select fragment still has to be named
            parts.append(column.special.select or f"{schema.table}.{name}")
        else:
            parts.append(f"{schema.table}.{name}")
    return ", ".join(parts)


def build_from(schema: SchemaDescriptor, columns: Sequence[str]) -> str:
    """
    Build the FROM clause, including one JOIN per foreign column and every
    special join fragment.

    Args:
        schema: The table description.
        columns: Expanded column names.

    Returns:
        The clause, starting with a space.
    """
    sql = f" FROM {schema.table}"
    for name in columns:
        column = schema.column(name)
        if column.is_foreign:
            if column.foreign.actual_table:
                sql += f" JOIN {column.foreign.actual_table} AS {column.foreign.table}"
            else:
                sql += f" JOIN {column.foreign.table}"
        elif column.is_special and column.special.join:
            fragment = column.special.join.strip()
            if not _JOIN_KEYWORD.search(fragment):
                sql += " JOIN"
            sql += f" {fragment}"
    return sql


def build_where(
    schema: SchemaDescriptor,
    where: Optional[Mapping[str, Any]],
    columns: Sequence[str],
    quote: Quote,
) -> str:
    """
    Build the WHERE clause of a SELECT or COUNT.

    Explicit equality terms come first, in argument order, followed by the
    join terms of the requested foreign and special columns.

    Args:
        schema: The table description.
        where: Column to value equality arguments. A value of `IS NULL` (or None)
            renders as `<column> IS NULL`.
        columns: Expanded column names.
        quote: The database handle's escaping function.

    Returns:
        The clause starting with ` WHERE `, or an empty string if there are no terms.
    """
    terms = []
    for name, value in (where or {}).items():
        column = schema.column(name)
        reference = column_reference(schema, column)
        if value is None or value == IS_NULL:
            terms.append(f"{reference} IS NULL")
        elif column.quoted:
            terms.append(f"{reference} = {quote(value)}")
        else:
            terms.append(f"{reference} = {value}")

    clause = join_terms(terms, join_terms_for(schema, columns))
    return f" WHERE {clause}" if clause else ""


def resolve_groupby(schema: SchemaDescriptor, columns: Sequence[str], groupby: Optional[str] = None) -> str:
    """
    Work out the GROUP BY column from special columns and the caller's argument.

    Args:
        schema: The table description.
        columns: Expanded column names.
        groupby: The caller's GROUP BY request, if any.

    Returns:
        The GROUP BY expression, or an empty string for none.

    Raises:
        (exceptions.ConflictingGroupByError): If the sources disagree.
    """
    requested = []
    for name in columns:
        column = schema.column(name)
        if column.is_special and column.special.groupby and column.special.groupby not in requested:
            requested.append(column.special.groupby)
    if groupby:
        if groupby not in requested:
            requested.append(groupby)

    if len(requested) > 1:
        raise ConflictingGroupByError(f"Only one GROUP BY column is legal, got: {', '.join(requested)}")
    return requested[0] if requested else ""


def parse_orderby(orderby: str) -> Tuple[str, str]:
    """
    Split an ORDER BY request into its column and direction.

    Args:
        orderby: A column name, optionally prefixed with `+` (ascending) or `-` (descending).

    Returns:
        A tuple of (column, direction) where direction is `ASC`, `DESC`, or empty.
    """
    if orderby.startswith("+"):
        return orderby[1:], "ASC"
    if orderby.startswith("-"):
        return orderby[1:], "DESC"
    return orderby, ""


def build_orderby(schema: SchemaDescriptor, orderby: Optional[str]) -> str:
    """
    Build the ORDER BY clause.

    Args:
        schema: The table description.
        orderby: A column name with an optional `+`/`-` prefix.

    Returns:
        The clause starting with a space, or an empty string.
    """
    if not orderby:
        return ""
    name, direction = parse_orderby(orderby)
    column = schema.column(name)
    table = column.foreign.table if column.is_foreign else schema.table
    sql = f" ORDER BY {table}.{name}"
    if direction:
        sql += f" {direction}"
    return sql


def build_select(
    schema: SchemaDescriptor,
    columns: Sequence[str],
    quote: Quote,
    where: Optional[Mapping[str, Any]] = None,
    groupby: Optional[str] = None,
    orderby: Optional[str] = None,
) -> str:
    """
    Build a full SELECT statement.

    Args:
        schema: The table description.
        columns: Expanded column names. Empty selects `*`.
        quote: The database handle's escaping function.
        where: Equality arguments.
        groupby: The caller's GROUP BY request.
        orderby: The caller's ORDER BY request.

    Returns:
        The SELECT statement.

    Raises:
        (exceptions.ConflictingGroupByError): If GROUP BY requests disagree.
    """
    group = resolve_groupby(schema, columns, groupby)
    sql = "SELECT " + build_columns(schema, columns)
    sql += build_from(schema, columns)
    sql += build_where(schema, where, columns, quote)
    if group:
        sql += f" GROUP BY {group}"
    sql += build_orderby(schema, orderby)
    return sql


def build_insert(schema: SchemaDescriptor, values: Mapping[str, Any], quote: Quote) -> Tuple[str, List[str]]:
    """
    Build an INSERT statement for one row.

    Plain columns are considered in declaration order. A nullable column is
    only inserted when it has a value; a non-nullable column without a value
    falls back to its default.

    Args:
        schema: The table description.
        values: The row's values.
        quote: The database handle's escaping function.

    Returns:
        A tuple of (statement, inserted column names).

    Raises:
        (exceptions.MissingRequiredValueError): If a non-nullable column has
            neither a value nor a default.
    """
    names = []
    rendered = []
    for column in schema.plain_columns():
        value = values.get(column.name)
        if value is None:
            if column.nullable:
                continue
            if not column.flags.has_default:
                raise MissingRequiredValueError(
                    f"A value is required for {column.name} in table {schema.table} in order to commit"
                )
            value = column.default
        names.append(column.name)
        rendered.append(render_value(column, value, quote))

    sql = f"INSERT INTO {schema.table} ({', '.join(names)}) VALUES ({', '.join(rendered)})"
    return sql, names


def build_update(
    schema: SchemaDescriptor,
    values: Mapping[str, Any],
    dirty: Sequence[str],
    where: str,
    quote: Quote,
) -> str:
    """
    Build an UPDATE statement that writes only the dirty columns.

    Args:
        schema: The table description.
        values: The row's values.
        dirty: The columns changed since the row was loaded or committed.
        where: The unique-key terms identifying the row.
        quote: The database handle's escaping function.

    Returns:
        The UPDATE statement.
    """
    assignments = ", ".join(
        f"{name} = {render_value(schema.column(name), values.get(name), quote)}" for name in dirty
    )
    return f"UPDATE {schema.table} SET {assignments} WHERE {where}"


def build_delete(schema: SchemaDescriptor, where: str) -> str:
    """Build a DELETE statement for the row identified by `where`."""
    return f"DELETE FROM {schema.table} WHERE {where}"


def build_count(schema: SchemaDescriptor, quote: Quote, where: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build a COUNT statement.

    Args:
        schema: The table description.
        quote: The database handle's escaping function.
        where: Equality arguments.

    Returns:
        The COUNT statement; the count is returned under the `count` alias.
    """
    return f"SELECT COUNT(*) AS count FROM {schema.table}" + build_where(schema, where, [], quote)
