##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
This module defines the `Table` base class, an object representation of rows
loaded from a database table.

A table class is written by subclassing `Table` and implementing `describe`,
which returns the table's `SchemaDescriptor` (or the equivalent dictionary):

    class User(Table):
        @classmethod
        def describe(cls):
            return {
                "table": "user",
                "unique_keys": [["id"], ["login"]],
                "columns": {
                    "id": {"immutable": True, "autoincrement": True, "default": "NULL"},
                    "login": {"quoted": True},
                    "group_name": {"foreign": {"table": "grp", "lkey": "group_id", "rkey": "id",
                                               "actual_column": "name"}},
                    "group_id": {},
                },
                "related": {Group: {"id": "group_id"}},
            }

    users = User.load(db, where={"group_id": 3}, columns=["*"], orderby="-id")
    users.set({"login": "jdoe"}, row=0)
    users.commit(row=0)

Every public operation makes at most one round trip to the database handle
and raises a `DBTableError` subclass on failure.
"""

import functools
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from tabulate import tabulate

from dbtable.db.base import DatabaseHandle, Statement
from dbtable.debug import DEFAULT_DEBUG_LEVEL, ERROR, INFO, TRACE, DebugSink, LoggingDebugSink
from dbtable.exceptions import (
    ConfigurationError,
    DBTableError,
    InvalidColumnSetError,
    MissingCollaboratorError,
    NoDataError,
    QueryError,
    RowIndexError,
    UnknownRelationError,
)
from dbtable.query.builder import (
    build_columns,
    build_count,
    build_delete,
    build_from,
    build_insert,
    build_select,
    build_update,
    expand_columns,
    parse_orderby,
)
from dbtable.query.unique_key import unique_where
from dbtable.rows import Row
from dbtable.schema.descriptor import SchemaDescriptor


LOG = logging.getLogger(__name__)

T = TypeVar("T", bound="Table")


def reports_errors(method):
    """
    Decorator sending the message of any `DBTableError` raised by `method`
    to the table's debug sink at error severity before re-raising it.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except DBTableError as exc:
            self._debug(ERROR, str(exc))
            raise

    return wrapper


class Table:
    """
    Base class for object representations of database tables.

    Subclasses must implement `describe`. Instances are only created through
    `load` and `create`.

    Attributes:
        schema (SchemaDescriptor): The table description shared by every instance of the class.

    Methods:
        describe (classmethod):
            Return the table description. Must be implemented by subclasses.

        descriptor (classmethod):
            The validated, cached `SchemaDescriptor` of the class.

        load (classmethod):
            Query the database and build a table object from the matching rows.

        create (classmethod):
            Build a table object holding one new, unsaved row.

        refresh:
            Reload columns of one row from the database.

        commit:
            Write the changes of one row to the database.

        remove:
            Delete one row from the database.

        get:
            Read a column value of one row.

        set:
            Change column values of one row.

        count:
            Count the database rows matching equality arguments.

        load_related:
            Load the rows of a related table that belong to one row.

        columns:
            The declared column names.
    """

    _schema: Optional[SchemaDescriptor] = None

    def __init__(
        self,
        db: DatabaseHandle,
        debug_sink: Optional[DebugSink] = None,
        debug_level: Optional[int] = None,
    ):
        """
        Initialize an empty table object. Use `load` or `create` instead.

        Args:
            db: The database handle.
            debug_sink: Where debug messages go. Defaults to the `dbtable` logger.
            debug_level: The lowest severity that reaches the sink. Defaults to errors only.

        Raises:
            (exceptions.ConfigurationError): If the table description is invalid.
            (exceptions.MissingCollaboratorError): If no database handle was given.
        """
        self._sink: DebugSink = debug_sink or LoggingDebugSink()
        self._debug_level: int = DEFAULT_DEBUG_LEVEL if debug_level is None else debug_level
        self._rows: List[Row] = []
        self._query_rows: int = 0
        self._num_rows: int = 0

        try:
            self.schema: SchemaDescriptor = type(self).descriptor()
        except ConfigurationError as exc:
            self._debug(ERROR, str(exc))
            raise

        if db is None:
            self._debug(ERROR, "No database parameter passed to constructor!")
            raise MissingCollaboratorError(f"No database handle given to {type(self).__name__}.")
        self._db: DatabaseHandle = db

    @classmethod
    def describe(cls) -> Union[SchemaDescriptor, Dict]:
        """
        Describe the table.

        Returns:
            A `SchemaDescriptor`, or a dictionary accepted by `SchemaDescriptor.from_dict`.
        """
        raise NotImplementedError(f"{cls.__name__} must implement a `describe` method.")

    @classmethod
    def descriptor(cls) -> SchemaDescriptor:
        """
        The validated table description of this class, built once on first use.

        Returns:
            The class's `SchemaDescriptor`.

        Raises:
            (exceptions.ConfigurationError): If `describe` is missing or returns an
                invalid description.
        """
        schema = cls.__dict__.get("_schema")
        if schema is not None:
            return schema

        try:
            described = cls.describe()
        except NotImplementedError as exc:
            raise ConfigurationError(str(exc)) from exc

        if isinstance(described, Mapping):
            described = SchemaDescriptor.from_dict(described)
        if not isinstance(described, SchemaDescriptor):
            raise ConfigurationError(
                f"{cls.__name__}.describe() returned {type(described).__name__}, not a table description."
            )

        cls._schema = described
        LOG.debug(f"Built table description for {cls.__name__} ({len(described.columns)} columns)")
        return described

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.schema.table!r}, num_rows={self._num_rows})"

    def __str__(self) -> str:
        names = self.columns()
        data = [[row.values.get(name) for name in names] + [row.persisted, ", ".join(row.dirty)] for row in self._rows]
        return tabulate(data, headers=names + ["persisted", "dirty"], showindex=True)

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def db(self) -> DatabaseHandle:
        """The database handle used by this table object."""
        return self._db

    @property
    def num_rows(self) -> int:
        """The number of rows stored in this table object."""
        return self._num_rows

    @property
    def query_rows(self) -> int:
        """The number of rows the last `load` query matched, before `index`/`count` slicing."""
        return self._query_rows

    @property
    def rows(self) -> Tuple[Row, ...]:
        return tuple(self._rows)

    @property
    def debug_level(self) -> int:
        """The lowest severity (0 trace, 1 info, 2 error) sent to the debug sink."""
        return self._debug_level

    @debug_level.setter
    def debug_level(self, level: int):
        self._debug_level = int(level)

    def columns(self) -> List[str]:
        """The declared column names, in declaration order."""
        return self.schema.column_names()

    def _debug(self, level: int, message: str):
        if level >= self._debug_level:
            self._sink.emit(level, message)

    def _quote(self, value: Any) -> str:
        return self._db.quote(value)

    def _row(self, index: int) -> Row:
        if not isinstance(index, int) or not 0 <= index < len(self._rows):
            raise RowIndexError(f"Row doesn't exist: {index}")
        return self._rows[index]

    @contextmanager
    def _run(self, sql: str) -> Iterator[Statement]:
        """
        Prepare and execute `sql`, yielding the executed statement.

        The statement is finished on every exit path, including failures.

        Args:
            sql: The SQL text.

        Yields:
            The executed statement.

        Raises:
            (exceptions.QueryError): If the statement can't be prepared or executed.
        """
        self._debug(TRACE, sql)
        try:
            statement = self._db.prepare(sql)
        except DBTableError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            raise QueryError(f"Error preparing SQL: {sql} ({exc})", sql) from exc
        if statement is None:
            raise QueryError(f"Error preparing SQL: {sql}", sql)

        try:
            try:
                executed = statement.execute()
            except DBTableError:
                raise
            except Exception as exc:  # pylint: disable=broad-except
                raise QueryError(f"Error executing SQL: {sql} ({exc})", sql) from exc
            if not executed:
                raise QueryError(f"Error executing SQL: {sql}", sql)
            yield statement
        finally:
            statement.finish()

    def _execute_direct(self, sql: str):
        self._debug(TRACE, sql)
        try:
            executed = self._db.execute_direct(sql)
        except DBTableError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            raise QueryError(f"Error executing SQL: {sql} ({exc})", sql) from exc
        if not executed:
            raise QueryError(f"Error executing SQL: {sql}", sql)

    def _trace_key(self, index: int):
        return lambda reason: self._debug(INFO, f"{reason} in row {index}")

    @classmethod
    def load(
        cls: Type[T],
        db: DatabaseHandle,
        where: Optional[Mapping[str, Any]] = None,
        columns: Optional[Sequence[str]] = None,
        index: int = 0,
        count: int = 0,
        groupby: Optional[str] = None,
        orderby: Optional[str] = None,
        debug_sink: Optional[DebugSink] = None,
        debug_level: Optional[int] = None,
    ) -> T:
        """
        Query the database and build a table object from the matching rows.

        Every row of the result is fetched, but only rows `index` through
        `index + count - 1` are stored.

        Args:
            db: The database handle.
            where: Column to value equality arguments. A value of `IS NULL` matches NULL.
            columns: Columns to fetch. `*` stands for every plain column. None
                selects `*` from the database and stores every declared column.
            index: The first result row to store.
            count: The number of rows to store. 0 stores every row from `index` on.
            groupby: A GROUP BY expression.
            orderby: A column to sort by, prefixed with `+` (ascending) or `-` (descending).
            debug_sink: Where debug messages go.
            debug_level: The lowest severity that reaches the sink.

        Returns:
            A table object holding the stored rows.

        Raises:
            (exceptions.InvalidColumnSetError): If any referenced column isn't declared.
            (exceptions.ConflictingGroupByError): If GROUP BY requests disagree.
            (exceptions.QueryError): If the query fails.
            (exceptions.NoDataError): If no rows fall in the requested window.
        """
        table = cls(db, debug_sink=debug_sink, debug_level=debug_level)
        table._load(where=where, columns=columns, index=index, count=count, groupby=groupby, orderby=orderby)
        return table

    @reports_errors
    def _load(
        self,
        where: Optional[Mapping[str, Any]],
        columns: Optional[Sequence[str]],
        index: int,
        count: int,
        groupby: Optional[str],
        orderby: Optional[str],
    ):
        where = dict(where or {})
        self.schema.check_columns(where)
        if orderby:
            self.schema.check_columns([parse_orderby(orderby)[0]])
        columns = expand_columns(self.schema, self.schema.check_columns(columns or []))

        sql = build_select(self.schema, columns, self._quote, where=where, groupby=groupby, orderby=orderby)

        index = index or 0
        count = count or 0
        stored_columns = columns or self.schema.column_names()
        rows = []
        seen = 0
        with self._run(sql) as statement:
            while True:
                record = statement.fetch_next_row()
                if record is None:
                    break
                rownum = seen
                seen += 1
                if rownum < index or (count and rownum >= index + count):
                    continue

                # Seed with the equality arguments; returned columns take precedence
                values = {name: value for name, value in where.items() if value != "IS NULL"}
                for name in stored_columns:
                    if name in record:
                        values[name] = record[name]
                    else:
                        values.setdefault(name, None)
                rows.append(Row(values=values, persisted=True))

        self._query_rows = seen
        if not rows:
            raise NoDataError(f"No data was stored from {seen} matching row(s) of table '{self.schema.table}'.")
        self._rows = rows
        self._num_rows = len(rows)

    @classmethod
    def create(
        cls: Type[T],
        db: DatabaseHandle,
        debug_sink: Optional[DebugSink] = None,
        debug_level: Optional[int] = None,
    ) -> T:
        """
        Build a table object holding one new row that isn't in the database yet.

        No SQL is run; the row is written by `commit`.

        Args:
            db: The database handle.
            debug_sink: Where debug messages go.
            debug_level: The lowest severity that reaches the sink.

        Returns:
            A table object with one empty, unsaved row.
        """
        table = cls(db, debug_sink=debug_sink, debug_level=debug_level)
        table._rows = [Row()]
        table._num_rows = 1
        return table

    @reports_errors
    def refresh(self, columns: Sequence[str], row: int = 0):
        """
        Reload columns of one row from the database.

        The row is located through its unique key; the reloaded columns are
        no longer considered changed.

        Args:
            columns: The columns to reload. `*` stands for every plain column.
            row: The row index.

        Raises:
            (exceptions.InvalidColumnSetError): If any column isn't declared.
            (exceptions.NoUsableUniqueKeyError): If the row can't be identified.
            (exceptions.QueryError): If the query fails.
            (exceptions.NoDataError): If the query returns no row.
        """
        if not columns:
            raise InvalidColumnSetError("No columns parameter passed to refresh()")
        columns = expand_columns(self.schema, self.schema.check_columns(columns))
        target = self._row(row)

        where = unique_where(self.schema, target, self._quote, columns, trace=self._trace_key(row))
        sql = "SELECT " + build_columns(self.schema, columns) + build_from(self.schema, columns) + " WHERE " + where

        with self._run(sql) as statement:
            record = statement.fetch_next_row()
        if record is None:
            raise NoDataError(f"No data returned by SQL in refresh() for row {row}.")

        for name in columns:
            target.values[name] = record.get(name)
        target.mark_refreshed(columns)

    @reports_errors
    def commit(self, row: int = 0):
        """
        Write the changes of one row to the database.

        A row already in the database is UPDATEd through its unique key, writing
        only the changed columns. A new row is INSERTed; if an autoincrement
        column has no value it receives the key generated by the database.
        Nothing is run if the row has no changes.

        Args:
            row: The row index.

        Raises:
            (exceptions.RowIndexError): If the row doesn't exist.
            (exceptions.NoUsableUniqueKeyError): If an existing row can't be identified.
            (exceptions.MissingRequiredValueError): If a new row lacks a required value.
            (exceptions.QueryError): If the statement fails.
        """
        target = self._row(row)
        if not target.dirty:
            self._debug(INFO, f"nothing changed for row {row}!")
            return

        if target.persisted:
            where = unique_where(self.schema, target, self._quote, trace=self._trace_key(row))
            sql = build_update(self.schema, target.values, target.dirty, where, self._quote)
            with self._run(sql):
                pass
        else:
            sql, _ = build_insert(self.schema, target.values, self._quote)
            with self._run(sql) as statement:
                for column in self.schema.plain_columns():
                    if column.autoincrement and not target.has_value(column.name):
                        target.values[column.name] = statement.last_insert_id
                        break

        target.mark_committed()

    @reports_errors
    def remove(self, row: int = 0):
        """
        Delete one row from the database.

        The row stays in this object, marked as not in the database, with every
        value it holds marked as changed, so a later `commit` INSERTs it again.

        Args:
            row: The row index.

        Raises:
            (exceptions.RowIndexError): If the row doesn't exist.
            (exceptions.NoUsableUniqueKeyError): If the row can't be identified.
            (exceptions.QueryError): If the statement fails.
        """
        target = self._row(row)
        where = unique_where(self.schema, target, self._quote, trace=self._trace_key(row))
        self._execute_direct(build_delete(self.schema, where))

        target.persisted = False
        for column in self.schema.plain_columns():
            if target.has_value(column.name):
                target.mark_dirty(column.name)

    @reports_errors
    def get(self, column: str, row: int = 0) -> Any:
        """
        Read a column value of one row.

        Args:
            column: The column name.
            row: The row index.

        Returns:
            The value, or None if the column has no value.

        Raises:
            (exceptions.UnknownColumnError): If the column isn't declared.
            (exceptions.RowIndexError): If the row doesn't exist.
        """
        self.schema.column(column)
        return self._row(row).values.get(column)

    @reports_errors
    def set(self, changes: Mapping[str, Any], row: int = 0):
        """
        Change column values of one row.

        Nothing is changed if any column is unknown or can't be written.

        Args:
            changes: Column to new value. An empty string stores NULL in a nullable column.
            row: The row index.

        Raises:
            (exceptions.RowIndexError): If the row doesn't exist.
            (exceptions.UnknownColumnError): If a column isn't declared.
            (exceptions.ImmutableColumnError): If a column is immutable, foreign, or special.
        """
        if not isinstance(changes, Mapping):
            raise TypeError(f"set() expects a mapping of changes, got {type(changes).__name__}")
        self._row(row).set_values(self.schema, changes)

    @reports_errors
    def count(self, where: Optional[Mapping[str, Any]] = None) -> int:
        """
        Count the database rows matching equality arguments.

        No rows are stored in this object.

        Args:
            where: Column to value equality arguments.

        Returns:
            The number of matching rows.

        Raises:
            (exceptions.InvalidColumnSetError): If any column isn't declared.
            (exceptions.QueryError): If the query fails.
        """
        where = dict(where or {})
        self.schema.check_columns(where)
        sql = build_count(self.schema, self._quote, where)
        with self._run(sql) as statement:
            record = statement.fetch_next_row()
        if record is None:
            raise QueryError(f"No count returned by SQL: {sql}", sql)
        return record["count"]

    @reports_errors
    def load_related(self, target_type: Type["Table"], row: int = 0, **load_args) -> "Table":
        """
        Load the rows of a related table that belong to one row of this table.

        Every `where` argument naming a column of the declared relation is
        replaced with this row's value of the mapped local column. The
        database handle of this object is used unless `db` is given.

        Args:
            target_type: The related table class.
            row: The row index.
            **load_args: Arguments for `target_type.load`.

        Returns:
            The related table object.

        Raises:
            (exceptions.UnknownRelationError): If no relation to `target_type` is declared.
            Any error raised by `target_type.load`.
        """
        try:
            mapping = self.schema.relation(target_type)
        except KeyError:
            raise UnknownRelationError(
                f"Never heard of class {getattr(target_type, '__name__', target_type)}, sorry"
            ) from None
        source = self._row(row)

        if load_args.get("where"):
            where = dict(load_args["where"])
            for name in where:
                if name in mapping:
                    where[name] = source.values.get(mapping[name])
            load_args["where"] = where

        if load_args.get("db") is None:
            load_args["db"] = self._db

        return target_type.load(**load_args)
