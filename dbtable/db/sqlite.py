##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
SQLite implementation of the database handle interface.

`SQLiteDatabase` wraps a `sqlite3` connection configured with name-based row
access and autocommit, and hands out `SQLiteStatement` objects backed by a
cursor. Driver errors are raised as `QueryError`.
"""

import logging
import sqlite3
import sys
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Optional, Type

from dbtable.db.base import DatabaseHandle, Statement
from dbtable.exceptions import QueryError


LOG = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class SQLiteStatement(Statement):
    """
    A statement prepared against a SQLite connection.

    Attributes:
        sql (str): The SQL text of this statement.
    """

    def __init__(self, conn: sqlite3.Connection, sql: str):
        """
        Initialize the statement.

        Args:
            conn: The connection the statement runs on.
            sql: The SQL text.
        """
        self.sql: str = sql
        self._conn: sqlite3.Connection = conn
        self._cursor: Optional[sqlite3.Cursor] = None

    def execute(self) -> bool:
        """
        Run the statement on a fresh cursor.

        Returns:
            True once the statement ran.

        Raises:
            (exceptions.QueryError): If SQLite rejects the statement.
        """
        try:
            self._cursor = self._conn.execute(self.sql)
        except sqlite3.Error as exc:
            raise QueryError(f"Error executing SQL: {exc}", self.sql) from exc
        return True

    def fetch_next_row(self) -> Optional[Dict[str, Any]]:
        if self._cursor is None:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    def finish(self):
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

    @property
    def last_insert_id(self) -> Optional[int]:
        if self._cursor is None:
            return None
        return self._cursor.lastrowid


class SQLiteDatabase(DatabaseHandle):
    """
    Database handle backed by a SQLite file (or an in-memory database).

    The connection is configured with:
    - Foreign key constraint enforcement
    - Dictionary-style row access via `sqlite3.Row`
    - Autocommit, handled differently for Python versions < 3.12 and >= 3.12

    Attributes:
        path (str): The database file path.
        conn (sqlite3.Connection): The open connection.

    Methods:
        from_config (classmethod):
            Open the database named in a `Config`.

        prepare:
            Prepare SQL text into a `SQLiteStatement`.

        quote:
            Escape a value as a SQLite string literal.

        execute_direct:
            Run SQL text that returns no rows.

        close:
            Close the connection.
    """

    def __init__(self, path: str = MEMORY_DB):
        """
        Open a SQLite database.

        Args:
            path: The database file path. Its parent directory is created if needed.
        """
        self.path: str = str(path)
        if self.path != MEMORY_DB:
            Path(self.path).expanduser().parent.mkdir(parents=True, exist_ok=True)

        connection_kwargs = {"check_same_thread": False}
        if sys.version_info < (3, 12):  # Autocommit wasn't added until python 3.12
            connection_kwargs["isolation_level"] = None
        else:
            connection_kwargs["autocommit"] = True

        LOG.debug(f"Opening SQLite database at {self.path}")
        self.conn: sqlite3.Connection = sqlite3.connect(self.path, **connection_kwargs)
        self.conn.execute("PRAGMA foreign_keys=ON")
        # This enables name-based access to columns
        self.conn.row_factory = sqlite3.Row

    @classmethod
    def from_config(cls, config) -> "SQLiteDatabase":
        """
        Open the database named by the `database.path` setting of a config.

        Args:
            config (config.Config): The loaded configuration.

        Returns:
            An open `SQLiteDatabase`.
        """
        return cls(config.database.path)

    def prepare(self, sql: str) -> SQLiteStatement:
        if self.conn is None:
            raise QueryError("Error preparing SQL: the database is closed", sql)
        return SQLiteStatement(self.conn, sql)

    def quote(self, value: Any) -> str:
        """
        Escape a value as a SQLite string literal by doubling single quotes.

        Args:
            value: The value to escape. None renders as NULL.

        Returns:
            The escaped literal.
        """
        if value is None:
            return "NULL"
        return "'" + str(value).replace("'", "''") + "'"

    def execute_direct(self, sql: str) -> bool:
        """
        Run SQL text that returns no rows.

        Args:
            sql: The SQL text.

        Returns:
            True once the statement ran.

        Raises:
            (exceptions.QueryError): If SQLite rejects the statement.
        """
        if self.conn is None:
            raise QueryError("Error executing SQL: the database is closed", sql)
        try:
            cursor = self.conn.execute(sql)
        except sqlite3.Error as exc:
            raise QueryError(f"Error executing SQL: {exc}", sql) from exc
        cursor.close()
        return True

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> "SQLiteDatabase":
        return self

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, traceback: TracebackType):
        """
        Close the connection when leaving the context.

        Args:
            exc_type: The exception type raised, if any.
            exc_value: The exception instance raised, if any.
            traceback: The traceback object, if an exception was raised.
        """
        self.close()
