##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
This module defines the abstract interface a database handle must provide
to be used by dbtable's table objects.

A handle prepares SQL text into `Statement` objects, escapes literal values,
and runs statements that don't return rows. Table objects always call
`Statement.finish` exactly once for every statement they prepare.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


class Statement(ABC):
    """
    Base class for prepared statements.

    Methods:
        execute: Run the statement.
        fetch_next_row: Fetch the next result row as a column-keyed mapping.
        finish: Release the statement's resources.

    Attributes:
        last_insert_id: The key generated by the last INSERT run through this statement.
    """

    @abstractmethod
    def execute(self) -> bool:
        """
        Run the statement.

        Returns:
            True on success, False on failure.
        """
        raise NotImplementedError("Subclasses of `Statement` must implement an `execute` method.")

    @abstractmethod
    def fetch_next_row(self) -> Optional[Mapping[str, Any]]:
        """
        Fetch the next result row.

        Returns:
            The row keyed by column name, or None once the results are exhausted.
        """
        raise NotImplementedError("Subclasses of `Statement` must implement a `fetch_next_row` method.")

    @abstractmethod
    def finish(self):
        """
        Release the resources held by this statement.
        """
        raise NotImplementedError("Subclasses of `Statement` must implement a `finish` method.")

    @property
    @abstractmethod
    def last_insert_id(self) -> Any:
        """
        The key generated by the last INSERT run through this statement.
        """
        raise NotImplementedError("Subclasses of `Statement` must implement a `last_insert_id` property.")


class DatabaseHandle(ABC):
    """
    Base class for database handles supported by dbtable.

    Methods:
        prepare: Prepare SQL text into a `Statement`.
        quote: Escape a value as an SQL literal.
        execute_direct: Run SQL text that returns no rows.
    """

    @abstractmethod
    def prepare(self, sql: str) -> Statement:
        """
        Prepare SQL text.

        Args:
            sql: The SQL text.

        Returns:
            A prepared statement.
        """
        raise NotImplementedError("Subclasses of `DatabaseHandle` must implement a `prepare` method.")

    @abstractmethod
    def quote(self, value: Any) -> str:
        """
        Escape a value as an SQL literal.

        Args:
            value: The value to escape.

        Returns:
            The escaped literal, including its quotes.
        """
        raise NotImplementedError("Subclasses of `DatabaseHandle` must implement a `quote` method.")

    @abstractmethod
    def execute_direct(self, sql: str) -> bool:
        """
        Run SQL text that returns no rows.

        Args:
            sql: The SQL text.

        Returns:
            True on success, False on failure.
        """
        raise NotImplementedError("Subclasses of `DatabaseHandle` must implement an `execute_direct` method.")
