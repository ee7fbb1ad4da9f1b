##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Module of all dbtable-specific exception types.
"""

__all__ = (
    "DBTableError",
    "ConfigurationError",
    "MissingCollaboratorError",
    "UnknownColumnError",
    "InvalidColumnSetError",
    "ImmutableColumnError",
    "ConflictingGroupByError",
    "QueryError",
    "NoUsableUniqueKeyError",
    "MissingRequiredValueError",
    "NoDataError",
    "UnknownRelationError",
    "RowIndexError",
)


class DBTableError(Exception):
    """
    Base class for every error raised by dbtable.
    """


class ConfigurationError(DBTableError):
    """
    Exception to signal that a table description failed validation.
    """


class MissingCollaboratorError(DBTableError):
    """
    Exception to signal that no database handle was given to a constructor.
    """


class UnknownColumnError(DBTableError):
    """
    Exception to signal a reference to a column that the table description
    does not declare.
    """

    def __init__(self, message: str, columns=None):
        super().__init__(message)
        self.columns = list(columns or [])


class InvalidColumnSetError(UnknownColumnError):
    """
    Exception to signal that a list of columns handed to a query contains
    names the table description does not declare.
    """


class ImmutableColumnError(DBTableError):
    """
    Exception to signal a write to an immutable, foreign, or special column.
    """


class ConflictingGroupByError(DBTableError):
    """
    Exception to signal that two incompatible GROUP BY requests were made.
    """


class QueryError(DBTableError):
    """
    Exception to signal that the database failed to prepare or execute
    a statement.
    """

    def __init__(self, message: str, sql: str = None):
        super().__init__(message)
        self.sql = sql


class NoUsableUniqueKeyError(DBTableError):
    """
    Exception to signal that no unique key combination can identify a row.
    """


class MissingRequiredValueError(DBTableError):
    """
    Exception to signal that a non-nullable column has neither a value
    nor a default when inserting.
    """


class NoDataError(DBTableError):
    """
    Exception to signal that a query succeeded but returned no rows to store.
    """


class UnknownRelationError(DBTableError):
    """
    Exception to signal a request for a relation the table does not declare.
    """


class RowIndexError(DBTableError, IndexError):
    """
    Exception to signal a row index past the number of stored rows.
    """
