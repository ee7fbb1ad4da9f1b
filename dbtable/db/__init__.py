##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Database handles usable by table objects.

Modules:
    base.py: The abstract `DatabaseHandle` and `Statement` interfaces.
    sqlite.py: A `sqlite3` implementation of those interfaces.
"""

from dbtable.db.base import DatabaseHandle, Statement
from dbtable.db.sqlite import SQLiteDatabase, SQLiteStatement


__all__ = ["DatabaseHandle", "Statement", "SQLiteDatabase", "SQLiteStatement"]
