##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Static table descriptions.

Modules:
    columns.py: The column variants (plain, foreign, special) and their flags.
    descriptor.py: The `SchemaDescriptor` and its column lookups.
    loader.py: Reading descriptors from YAML files.
"""

from dbtable.schema.columns import (
    NULL,
    ColumnDefinition,
    ColumnFlags,
    ForeignColumn,
    ForeignSpec,
    PlainColumn,
    SpecialColumn,
    SpecialSpec,
    column_from_dict,
)
from dbtable.schema.descriptor import ALL_COLUMNS, SchemaDescriptor
from dbtable.schema.loader import load_descriptor


__all__ = [
    "ALL_COLUMNS",
    "NULL",
    "ColumnDefinition",
    "ColumnFlags",
    "ForeignColumn",
    "ForeignSpec",
    "PlainColumn",
    "SchemaDescriptor",
    "SpecialColumn",
    "SpecialSpec",
    "column_from_dict",
    "load_descriptor",
]
