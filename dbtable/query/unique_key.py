##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Pick the unique key combination that safely identifies a loaded row.

UPDATE, DELETE and refresh all target their row through `unique_where`. A key
combination can only be used if every one of its columns has a value and none
of them was changed locally, since a changed key no longer matches the row
stored in the database.
"""

from typing import Callable, Optional, Sequence, Tuple

from dbtable.exceptions import NoUsableUniqueKeyError
from dbtable.query.builder import Quote, join_terms, join_terms_for
from dbtable.rows import Row
from dbtable.schema.descriptor import SchemaDescriptor


def usable_key_group(
    schema: SchemaDescriptor, row: Row, trace: Optional[Callable[[str], None]] = None
) -> Tuple[str, ...]:
    """
    Find the first unique key combination that can identify `row`.

    Args:
        schema: The table description.
        row: The row to identify.
        trace: Optional callable receiving a message for each rejected column.

    Returns:
        The column names of the first usable combination.

    Raises:
        (exceptions.NoUsableUniqueKeyError): If no combination is usable.
    """
    for group in schema.unique_key_groups:
        usable = True
        for name in group:
            if not row.has_value(name):
                reason = f"{name} has no value"
            elif name in row.dirty:
                reason = f"{name} has been modified"
            else:
                continue
            if trace is not None:
                trace(reason)
            usable = False
            break
        if usable:
            return group

    raise NoUsableUniqueKeyError(f"No unique combinations currently loaded for table '{schema.table}'.")


def unique_where(
    schema: SchemaDescriptor,
    row: Row,
    quote: Quote,
    columns: Sequence[str] = (),
    trace: Optional[Callable[[str], None]] = None,
) -> str:
    """
    Build the terms of a WHERE clause that identify exactly one row.

    Args:
        schema: The table description.
        row: The row to identify.
        quote: The database handle's escaping function, used for quoted key columns.
        columns: Extra columns whose foreign or special join terms are appended.
        trace: Optional callable receiving a message for each rejected column.

    Returns:
        The AND-joined terms, without the WHERE keyword.

    Raises:
        (exceptions.NoUsableUniqueKeyError): If no combination is usable.
    """
    group = usable_key_group(schema, row, trace)

    key_terms = []
    for name in group:
        value = row.values[name]
        if schema.column(name).quoted:
            value = quote(value)
        key_terms.append(f"{schema.table}.{name} = {value}")

    return join_terms(key_terms, join_terms_for(schema, columns))
