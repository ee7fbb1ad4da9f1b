##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Row state and change tracking.

A `Row` holds the values loaded for (or assigned to) one database row, whether
that row is known to exist in the database, and which columns were changed
locally since the last load, refresh, or commit.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from dbtable.exceptions import ImmutableColumnError
from dbtable.schema.columns import NULL
from dbtable.schema.descriptor import SchemaDescriptor


@dataclass
class Row:
    """
    One row of a table object.

    Attributes:
        values: Column values. A value of None means the column has no value.
        persisted: True if the row is known to exist in the database.
        dirty: Columns changed locally and not yet written, in the order they
            were first changed. A column appears at most once.

    Methods:
        has_value:
            Check whether a column has a value.

        set_values:
            Validate and apply a set of changes, tracking dirty columns.

        mark_dirty:
            Record a column as changed.

        mark_committed:
            Record a successful write of the row.

        mark_refreshed:
            Record that columns were reloaded from the database.

        to_dict:
            A copy of the row's values.
    """

    values: Dict[str, Any] = field(default_factory=dict)
    persisted: bool = False
    dirty: List[str] = field(default_factory=list)

    def has_value(self, column: str) -> bool:
        return self.values.get(column) is not None

    @property
    def is_dirty(self) -> bool:
        return bool(self.dirty)

    def mark_dirty(self, column: str):
        if column not in self.dirty:
            self.dirty.append(column)

    def set_values(self, schema: SchemaDescriptor, changes: Mapping[str, Any]) -> List[str]:
        """
        Apply changes to this row.

        Every target column is validated before anything is modified. A
        column is only marked dirty when its new value differs from the stored
        one. An empty string assigned to a nullable column is stored as NULL.

        Args:
            schema: The table description.
            changes: Column to new value.

        Returns:
            The columns whose values actually changed.

        Raises:
            (exceptions.UnknownColumnError): If a column isn't declared.
            (exceptions.ImmutableColumnError): If a column is immutable, foreign, or special.
        """
        for name in changes:
            column = schema.column(name)
            if column.is_foreign:
                raise ImmutableColumnError(f"Attempt to modify foreign column: {name}")
            if column.is_special:
                raise ImmutableColumnError(f"Attempt to modify special column: {name}")
            if column.is_immutable:
                raise ImmutableColumnError(f"Attempt to modify immutable column: {name}")

        changed = []
        for name, value in changes.items():
            current = self.values.get(name)
            if current is not None and value == current:
                continue
            if schema.column(name).nullable and value == "":
                value = NULL
            self.values[name] = value
            self.mark_dirty(name)
            changed.append(name)
        return changed

    def mark_committed(self):
        self.dirty.clear()
        self.persisted = True

    def mark_refreshed(self, columns: Iterable[str]):
        columns = set(columns)
        self.dirty[:] = [name for name in self.dirty if name not in columns]

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.values)
