##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
This module houses the `SchemaDescriptor`, the static description of one
table: its name, the column combinations that uniquely identify a row, its
columns, and the tables related to it.

A descriptor is built once per table class and never changes afterwards. The
column lookups that the query builder relies on (existence checks, flag
lookups, the list of plain columns) live here too.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from dbtable.exceptions import ConfigurationError, InvalidColumnSetError, UnknownColumnError
from dbtable.schema.columns import ColumnDefinition, column_from_dict


ALL_COLUMNS = "*"
"""Column-list marker meaning every plain column of the table."""


@dataclass(frozen=True)
class SchemaDescriptor:
    """
    Static metadata for a table.

    Attributes:
        table: The primary table name.
        unique_key_groups: Ordered column combinations, each of which identifies one row.
        columns: Column definitions keyed by name, in declaration order.
        relations: For each related table class (or class name), a mapping of
            the related table's column to the local column that feeds it.

    Methods:
        from_dict (classmethod):
            Build a descriptor from the hash-style description.

        column:
            Look up a column definition by name.

        has_column:
            Check whether a column is declared.

        check_columns:
            Validate a list of column names, allowing the `*` marker.

        column_names:
            The declared column names in declaration order.

        plain_columns:
            The columns that live in the table itself, in declaration order.

        relation:
            Look up the column mapping for a related table class.
    """

    table: str
    unique_key_groups: Tuple[Tuple[str, ...], ...] = ()
    columns: Mapping[str, ColumnDefinition] = field(default_factory=dict)
    relations: Mapping[Any, Mapping[str, str]] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.table, str) or not self.table:
            raise ConfigurationError("A table description needs a non-empty table name.")

        columns = self.columns
        if not isinstance(columns, Mapping):
            # Allow a sequence of definitions; keep their order
            columns = {column.name: column for column in columns}
        if not columns:
            raise ConfigurationError(f"Table '{self.table}' declares no columns.")
        for name, column in columns.items():
            if not isinstance(column, ColumnDefinition):
                raise ConfigurationError(f"Column '{name}' of table '{self.table}' is not a ColumnDefinition.")
            if column.name != name:
                raise ConfigurationError(f"Column keyed as '{name}' is named '{column.name}'.")

        raw_groups = self.unique_key_groups
        if isinstance(raw_groups, (str, bytes)) or not isinstance(raw_groups, Iterable):
            raise ConfigurationError(f"The unique keys of table '{self.table}' must be a list of column lists.")
        groups = []
        for group in raw_groups:
            if isinstance(group, (str, bytes)) or not isinstance(group, Iterable):
                raise ConfigurationError(
                    f"Unique key combination {group!r} of table '{self.table}' must be a list of column names."
                )
            groups.append(tuple(group))
        groups = tuple(groups)
        for group in groups:
            if not group:
                raise ConfigurationError(f"Table '{self.table}' has an empty unique key combination.")
            for name in group:
                if name not in columns:
                    raise ConfigurationError(f"Unique key column '{name}' is not declared in table '{self.table}'.")

        raw_relations = self.relations or {}
        if not isinstance(raw_relations, Mapping):
            raise ConfigurationError(f"The relations of table '{self.table}' must be a mapping.")
        relations = {}
        for target, mapping in raw_relations.items():
            if not isinstance(mapping, Mapping):
                raise ConfigurationError(
                    f"Relation to {getattr(target, '__name__', target)} must map related columns to local columns."
                )
            for foreign_column, local_column in mapping.items():
                if local_column not in columns:
                    raise ConfigurationError(
                        f"Relation to {getattr(target, '__name__', target)} uses undeclared column "
                        f"'{local_column}' (for '{foreign_column}')."
                    )
            relations[target] = MappingProxyType(dict(mapping))

        object.__setattr__(self, "columns", MappingProxyType(dict(columns)))
        object.__setattr__(self, "unique_key_groups", groups)
        object.__setattr__(self, "relations", MappingProxyType(relations))

    @classmethod
    def from_dict(cls, data: Dict) -> "SchemaDescriptor":
        """
        Create a descriptor from the hash-style description.

        The expected keys are `table`, `unique_keys`, `columns` (a mapping of
        column name to its options) and, optionally, `related`. The longer
        names `unique_key_groups` and `relations` are accepted as well.

        Args:
            data: A dictionary describing the table.

        Returns:
            A validated `SchemaDescriptor`.

        Raises:
            (exceptions.ConfigurationError): If the description is malformed.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"A table description must be a mapping, not {type(data).__name__}.")
        if "table" not in data:
            raise ConfigurationError("A table description needs a 'table' entry.")

        raw_columns = data.get("columns") or {}
        if not isinstance(raw_columns, Mapping):
            raise ConfigurationError("The 'columns' entry must map column names to their options.")
        columns = {name: column_from_dict(name, options) for name, options in raw_columns.items()}

        try:
            return cls(
                table=data["table"],
                unique_key_groups=data.get("unique_keys", data.get("unique_key_groups", ())) or (),
                columns=columns,
                relations=data.get("related", data.get("relations", {})) or {},
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed description of table '{data['table']}': {exc}") from exc

    def column(self, name: str) -> ColumnDefinition:
        """
        Look up a column definition.

        Args:
            name: The column name.

        Returns:
            The column's definition.

        Raises:
            (exceptions.UnknownColumnError): If the column isn't declared.
        """
        try:
            return self.columns[name]
        except KeyError:
            raise UnknownColumnError(f"Column doesn't exist: {name}", [name]) from None

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def check_columns(self, names: Iterable[str]) -> List[str]:
        """
        Verify that every name is a declared column or the `*` marker.

        Args:
            names: The column names to check.

        Returns:
            The names as a list, unchanged.

        Raises:
            (exceptions.InvalidColumnSetError): If any name is not declared.
        """
        names = list(names)
        unknown = [name for name in names if name != ALL_COLUMNS and name not in self.columns]
        if unknown:
            raise InvalidColumnSetError(f"Unknown column(s) for table '{self.table}': {', '.join(unknown)}", unknown)
        return names

    def column_names(self) -> List[str]:
        return list(self.columns)

    def plain_columns(self) -> List[ColumnDefinition]:
        return [column for column in self.columns.values() if column.is_plain]

    def relation(self, target: Any) -> Mapping[str, str]:
        """
        Look up the column mapping towards a related table class.

        The class itself is tried first, then its name, so that descriptions
        loaded from files can refer to related classes by name.

        Args:
            target: The related table class.

        Returns:
            The mapping of the related table's column to the local column.

        Raises:
            KeyError: If no relation is declared for `target`.
        """
        if target in self.relations:
            return self.relations[target]
        name = getattr(target, "__name__", None)
        if name is not None and name in self.relations:
            return self.relations[name]
        raise KeyError(target)
