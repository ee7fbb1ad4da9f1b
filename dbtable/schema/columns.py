##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Column definitions used by table descriptions.

A column is one of three variants:

- `PlainColumn`: a column that lives in the table itself.
- `ForeignColumn`: a column pulled in from another table through a single join.
- `SpecialColumn`: a column expressed with raw SQL fragments.

Every variant carries a `ColumnFlags` record. Foreign and special columns are
always treated as immutable and are never part of an INSERT.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from dbtable.exceptions import ConfigurationError


NULL = "NULL"
"""Marker stored in a row (and rendered verbatim) for an SQL NULL."""

FLAG_KEYS = ("immutable", "autoincrement", "nullable", "quoted", "default")


@dataclass(frozen=True)
class ColumnFlags:
    """
    Behavioral flags shared by every column variant.

    Attributes:
        immutable: If True, `set` refuses to change this column.
        autoincrement: If True, the database generates a value for this column on INSERT.
        nullable: If True, the column may be left out of an INSERT and an empty
            string assigned to it is stored as NULL.
        quoted: If True, values are escaped through the database handle's `quote`.
        default: Value used on INSERT when the row has none. None means no default.
    """

    immutable: bool = False
    autoincrement: bool = False
    nullable: bool = False
    quoted: bool = False
    default: Optional[Any] = None

    @property
    def has_default(self) -> bool:
        """True if a default value was declared."""
        return self.default is not None


@dataclass(frozen=True)
class ForeignSpec:
    """
    A single-hop join to another table.

    Attributes:
        table: Name (or alias) of the joined table.
        lkey: Column of the local table used in the join condition.
        rkey: Column of the joined table used in the join condition.
        actual_table: Real table name when `table` is an alias.
        actual_column: Column of the joined table when it differs from the local name.
    """

    table: str
    lkey: str
    rkey: str
    actual_table: Optional[str] = None
    actual_column: Optional[str] = None

    def __post_init__(self):
        for name in ("table", "lkey", "rkey"):
            if not isinstance(getattr(self, name), str) or not getattr(self, name):
                raise ConfigurationError(f"Foreign spec requires a non-empty '{name}'.")
        for name in ("actual_table", "actual_column"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, str) or not value):
                raise ConfigurationError(f"Foreign spec '{name}' must be a non-empty string.")


@dataclass(frozen=True)
class SpecialSpec:
    """
    Raw SQL fragments for a column the relational model can't express.

    The fragments are never parsed; they are pasted into the generated SQL.
    """

    select: Optional[str] = None
    join: Optional[str] = None
    where: Optional[str] = None
    groupby: Optional[str] = None

    def __post_init__(self):
        for name in ("select", "join", "where", "groupby"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise ConfigurationError(f"Special spec '{name}' must be a non-empty SQL fragment.")


@dataclass(frozen=True)
class ColumnDefinition:
    """
    Base class for the column variants.

    Attributes:
        name: The column name, unique within its table.
        flags: The column's behavioral flags.
    """

    name: str
    flags: ColumnFlags = field(default_factory=ColumnFlags)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name or self.name == "*":
            raise ConfigurationError(f"Invalid column name: {self.name!r}")

    @property
    def is_foreign(self) -> bool:
        return False

    @property
    def is_special(self) -> bool:
        return False

    @property
    def is_plain(self) -> bool:
        return not (self.is_foreign or self.is_special)

    @property
    def is_immutable(self) -> bool:
        """Foreign and special columns can never be written."""
        return self.flags.immutable or not self.is_plain

    @property
    def nullable(self) -> bool:
        return self.flags.nullable

    @property
    def quoted(self) -> bool:
        return self.flags.quoted

    @property
    def autoincrement(self) -> bool:
        return self.flags.autoincrement

    @property
    def default(self) -> Optional[Any]:
        return self.flags.default


@dataclass(frozen=True)
class PlainColumn(ColumnDefinition):
    """A column stored in the described table."""


@dataclass(frozen=True)
class ForeignColumn(ColumnDefinition):
    """A column read from another table through a join."""

    foreign: ForeignSpec = None

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.foreign, ForeignSpec):
            raise ConfigurationError(f"Foreign column '{self.name}' requires a ForeignSpec.")

    @property
    def is_foreign(self) -> bool:
        return True

    @property
    def source_column(self) -> str:
        """The column name on the joined table."""
        return self.foreign.actual_column or self.name


@dataclass(frozen=True)
class SpecialColumn(ColumnDefinition):
    """A column expressed through raw SQL fragments."""

    special: SpecialSpec = None

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.special, SpecialSpec):
            raise ConfigurationError(f"Special column '{self.name}' requires a SpecialSpec.")

    @property
    def is_special(self) -> bool:
        return True


def column_from_dict(name: str, options: Dict[str, Any]) -> ColumnDefinition:
    """
    Build a column variant from the hash-style options of a table description.

    The `null` key is accepted as an alias of `nullable`.

    Args:
        name: The column name.
        options: A dictionary of flags plus an optional `foreign` or `special` entry.

    Returns:
        The matching `ColumnDefinition` variant.

    Raises:
        (exceptions.ConfigurationError): If the options are malformed or declare
            both a foreign and a special spec.
    """
    if options is not None and not isinstance(options, Mapping):
        raise ConfigurationError(f"Options of column '{name}' must be a mapping, not {type(options).__name__}.")
    options = dict(options or {})
    if "null" in options:
        options.setdefault("nullable", options.pop("null"))

    foreign = options.pop("foreign", None)
    special = options.pop("special", None)
    unknown = set(options) - set(FLAG_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown option(s) for column '{name}': {', '.join(sorted(unknown))}")
    if foreign is not None and special is not None:
        raise ConfigurationError(f"Column '{name}' can't be both foreign and special.")

    flags = ColumnFlags(
        immutable=bool(options.get("immutable", False)),
        autoincrement=bool(options.get("autoincrement", False)),
        nullable=bool(options.get("nullable", False)),
        quoted=bool(options.get("quoted", False)),
        default=options.get("default"),
    )

    try:
        if foreign is not None:
            spec = foreign if isinstance(foreign, ForeignSpec) else ForeignSpec(**foreign)
            return ForeignColumn(name, flags, foreign=spec)
        if special is not None:
            spec = special if isinstance(special, SpecialSpec) else SpecialSpec(**special)
            return SpecialColumn(name, flags, special=spec)
    except TypeError as exc:
        raise ConfigurationError(f"Malformed spec for column '{name}': {exc}") from exc

    return PlainColumn(name, flags)
