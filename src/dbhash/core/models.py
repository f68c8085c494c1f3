"""Core domain models for database hashing.

These models describe what a data source hands to the hashers: catalog
objects, table descriptors and the cells of a row. They are immutable
per-call snapshots and carry no engine-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from dbhash.core.errors import UnsupportedValueError


class ObjectType(str, Enum):
    """Kinds of catalog objects that contribute to the schema digest."""

    TABLE = "table"
    INDEX = "index"
    VIEW = "view"
    TRIGGER = "trigger"


class RowKeyStrategy(str, Enum):
    """
    How the rows of a table are ordered when hashed.

    Values:
        IMPLICIT_SEQUENTIAL_ID: ascending by the engine's row id.
        EXPLICIT_KEY_COLUMNS: ascending by the tuple of key columns.
    """

    IMPLICIT_SEQUENTIAL_ID = "implicit_sequential_id"
    EXPLICIT_KEY_COLUMNS = "explicit_key_columns"


class LogicalType(str, Enum):
    """Closed set of value types a cell can hold."""

    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


class Selection(str, Enum):
    """Which parts of the database contribute to a digest."""

    SCHEMA_AND_CONTENT = "schema_and_content"
    SCHEMA_ONLY = "schema_only"
    CONTENT_ONLY = "content_only"

    @property
    def includes_schema(self) -> bool:
        return self is not Selection.CONTENT_ONLY

    @property
    def includes_content(self) -> bool:
        return self is not Selection.SCHEMA_ONLY


@dataclass(frozen=True)
class SchemaObject:
    """
    One entry of the database catalog.

    Attributes:
        object_type: Kind of object (table, index, view or trigger).
        name: Object name.
        owning_table_name: Table the object belongs to (a table owns itself).
        definition_text: Creation statement, or None when the catalog has
            none (e.g. automatically created indexes).
        creation_order: Strictly increasing catalog position.
    """

    object_type: ObjectType
    name: str
    owning_table_name: str
    definition_text: str | None
    creation_order: int


@dataclass(frozen=True)
class Column:
    """A declared table column."""

    name: str
    declared_type: str = ""


@dataclass(frozen=True)
class TableDescriptor:
    """
    Shape of a table as needed to read its rows in canonical order.

    Attributes:
        name: Table name.
        columns: Columns in declared order; rows are always aligned with it.
        row_key_strategy: How rows are ordered.
        key_columns: Names of the key columns in key order. Only set for
            EXPLICIT_KEY_COLUMNS tables.
    """

    name: str
    columns: tuple[Column, ...]
    row_key_strategy: RowKeyStrategy = RowKeyStrategy.IMPLICIT_SEQUENTIAL_ID
    key_columns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.row_key_strategy is RowKeyStrategy.EXPLICIT_KEY_COLUMNS:
            if not self.key_columns:
                raise ValueError(
                    f"Table '{self.name}' uses explicit keys but declares no key columns."
                )
            known = {c.name for c in self.columns}
            missing = [k for k in self.key_columns if k not in known]
            if missing:
                raise ValueError(
                    f"Key columns {missing} are not columns of table '{self.name}'."
                )

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


@dataclass(frozen=True)
class Cell:
    """A single typed value of a row."""

    logical_type: LogicalType
    raw_value: Any = None

    @classmethod
    def of(cls, value: Any) -> Cell:
        """
        Classify a Python value into the closed cell variant.

        Raises:
            UnsupportedValueError: If the value has no logical type.
        """
        if value is None:
            return cls(LogicalType.NULL)
        if isinstance(value, bool):
            return cls(LogicalType.INTEGER, int(value))
        if isinstance(value, int):
            return cls(LogicalType.INTEGER, value)
        if isinstance(value, float):
            return cls(LogicalType.REAL, value)
        if isinstance(value, str):
            return cls(LogicalType.TEXT, value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls(LogicalType.BLOB, bytes(value))
        raise UnsupportedValueError(
            f"Cannot hash value of type {type(value).__name__}: {value!r}"
        )


Row = tuple[Cell, ...]


def row_of(values) -> Row:
    """Build a Row from plain Python values."""
    return tuple(Cell.of(v) for v in values)
