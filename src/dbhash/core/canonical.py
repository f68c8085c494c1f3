"""Canonical byte encoding of values, rows and catalog records.

Digest stability rests entirely on this module: every logical value maps to
exactly one byte sequence, whatever the engine's physical storage looks like.

Each value is written as a one-byte ASCII type tag followed by its payload:

    Null     N
    Integer  I<decimal digits, leading '-' only when negative>
    Real     R<17 significant digits, 'g' format>
    Text     T<UTF-8 bytes>
    Blob     X<lowercase hex>

Values inside a record are separated by FIELD_SEP and every record ends with
RECORD_SEP. A table boundary starts with TABLE_MARKER. These three bytes can
never occur in well-formed UTF-8, and every payload above is UTF-8 or ASCII,
so no field needs escaping.

The byte layout is frozen. Any change here changes every digest.
"""

from __future__ import annotations

import math
from typing import Iterable

from dbhash.core.errors import UnsupportedValueError
from dbhash.core.models import Cell, LogicalType, Row

FIELD_SEP = b"\xff"
RECORD_SEP = b"\xfe"
TABLE_MARKER = b"\xfd"

NULL_SENTINEL = b"N"

_REAL_FORMAT = ".17g"


def encode_text(text: str) -> bytes:
    """
    Encode text as strict UTF-8.

    Raises:
        UnsupportedValueError: If the text is not valid Unicode (e.g. it
            carries undecodable bytes from the database).
    """
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise UnsupportedValueError(
            f"Text is not valid UTF-8 and cannot be hashed: {text!r}"
        ) from exc


def format_real(value: float) -> bytes:
    """Format a float with a fixed, locale-independent rule."""
    if math.isnan(value):
        raise UnsupportedValueError("NaN has no canonical form.")
    if value == 0.0:
        # -0.0 and 0.0 compare equal in SQL
        return b"0"
    return format(value, _REAL_FORMAT).encode("ascii")


def canonical_value(cell: Cell) -> bytes:
    """Return the canonical bytes of one cell."""
    kind = cell.logical_type
    value = cell.raw_value

    if kind is LogicalType.NULL:
        return NULL_SENTINEL
    if kind is LogicalType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            raise UnsupportedValueError(f"Integer cell holds {type(value).__name__}.")
        return b"I" + str(value).encode("ascii")
    if kind is LogicalType.REAL:
        if not isinstance(value, float):
            raise UnsupportedValueError(f"Real cell holds {type(value).__name__}.")
        return b"R" + format_real(value)
    if kind is LogicalType.TEXT:
        if not isinstance(value, str):
            raise UnsupportedValueError(f"Text cell holds {type(value).__name__}.")
        return b"T" + encode_text(value)
    if kind is LogicalType.BLOB:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise UnsupportedValueError(f"Blob cell holds {type(value).__name__}.")
        return b"X" + bytes(value).hex().encode("ascii")

    raise UnsupportedValueError(f"Unknown logical type: {kind!r}")


def canonical_fields(cells: Iterable[Cell]) -> bytes:
    """Encode cells as one separator-delimited, terminated record."""
    return FIELD_SEP.join(canonical_value(c) for c in cells) + RECORD_SEP


def canonical_row(row: Row) -> bytes:
    """Encode a row, cells in column order."""
    return canonical_fields(row)


def table_marker(name: str) -> bytes:
    """Boundary record announcing the rows of table `name`."""
    return TABLE_MARKER + encode_text(name) + RECORD_SEP
