"""Database digest computation.

This module composes the schema and content hashers into a single digest.
It is free of CLI concerns and can be used directly as a library:

    with open_database("app.db") as conn:
        digest = compute_digest(SQLiteDataSource(conn), "emp%", Selection.CONTENT_ONLY)

A call runs through the phases IDLE -> SCHEMA -> CONTENT -> FINALIZED,
skipping the phase a selection leaves out. Any exception aborts the call and
no digest is produced.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from dbhash.core.adapters.sqlite import SQLiteDataSource
from dbhash.core.connection import open_database
from dbhash.core.content import hash_content
from dbhash.core.digest import DigestAccumulator
from dbhash.core.models import Selection
from dbhash.core.schema import hash_schema
from dbhash.core.source import DataSource

logger = logging.getLogger(__name__)


class HashPhase(str, Enum):
    """Stages of a digest computation."""

    IDLE = "idle"
    SCHEMA = "schema"
    CONTENT = "content"
    FINALIZED = "finalized"


def compute_digest(
    source: DataSource,
    pattern: str | None = None,
    selection: Selection | str = Selection.SCHEMA_AND_CONTENT,
) -> bytes:
    """
    Compute the 16-byte digest of a database.

    Args:
        source: Data source for the database to hash.
        pattern: Optional LIKE pattern restricting the tables hashed (and,
            when schema is selected, the catalog objects they own).
        selection: Whether to hash schema, content or both.

    Returns:
        The digest as 16 raw bytes.

    Raises:
        DataSourceError: If reading fails or the source changed mid-scan.
        UnsupportedValueError: If a value cannot be canonicalized.
    """
    selection = Selection(selection)
    accumulator = DigestAccumulator()
    phase = HashPhase.IDLE

    with source.snapshot():
        if selection.includes_schema:
            phase = HashPhase.SCHEMA
            logger.debug("phase %s", phase.value)
            objects = hash_schema(source, accumulator, pattern)
            logger.debug("hashed %d schema object(s)", objects)

        if selection.includes_content:
            phase = HashPhase.CONTENT
            logger.debug("phase %s", phase.value)
            tables = hash_content(source, accumulator, pattern)
            logger.debug("hashed %d table(s)", tables)

    digest = accumulator.finalize()
    phase = HashPhase.FINALIZED
    logger.debug(
        "phase %s: %s (%d bytes hashed)", phase.value, digest.hex(), accumulator.bytes_fed
    )
    return digest


def hash_database(
    path: str | Path,
    pattern: str | None = None,
    selection: Selection | str = Selection.SCHEMA_AND_CONTENT,
) -> bytes:
    """Open the database file at `path` read-only and compute its digest."""
    with open_database(path) as conn:
        return compute_digest(SQLiteDataSource(conn), pattern, selection)
