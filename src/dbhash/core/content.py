"""Content hashing.

Tables are visited in ascending name order, independent of the order in
which they were created. Each table contributes a boundary marker carrying
its name, so an empty table differs from a missing one, followed by its rows
in key order. Rows are canonicalized and fed one at a time.
"""

from __future__ import annotations

import logging

from dbhash.core.canonical import canonical_row, table_marker
from dbhash.core.digest import DigestAccumulator
from dbhash.core.errors import DataSourceError
from dbhash.core.models import TableDescriptor
from dbhash.core.patterns import build_filter
from dbhash.core.source import DataSource

logger = logging.getLogger(__name__)


def select_tables(source: DataSource, pattern: str | None = None) -> list[TableDescriptor]:
    """
    Return the tables selected by `pattern`, sorted by name.

    Names are filtered before any table is described, so tables outside the
    pattern are never inspected.
    """
    name_filter = build_filter(pattern)
    names = sorted(n for n in source.list_table_names() if name_filter.matches(n))
    return [source.describe_table(n) for n in names]


def hash_table(
    source: DataSource,
    accumulator: DigestAccumulator,
    table: TableDescriptor,
) -> int:
    """Feed one table into `accumulator` and return its row count."""
    accumulator.update(table_marker(table.name))
    width = len(table.columns)
    rows = 0

    for row in source.iter_rows(table):
        if len(row) != width:
            raise DataSourceError(
                f"Row of table '{table.name}' has {len(row)} cells, expected {width}."
            )
        accumulator.update(canonical_row(row))
        rows += 1

    return rows


def hash_content(
    source: DataSource,
    accumulator: DigestAccumulator,
    pattern: str | None = None,
) -> int:
    """
    Feed the content of every selected table into `accumulator`.

    Args:
        source: Data source to read tables from.
        accumulator: Digest receiving the rows.
        pattern: Optional LIKE pattern on table names.

    Returns:
        Number of tables hashed.
    """
    tables = select_tables(source, pattern)
    for table in tables:
        rows = hash_table(source, accumulator, table)
        logger.debug("content %s: %d row(s)", table.name, rows)
    return len(tables)
