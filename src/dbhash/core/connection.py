"""Opening databases for hashing.

Databases are always opened read-only through a `file:` URI, so hashing
can never modify the file it inspects.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from dbhash.core.errors import DataSourceError


def _database_uri(path: Path, *, immutable: bool) -> str:
    """
    Build a read-only SQLite URI for `path`.

    - Resolves the path so the URI is absolute
    - Percent-encodes unusual characters (via Path.as_uri)
    - Adds `immutable=1` when requested, which skips locking entirely
    """
    uri = f"{path.resolve().as_uri()}?mode=ro"
    if immutable:
        uri += "&immutable=1"
    return uri


@contextmanager
def open_database(
    path: str | Path, *, immutable: bool = False
) -> Iterator[sqlite3.Connection]:
    """
    Open a database file read-only and close it when the block exits.

    Args:
        path: Database file.
        immutable: Treat the file as unchangeable (only safe for files no
            other process writes to).

    Raises:
        DataSourceError: If the file does not exist or cannot be opened.
    """
    db_path = Path(path)
    if not db_path.is_file():
        raise DataSourceError(f"Database file not found: {db_path}")

    try:
        conn = sqlite3.connect(_database_uri(db_path, immutable=immutable), uri=True)
    except sqlite3.Error as exc:
        raise DataSourceError(f"Cannot open database {db_path}: {exc}") from exc

    try:
        yield conn
    finally:
        conn.close()
