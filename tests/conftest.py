from __future__ import annotations

import itertools
import sqlite3
import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))


@pytest.fixture
def make_db(tmp_path):
    """Factory creating a database file from an SQL script."""
    counter = itertools.count()

    def _make(sql: str = "", *, page_size: int | None = None) -> Path:
        path = tmp_path / f"db{next(counter)}.sqlite"
        conn = sqlite3.connect(path)
        try:
            if page_size:
                conn.execute(f"PRAGMA page_size = {page_size}")
            conn.executescript(sql)
            conn.commit()
        finally:
            conn.close()
        path.touch()
        return path

    return _make
