import sqlite3

import pytest

from dbhash.core.connection import _database_uri, open_database
from dbhash.core.errors import DataSourceError


def test_database_uri_is_read_only(tmp_path):
    uri = _database_uri(tmp_path / "my db.sqlite", immutable=False)

    assert uri.startswith("file://")
    assert uri.endswith("?mode=ro")
    assert "my%20db.sqlite" in uri


def test_database_uri_immutable(tmp_path):
    assert _database_uri(tmp_path / "a.db", immutable=True).endswith("?mode=ro&immutable=1")


def test_open_database_refuses_writes(make_db):
    path = make_db("CREATE TABLE t(a);")

    with open_database(path) as conn:
        assert conn.execute("SELECT count(*) FROM t").fetchone() == (0,)
        with pytest.raises(sqlite3.OperationalError, match="readonly"):
            conn.execute("INSERT INTO t VALUES (1)")


def test_open_database_closes_connection(make_db):
    path = make_db("CREATE TABLE t(a);")

    with open_database(path) as conn:
        pass

    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")


def test_open_database_missing_file(tmp_path):
    with pytest.raises(DataSourceError, match="not found"):
        with open_database(tmp_path / "missing.db"):
            pass
