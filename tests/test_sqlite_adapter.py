import sqlite3

import pytest

from dbhash.core.adapters.sqlite import SQLiteDataSource, quote_identifier
from dbhash.core.errors import ConsistencyError, DataSourceError, UnsupportedValueError
from dbhash.core.hashing import compute_digest
from dbhash.core.models import Column, ObjectType, RowKeyStrategy, Selection, TableDescriptor


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


def _tables(source):
    return [source.describe_table(name) for name in source.list_table_names()]


def _values(source, table):
    return [tuple(c.raw_value for c in row) for row in source.iter_rows(table)]


def test_quote_identifier_doubles_quotes():
    assert quote_identifier('we"ird') == '"we""ird"'


def test_schema_objects_are_grouped_like_vacuum(conn):
    conn.executescript(
        """
        CREATE TABLE b(x);
        CREATE VIEW v AS SELECT * FROM b;
        CREATE INDEX b_x ON b(x);
        CREATE TABLE a(y UNIQUE);
        CREATE TRIGGER tr AFTER INSERT ON b BEGIN SELECT 1; END;
        """
    )
    objects = list(SQLiteDataSource(conn).iter_schema_objects())

    assert [o.name for o in objects] == ["b", "a", "b_x", "sqlite_autoindex_a_1", "v", "tr"]
    assert objects[2].object_type is ObjectType.INDEX
    assert objects[2].owning_table_name == "b"
    assert objects[3].definition_text is None
    assert objects[5].object_type is ObjectType.TRIGGER
    assert [o.creation_order for o in objects] == [1, 2, 3, 4, 5, 6]


def test_schema_object_order_survives_vacuum(make_db):
    script = """
        CREATE TABLE a(x);
        CREATE INDEX a_x ON a(x);
        CREATE VIEW va AS SELECT * FROM a;
        CREATE TABLE b(y);
        CREATE INDEX b_y ON b(y);
    """
    paths = (make_db(script), make_db(script + "VACUUM;"))

    orders = []
    for path in paths:
        connection = sqlite3.connect(path)
        try:
            orders.append([o.name for o in SQLiteDataSource(connection).iter_schema_objects()])
        finally:
            connection.close()

    assert orders[0] == orders[1] == ["a", "b", "a_x", "b_y", "va"]


def test_list_table_names_skips_internal_tables(conn):
    conn.executescript(
        """
        CREATE TABLE t(id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT);
        INSERT INTO t(name) VALUES ('x');
        """
    )
    tables = _tables(SQLiteDataSource(conn))

    assert [t.name for t in tables] == ["t"]
    assert tables[0].columns == (Column("id", "INTEGER"), Column("name", "TEXT"))
    assert tables[0].row_key_strategy is RowKeyStrategy.IMPLICIT_SEQUENTIAL_ID


def test_virtual_tables_have_no_content(conn):
    try:
        conn.execute("CREATE VIRTUAL TABLE docs USING fts5(body)")
    except sqlite3.OperationalError:
        pytest.skip("fts5 not available")

    names = [t.name for t in _tables(SQLiteDataSource(conn))]

    assert "docs" not in names


def test_rows_follow_rowid_not_insertion_order(conn):
    conn.executescript(
        """
        CREATE TABLE t(v);
        INSERT INTO t(rowid, v) VALUES (3, 'c'), (1, 'a'), (2, 'b');
        """
    )
    source = SQLiteDataSource(conn)
    (table,) = _tables(source)

    assert _values(source, table) == [("a",), ("b",), ("c",)]


def test_without_rowid_tables_use_key_order(conn):
    conn.executescript(
        """
        CREATE TABLE k(b, a, c, PRIMARY KEY (a, b)) WITHOUT ROWID;
        INSERT INTO k VALUES (2, 1, 'x'), (1, 2, 'y'), (1, 1, 'z');
        """
    )
    source = SQLiteDataSource(conn)
    (table,) = _tables(source)

    assert table.row_key_strategy is RowKeyStrategy.EXPLICIT_KEY_COLUMNS
    assert table.key_columns == ("a", "b")
    assert _values(source, table) == [(1, 1, "z"), (2, 1, "x"), (1, 2, "y")]


def test_columns_shadowing_rowid_are_handled(conn):
    conn.executescript(
        """
        CREATE TABLE r(rowid TEXT, v);
        INSERT INTO r VALUES ('z', 1), ('a', 2);
        """
    )
    source = SQLiteDataSource(conn)
    (table,) = _tables(source)

    assert table.row_key_strategy is RowKeyStrategy.IMPLICIT_SEQUENTIAL_ID
    assert _values(source, table) == [("z", 1), ("a", 2)]


def test_weird_table_names_are_quoted(conn):
    conn.executescript(
        """
        CREATE TABLE "weird.table+name""!áÁñ"(v);
        INSERT INTO "weird.table+name""!áÁñ" VALUES (1);
        """
    )
    source = SQLiteDataSource(conn)
    (table,) = _tables(source)

    assert table.name == 'weird.table+name"!áÁñ'
    assert _values(source, table) == [(1,)]


def test_missing_table_is_a_data_source_error(conn):
    source = SQLiteDataSource(conn)
    ghost = TableDescriptor(name="ghost", columns=(Column("x"),))

    with pytest.raises(DataSourceError):
        list(source.iter_rows(ghost))
    with pytest.raises(DataSourceError):
        source.describe_table("ghost")


def test_invalid_utf8_text_fails_closed(conn):
    conn.executescript(
        """
        CREATE TABLE t(v);
        INSERT INTO t VALUES (CAST(x'6f6bff' AS TEXT));
        """
    )

    with pytest.raises(UnsupportedValueError, match="UTF-8"):
        compute_digest(SQLiteDataSource(conn), selection=Selection.CONTENT_ONLY)


def test_snapshot_restores_connection_state(conn):
    conn.execute("CREATE TABLE t(v)")
    conn.commit()
    factory = conn.text_factory
    source = SQLiteDataSource(conn)

    with source.snapshot():
        assert conn.in_transaction is True

    assert conn.in_transaction is False
    assert conn.text_factory is factory


def test_snapshot_keeps_caller_transaction_open(conn):
    conn.execute("CREATE TABLE t(v)")
    conn.commit()
    conn.execute("BEGIN")
    conn.execute("INSERT INTO t VALUES (1)")

    compute_digest(SQLiteDataSource(conn))

    assert conn.in_transaction is True
    conn.commit()
    assert conn.execute("SELECT count(*) FROM t").fetchone() == (1,)


def test_changes_during_scan_raise_consistency_error(conn, monkeypatch):
    source = SQLiteDataSource(conn)
    versions = iter([(1, 1), (2, 1)])
    monkeypatch.setattr(source, "_versions", lambda: next(versions))

    with pytest.raises(ConsistencyError, match="changed"):
        compute_digest(source)
    assert conn.in_transaction is False


def test_tables_outside_the_pattern_are_not_inspected(conn):
    conn.executescript(
        """
        CREATE TABLE shadowed(rowid, _rowid_, oid);
        CREATE TABLE emp(name);
        INSERT INTO emp VALUES ('ann');
        """
    )
    source = SQLiteDataSource(conn)

    assert len(compute_digest(source, "emp%", Selection.CONTENT_ONLY)) == 16
    with pytest.raises(DataSourceError, match="shadowed"):
        compute_digest(source, None, Selection.CONTENT_ONLY)
