"""SQLite data source.

Reads the catalog and table rows of a `sqlite3` connection inside one read
transaction and hands them to the hashers as engine-neutral models.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator

from dbhash.core.errors import ConsistencyError, DataSourceError
from dbhash.core.models import (
    Column,
    ObjectType,
    Row,
    RowKeyStrategy,
    SchemaObject,
    TableDescriptor,
    row_of,
)
from dbhash.core.patterns import is_reserved_name

logger = logging.getLogger(__name__)

_ROWID_ALIASES = ("rowid", "_rowid_", "oid")

# VACUUM copy order: ordinary tables, then indexes, then everything else
_VACUUM_GROUP = (
    "CASE WHEN type = 'table' AND coalesce(rootpage, 1) > 0 THEN 0"
    " WHEN type = 'index' THEN 1 ELSE 2 END"
)


def quote_identifier(name: str) -> str:
    """Quote an identifier for use in SQL text."""
    return '"' + name.replace('"', '""') + '"'


def _decode_text(data: bytes) -> str:
    # Undecodable bytes survive as surrogates and are rejected when canonicalized
    return data.decode("utf-8", "surrogateescape")


class SQLiteDataSource:
    """Adapter exposing a sqlite3 connection as a hashing data source."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> Iterator[tuple]:
        """Run a query and yield its rows, wrapping engine errors."""
        try:
            cursor = self.conn.execute(sql, params)
            for row in cursor:
                yield row
        except sqlite3.Error as exc:
            raise DataSourceError(f"Query failed ({exc}): {sql}") from exc

    def _versions(self) -> tuple[int, int]:
        """Return (schema_version, data_version) of the open view."""
        schema_version = next(self._query("PRAGMA schema_version"))[0]
        data_version = next(self._query("PRAGMA data_version"))[0]
        return schema_version, data_version

    @contextmanager
    def snapshot(self) -> Iterator[None]:
        """
        Hold a read transaction for the duration of the block.

        The transaction is started here unless the connection is already in
        one, and is always rolled back: hashing never writes. Schema and data
        versions are compared on exit; any movement means the database was
        modified during the scan.
        """
        conn = self.conn
        previous_factory = conn.text_factory
        owns_transaction = not conn.in_transaction
        conn.text_factory = _decode_text
        try:
            if owns_transaction:
                try:
                    conn.execute("BEGIN")
                except sqlite3.Error as exc:
                    raise DataSourceError(f"Cannot begin read transaction: {exc}") from exc
            # first read pins the snapshot
            before = self._versions()
            yield
            after = self._versions()
            if after != before:
                raise ConsistencyError(
                    "Database changed while it was being hashed "
                    f"(schema/data version {before} -> {after})."
                )
        finally:
            conn.text_factory = previous_factory
            if owns_transaction and conn.in_transaction:
                conn.rollback()

    def iter_schema_objects(self) -> Iterator[SchemaObject]:
        """
        Yield catalog entries in creation order, grouped the way VACUUM copies them.

        VACUUM rebuilds the catalog as ordinary tables first, then indexes,
        then views, triggers and virtual tables, each group in its original
        rowid order. Ordering by (group, rowid) is therefore the same before
        and after a VACUUM.
        """
        rows = self._query(
            "SELECT type, name, tbl_name, sql FROM sqlite_master"
            f" ORDER BY {_VACUUM_GROUP}, rowid"
        )
        for position, (object_type, name, tbl_name, sql) in enumerate(rows, start=1):
            try:
                kind = ObjectType(object_type)
            except ValueError as exc:
                raise DataSourceError(
                    f"Unknown catalog object type '{object_type}' for '{name}'."
                ) from exc
            yield SchemaObject(
                object_type=kind,
                name=name,
                owning_table_name=tbl_name,
                definition_text=sql,
                creation_order=position,
            )

    def list_table_names(self) -> list[str]:
        """Return the names of every ordinary table (virtual and internal tables excluded)."""
        rows = self._query(
            "SELECT name FROM sqlite_master"
            " WHERE type = 'table' AND coalesce(sql, '') NOT LIKE 'CREATE VIRTUAL%'"
        )
        return [name for (name,) in rows if not is_reserved_name(name)]

    def describe_table(self, name: str) -> TableDescriptor:
        """Read the column list and key strategy of one table."""
        info = list(
            self._query(
                "SELECT name, type, pk FROM pragma_table_info(?) ORDER BY cid", (name,)
            )
        )
        if not info:
            raise DataSourceError(f"Table '{name}' has no columns or does not exist.")

        columns = tuple(Column(name=col, declared_type=decl or "") for col, decl, _ in info)
        if self._has_rowid(name, columns):
            return TableDescriptor(name=name, columns=columns)

        keys = tuple(col for col, _, pk in sorted(info, key=lambda c: c[2]) if pk > 0)
        return TableDescriptor(
            name=name,
            columns=columns,
            row_key_strategy=RowKeyStrategy.EXPLICIT_KEY_COLUMNS,
            key_columns=keys,
        )

    def _rowid_alias(self, columns: tuple[Column, ...]) -> str:
        """Pick a rowid alias that no declared column shadows."""
        taken = {c.name.lower() for c in columns}
        for alias in _ROWID_ALIASES:
            if alias not in taken:
                return alias
        raise DataSourceError(
            "Every rowid alias is shadowed by a column: "
            + ", ".join(c.name for c in columns)
        )

    def _has_rowid(self, name: str, columns: tuple[Column, ...]) -> bool:
        alias = self._rowid_alias(columns)
        try:
            self.conn.execute(f"SELECT {alias} FROM {quote_identifier(name)} LIMIT 0")
        except sqlite3.OperationalError as exc:
            if "no such column" in str(exc):
                return False
            raise DataSourceError(f"Cannot inspect table '{name}': {exc}") from exc
        return True

    def iter_rows(self, table: TableDescriptor) -> Iterator[Row]:
        """Yield rows in ascending rowid order, or key order for WITHOUT ROWID tables."""
        if table.row_key_strategy is RowKeyStrategy.EXPLICIT_KEY_COLUMNS:
            order_by = ", ".join(quote_identifier(k) for k in table.key_columns)
        else:
            order_by = self._rowid_alias(table.columns)

        select_list = ", ".join(quote_identifier(c) for c in table.column_names)
        sql = (
            f"SELECT {select_list} FROM {quote_identifier(table.name)} ORDER BY {order_by}"
        )
        logger.debug("reading %s", sql)
        for values in self._query(sql):
            yield row_of(values)
