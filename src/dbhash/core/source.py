"""Interface between the hashers and a database engine."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Iterator, Protocol

from dbhash.core.models import Row, SchemaObject, TableDescriptor


class DataSource(Protocol):
    """Read-only view of one database used by the hashers."""

    def snapshot(self) -> AbstractContextManager[None]:
        """
        Hold one consistent read view for the duration of the block.

        Raises:
            ConsistencyError: On exit, if the source detected a change made
                while the block was running.
        """
        ...

    def iter_schema_objects(self) -> Iterator[SchemaObject]:
        """Yield catalog objects ascending by creation order (stable across VACUUM)."""
        ...

    def list_table_names(self) -> list[str]:
        """Return the names of the tables whose rows can be hashed."""
        ...

    def describe_table(self, name: str) -> TableDescriptor:
        """Return the columns and row key strategy of table `name`."""
        ...

    def iter_rows(self, table: TableDescriptor) -> Iterator[Row]:
        """Yield the rows of `table` in canonical key order."""
        ...
