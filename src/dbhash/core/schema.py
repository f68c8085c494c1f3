"""Schema hashing.

Streams the catalog into a digest, one record per object in creation order:
object type, name and definition text (or the null sentinel when the catalog
has no text for it, as for automatic indexes). Objects without text still
contribute, so adding or removing them always changes the digest.
"""

from __future__ import annotations

import logging

from dbhash.core.canonical import canonical_fields
from dbhash.core.digest import DigestAccumulator
from dbhash.core.errors import DataSourceError
from dbhash.core.models import Cell, SchemaObject
from dbhash.core.patterns import build_filter, is_reserved_name
from dbhash.core.source import DataSource

logger = logging.getLogger(__name__)


def schema_record(obj: SchemaObject) -> bytes:
    """Canonical record of one catalog object."""
    return canonical_fields(
        (
            Cell.of(obj.object_type.value),
            Cell.of(obj.name),
            Cell.of(obj.definition_text),
        )
    )


def hash_schema(
    source: DataSource,
    accumulator: DigestAccumulator,
    pattern: str | None = None,
) -> int:
    """
    Feed the schema of `source` into `accumulator`.

    Args:
        source: Data source to read the catalog from.
        accumulator: Digest receiving the records.
        pattern: Optional LIKE pattern on the owning table name.

    Returns:
        Number of catalog objects hashed.

    Raises:
        DataSourceError: If the catalog cannot be read or is not delivered
            in creation order.
        UnsupportedValueError: If a name or definition cannot be encoded.
    """
    name_filter = build_filter(pattern)
    last_order: int | None = None
    count = 0

    for obj in source.iter_schema_objects():
        if last_order is not None and obj.creation_order <= last_order:
            raise DataSourceError(
                f"Catalog object '{obj.name}' is out of creation order "
                f"({obj.creation_order} after {last_order})."
            )
        last_order = obj.creation_order

        if is_reserved_name(obj.name) or not name_filter.matches(obj.owning_table_name):
            continue

        accumulator.update(schema_record(obj))
        count += 1
        logger.debug("schema %s %s", obj.object_type.value, obj.name)

    return count
