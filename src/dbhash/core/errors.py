"""Exception hierarchy for database hashing."""


class DbHashError(Exception):
    """Base exception for all hashing failures."""


class DataSourceError(DbHashError):
    """Reading the catalog or a table failed."""


class ConsistencyError(DataSourceError):
    """The data source changed while it was being hashed."""


class UnsupportedValueError(DbHashError):
    """A value cannot be canonicalized deterministically."""


class DigestStateError(DbHashError):
    """The digest accumulator was used after it was finalized."""
