"""Schema reader protocol definition.

Defines the ``SchemaReader`` Protocol that the comparison engine reads
catalog metadata through. All methods are ``async def``.

Usage:
    from db_compare.schema.reader import SchemaReader, read_snapshot

    async def count_tables(reader: SchemaReader, profile: ConnectionProfile) -> int:
        snapshot = await read_snapshot(reader, profile)
        return len(snapshot)
"""

from typing import Protocol

from db_compare.config.models import ConnectionProfile
from db_compare.schema.models import ColumnDescriptor, IndexDescriptor, SchemaSnapshot


class SchemaReader(Protocol):
    """Catalog reader interface that the comparison engine depends on.

    Every method raises ``ConnectivityError`` if the database cannot be
    reached or the profile's schema does not exist.
    """

    async def get_tables(self, profile: ConnectionProfile) -> list[str]:
        """Return base table names, sorted lexicographically."""
        ...

    async def get_columns(
        self, profile: ConnectionProfile, table: str
    ) -> list[ColumnDescriptor]:
        """Return the columns of ``table`` in ordinal order."""
        ...

    async def get_indexes(
        self, profile: ConnectionProfile, table: str
    ) -> list[IndexDescriptor]:
        """Return the indexes of ``table``, one per index name.

        Each descriptor lists its columns in key-part order and carries its
        derived ``IndexKind``.
        """
        ...


async def read_snapshot(
    reader: SchemaReader, profile: ConnectionProfile
) -> SchemaSnapshot:
    """Materialize the ``SchemaSnapshot`` of one profile."""
    tables = await reader.get_tables(profile)
    return SchemaSnapshot(database_name=profile.database, tables=tables)
