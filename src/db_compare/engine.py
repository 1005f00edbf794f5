"""Multi-target schema comparison.

Reads one source snapshot and compares every target against it, merging all
differences into a single ``ComparisonResult``.

Targets are processed one at a time in the order given, so the order of
records is fully deterministic. Source tables are read at most once per run
and the same source metadata is used for every target. A connectivity
failure on any database aborts the whole run; nothing partial is returned.

Usage:
    from db_compare.engine import ComparisonEngine
    from db_compare.schema.introspector import PostgresSchemaReader

    async with PostgresSchemaReader() as reader:
        result = await ComparisonEngine(reader).compare(source, [staging, prod])
    print(result.format_report())
"""

import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from db_compare.config.models import ConnectionProfile
from db_compare.errors import ConnectivityError, InvalidRequestError
from db_compare.schema.comparator import (
    compare_columns,
    compare_indexes,
    compare_table_sets,
)
from db_compare.schema.models import (
    ColumnDescriptor,
    ComparisonResult,
    IndexDescriptor,
    SchemaSnapshot,
)
from db_compare.schema.reader import SchemaReader, read_snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _SourceSide:
    """Source snapshot plus the table details read so far in one run."""

    profile: ConnectionProfile
    snapshot: SchemaSnapshot
    columns: dict[str, list[ColumnDescriptor]] = field(default_factory=dict)
    indexes: dict[str, list[IndexDescriptor]] = field(default_factory=dict)


class ComparisonEngine:
    """Compares N target databases against one source database."""

    def __init__(self, reader: SchemaReader):
        self._reader = reader

    async def compare(
        self,
        source: ConnectionProfile | None,
        targets: Sequence[ConnectionProfile],
    ) -> ComparisonResult:
        """Compare every target against the source.

        Args:
            source: Profile of the reference database.
            targets: Profiles of the databases checked for drift, compared
                in the given order.

        Returns:
            ``ComparisonResult`` holding the differences of all targets.

        Raises:
            InvalidRequestError: If ``source`` is missing or ``targets`` is
                empty. Raised before any database is contacted.
            ConnectivityError: If the source or any target cannot be read.
                For a target, ``target`` names the offending profile; for
                the source it is ``None``.
        """
        if source is None:
            raise InvalidRequestError("A source connection is required")
        if not targets:
            raise InvalidRequestError("At least one target connection is required")

        result = ComparisonResult()

        source_side = _SourceSide(source, await read_snapshot(self._reader, source))
        result.summary.total_tables = len(source_side.snapshot)
        logger.info(
            "Source %s has %d tables", source.label, result.summary.total_tables
        )

        for target in targets:
            await self._compare_target(source_side, target, result)

        return result

    async def _source_columns(self, side: _SourceSide, table: str) -> list[ColumnDescriptor]:
        if table not in side.columns:
            side.columns[table] = await self._reader.get_columns(side.profile, table)
        return side.columns[table]

    async def _source_indexes(self, side: _SourceSide, table: str) -> list[IndexDescriptor]:
        if table not in side.indexes:
            side.indexes[table] = await self._reader.get_indexes(side.profile, table)
        return side.indexes[table]

    async def _read_target(self, target: ConnectionProfile, read: Awaitable[T]) -> T:
        """Await a target read, attributing any connectivity failure to ``target``."""
        try:
            return await read
        except ConnectivityError as e:
            logger.error("Comparison against target %s failed: %s", target.label, e)
            raise ConnectivityError(
                f"Failed to read target database {target.label}: {e}",
                host=e.host or target.host,
                port=e.port or target.port,
                database=e.database or target.database,
                target=target.label,
            ) from e

    async def _compare_target(
        self,
        source_side: _SourceSide,
        target: ConnectionProfile,
        result: ComparisonResult,
    ) -> None:
        """Compare one target and merge its differences into ``result``."""
        label = target.label
        target_snapshot = await self._read_target(
            target, read_snapshot(self._reader, target)
        )

        tables = compare_table_sets(
            source_side.snapshot.tables, target_snapshot.tables, label
        )
        result.table_diffs.extend(tables.diffs)
        result.summary.tables_only_in_source += len(tables.source_only)
        result.summary.tables_only_in_targets += len(tables.target_only)

        for table in tables.common:
            source_columns = await self._source_columns(source_side, table)
            target_columns = await self._read_target(
                target, self._reader.get_columns(target, table)
            )
            source_indexes = await self._source_indexes(source_side, table)
            target_indexes = await self._read_target(
                target, self._reader.get_indexes(target, table)
            )

            columns = compare_columns(table, source_columns, target_columns, label)
            indexes = compare_indexes(table, source_indexes, target_indexes, label)

            result.column_diffs.extend(columns.diffs)
            result.index_diffs.extend(indexes.diffs)
            result.summary.columns_with_diffs += len(columns.diffs)
            result.summary.indexes_with_diffs += len(indexes.diffs)

            # Counts table-target pairs, so one table can count once per target
            if columns.has_differences or indexes.has_differences:
                result.summary.tables_with_diffs += 1
                logger.debug(
                    "Table %s differs in %s: %d column, %d index differences",
                    table,
                    label,
                    len(columns.diffs),
                    len(indexes.diffs),
                )

        logger.info(
            "Compared target %s: %d source-only tables, %d target-only tables, "
            "%d common tables",
            label,
            len(tables.source_only),
            len(tables.target_only),
            len(tables.common),
        )
