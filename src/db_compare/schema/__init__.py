"""Schema snapshots, catalog reading, and schema comparison.

Provides the snapshot and difference models, the ``SchemaReader`` protocol
with its PostgreSQL implementation (``PostgresSchemaReader``), and the pure
comparison functions (``compare_table_sets``, ``compare_columns``,
``compare_indexes``).

Usage:
    from db_compare.schema import compare_columns, compare_indexes
    from db_compare.schema import PostgresSchemaReader, SchemaReader
"""

from db_compare.schema.comparator import (
    ColumnComparison,
    IndexComparison,
    TableSetComparison,
    compare_columns,
    compare_indexes,
    compare_table_sets,
    defaults_equal,
)
from db_compare.schema.introspector import PostgresSchemaReader, SchemaIntrospector
from db_compare.schema.models import (
    ColumnAttributes,
    ColumnDescriptor,
    ColumnDifference,
    ComparisonResult,
    IndexAttributes,
    IndexDescriptor,
    IndexDifference,
    IndexKind,
    SchemaSnapshot,
    SummaryCounters,
    TableDifference,
)
from db_compare.schema.reader import SchemaReader, read_snapshot

__all__ = [
    "compare_table_sets",
    "compare_columns",
    "compare_indexes",
    "defaults_equal",
    "TableSetComparison",
    "ColumnComparison",
    "IndexComparison",
    "SchemaReader",
    "read_snapshot",
    "SchemaIntrospector",
    "PostgresSchemaReader",
    "SchemaSnapshot",
    "ColumnDescriptor",
    "IndexDescriptor",
    "IndexKind",
    "ColumnAttributes",
    "IndexAttributes",
    "TableDifference",
    "ColumnDifference",
    "IndexDifference",
    "SummaryCounters",
    "ComparisonResult",
]
