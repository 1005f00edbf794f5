"""Pydantic models for schema snapshots and comparison results.

This module contains schema-domain models:
- Snapshot models: SchemaSnapshot, ColumnDescriptor, IndexDescriptor, IndexKind
- Attribute models: ColumnAttributes, IndexAttributes
- Difference models: TableDifference, ColumnDifference, IndexDifference
- Result models: SummaryCounters, ComparisonResult

Result models dump to the camelCase wire format with ``by_alias=True``:

    >>> result = ComparisonResult()
    >>> sorted(result.model_dump(by_alias=True))
    ['columnDiffs', 'indexDiffs', 'summary', 'tableDiffs']

Connection profiles live in db_compare.config.models.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Raw default literals arrive as whatever native type the driver returns
DefaultValue = str | int | float | bool | None

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Snapshot Models
# ============================================================================


class IndexKind(StrEnum):
    """Kind of an index, derived once from catalog metadata."""

    PRIMARY = "PRIMARY"
    UNIQUE = "UNIQUE"
    INDEX = "INDEX"

    @classmethod
    def derive(cls, name: str, unique: bool, primary: bool = False) -> "IndexKind":
        """Derive the kind of an index.

        An index literally named ``PRIMARY`` (or flagged as the primary key by
        the catalog) is PRIMARY; otherwise an index without duplicate key
        values is UNIQUE; otherwise INDEX.

        Example:
            >>> IndexKind.derive("PRIMARY", unique=True)
            <IndexKind.PRIMARY: 'PRIMARY'>
            >>> IndexKind.derive("idx_email", unique=False)
            <IndexKind.INDEX: 'INDEX'>
        """
        if primary or name == "PRIMARY":
            return cls.PRIMARY
        if unique:
            return cls.UNIQUE
        return cls.INDEX


class ColumnAttributes(BaseModel):
    """The compared attributes of one column."""

    type: str
    nullable: bool
    default: DefaultValue = None
    extra: str = ""


class IndexAttributes(BaseModel):
    """The compared attributes of one index."""

    columns: list[str]
    type: IndexKind


class ColumnDescriptor(BaseModel):
    """Schema for a table column.

    Example:
        >>> col = ColumnDescriptor(name="email", type="varchar(255)", nullable=False)
        >>> col.default is None
        True
    """

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    nullable: bool = True
    default: DefaultValue = None
    extra: str = ""

    def attributes(self) -> ColumnAttributes:
        return ColumnAttributes(
            type=self.type,
            nullable=self.nullable,
            default=self.default,
            extra=self.extra,
        )


class IndexDescriptor(BaseModel):
    """Schema for a table index, columns in key-part order."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[str, ...] = ()
    kind: IndexKind = IndexKind.INDEX

    def attributes(self) -> IndexAttributes:
        return IndexAttributes(columns=list(self.columns), type=self.kind)


class SchemaSnapshot(BaseModel):
    """Point-in-time table list of one database.

    Table names are unique and kept in lexicographic order.

    Example:
        >>> snap = SchemaSnapshot(database_name="app", tables=["users", "orders"])
        >>> snap.tables
        ('orders', 'users')
    """

    model_config = ConfigDict(frozen=True)

    database_name: str
    tables: tuple[str, ...] = ()

    @field_validator("tables")
    @classmethod
    def _sorted_unique(cls, tables: tuple[str, ...]) -> tuple[str, ...]:
        if len(set(tables)) != len(tables):
            duplicates = sorted({t for t in tables if tables.count(t) > 1})
            raise ValueError(f"Duplicate table names: {', '.join(duplicates)}")
        return tuple(sorted(tables))

    @property
    def table_set(self) -> frozenset[str]:
        return frozenset(self.tables)

    def __len__(self) -> int:
        return len(self.tables)


# ============================================================================
# Difference Models
# ============================================================================


class TableDifference(BaseModel):
    """A table present on only one side of a source/target pair."""

    model_config = _WIRE_CONFIG

    table: str
    source_only: bool = False
    target_only: bool = False
    target_label: str = Field(alias="targetDb")

    @model_validator(mode="after")
    def _exactly_one_side(self) -> "TableDifference":
        if self.source_only == self.target_only:
            raise ValueError("Exactly one of source_only/target_only must be set")
        return self


class ColumnDifference(BaseModel):
    """A column missing on one side, or with mismatched attributes."""

    model_config = _WIRE_CONFIG

    table: str
    column: str
    source: ColumnAttributes | None = None
    target: ColumnAttributes | None = None
    issue: str
    target_label: str = Field(alias="targetDb")


class IndexDifference(BaseModel):
    """An index missing on one side, or with mismatched definition."""

    model_config = _WIRE_CONFIG

    table: str
    index_name: str
    source: IndexAttributes | None = None
    target: IndexAttributes | None = None
    issue: str
    target_label: str = Field(alias="targetDb")


# ============================================================================
# Result Models
# ============================================================================


class SummaryCounters(BaseModel):
    """Counters accumulated across all targets of one comparison run."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, validate_assignment=True
    )

    total_tables: int = Field(default=0, ge=0)
    tables_with_diffs: int = Field(default=0, ge=0)
    tables_only_in_source: int = Field(default=0, ge=0)
    tables_only_in_targets: int = Field(default=0, ge=0)
    columns_with_diffs: int = Field(default=0, ge=0)
    indexes_with_diffs: int = Field(default=0, ge=0)


class ComparisonResult(BaseModel):
    """Aggregated differences of N targets against one source."""

    model_config = _WIRE_CONFIG

    table_diffs: list[TableDifference] = Field(default_factory=list)
    column_diffs: list[ColumnDifference] = Field(default_factory=list)
    index_diffs: list[IndexDifference] = Field(default_factory=list)
    summary: SummaryCounters = Field(default_factory=SummaryCounters)

    @property
    def has_differences(self) -> bool:
        """True if any table, column or index difference was found."""
        return bool(self.table_diffs or self.column_diffs or self.index_diffs)

    def format_report(self) -> str:
        """Format comparison result as human-readable report."""
        if not self.has_differences:
            return f"No differences ({self.summary.total_tables} tables compared)"

        lines = ["Schema differences found:"]

        if self.table_diffs:
            lines.append(f"\n  Tables ({len(self.table_diffs)}):")
            for diff in self.table_diffs:
                side = "only in source" if diff.source_only else "only in target"
                lines.append(f"    - [{diff.target_label}] {diff.table}: {side}")

        if self.column_diffs:
            lines.append(f"\n  Columns ({len(self.column_diffs)}):")
            for diff in self.column_diffs:
                lines.append(
                    f"    - [{diff.target_label}] {diff.table}.{diff.column}: {diff.issue}"
                )

        if self.index_diffs:
            lines.append(f"\n  Indexes ({len(self.index_diffs)}):")
            for diff in self.index_diffs:
                lines.append(
                    f"    - [{diff.target_label}] {diff.table}.{diff.index_name}: {diff.issue}"
                )

        return "\n".join(lines)
