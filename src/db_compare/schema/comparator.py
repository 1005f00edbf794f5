"""Schema comparison using set and mapping operations.

Compares one table list, column list or index list from a source database
against the same from a target database.
Pure logic -- no I/O, no database connections.

Usage:
    from db_compare.schema.comparator import compare_columns

    comparison = compare_columns(
        "users", source_columns, target_columns, target_label="staging"
    )
    if comparison.has_differences:
        for diff in comparison.diffs:
            print(diff.issue)
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from db_compare.schema.models import (
    ColumnDescriptor,
    ColumnDifference,
    DefaultValue,
    IndexDescriptor,
    IndexDifference,
    TableDifference,
)


@dataclass
class TableSetComparison:
    """Outcome of reconciling two table lists."""

    source_only: list[str] = field(default_factory=list)
    target_only: list[str] = field(default_factory=list)
    common: list[str] = field(default_factory=list)
    diffs: list[TableDifference] = field(default_factory=list)


@dataclass
class ColumnComparison:
    """Outcome of reconciling the columns of one table."""

    diffs: list[ColumnDifference] = field(default_factory=list)

    @property
    def has_differences(self) -> bool:
        return bool(self.diffs)


@dataclass
class IndexComparison:
    """Outcome of reconciling the indexes of one table."""

    diffs: list[IndexDifference] = field(default_factory=list)

    @property
    def has_differences(self) -> bool:
        return bool(self.diffs)


def defaults_equal(source: DefaultValue, target: DefaultValue) -> bool:
    """Compare two column defaults.

    Two defaults are equal if both are absent, or both are present and their
    string forms are equal. No deeper semantic equivalence is attempted.

    Examples:
        >>> defaults_equal(None, None)
        True
        >>> defaults_equal(0, "0")
        True
        >>> defaults_equal("0", None)
        False
    """
    if source is None or target is None:
        return source is None and target is None
    return str(source) == str(target)


def compare_table_sets(
    source_tables: Sequence[str],
    target_tables: Sequence[str],
    target_label: str,
) -> TableSetComparison:
    """Reconcile the table names of a source and a target database.

    Args:
        source_tables: Table names of the source, in snapshot order.
        target_tables: Table names of the target, in snapshot order.
        target_label: Label of the target, copied onto every record.

    Returns:
        ``TableSetComparison`` with the source-only, target-only and common
        table names (snapshot order) and one ``TableDifference`` per
        one-sided table, source-only records first.

    Example:
        >>> result = compare_table_sets(["orders", "users"], ["payments", "users"], "t1")
        >>> result.source_only, result.target_only, result.common
        (['orders'], ['payments'], ['users'])
    """
    source_set: set[str] = set(source_tables)
    target_set: set[str] = set(target_tables)

    comparison = TableSetComparison(
        source_only=sorted(source_set - target_set),
        target_only=sorted(target_set - source_set),
        common=[t for t in source_tables if t in target_set],
    )

    for table in comparison.source_only:
        comparison.diffs.append(
            TableDifference(
                table=table, source_only=True, target_only=False, target_label=target_label
            )
        )
    for table in comparison.target_only:
        comparison.diffs.append(
            TableDifference(
                table=table, source_only=False, target_only=True, target_label=target_label
            )
        )

    return comparison


def _nullability(nullable: bool) -> str:
    return "NULL" if nullable else "NOT NULL"


def _default_text(default: DefaultValue) -> str:
    # Absent and empty defaults both display as NULL
    return "NULL" if default is None or default == "" else str(default)


def _column_issues(source: ColumnDescriptor, target: ColumnDescriptor) -> list[str]:
    """List every mismatching attribute of a column present on both sides."""
    issues: list[str] = []

    if source.type != target.type:
        issues.append(f"type mismatch ({source.type} vs {target.type})")

    if source.nullable != target.nullable:
        issues.append(
            f"nullability mismatch ({_nullability(source.nullable)} "
            f"vs {_nullability(target.nullable)})"
        )

    if source.extra != target.extra:
        issues.append(
            f"extra attributes mismatch ({source.extra or 'none'} vs {target.extra or 'none'})"
        )

    if not defaults_equal(source.default, target.default):
        issues.append(
            f"default value mismatch ({_default_text(source.default)} "
            f"vs {_default_text(target.default)})"
        )

    return issues


def compare_columns(
    table: str,
    source_columns: Sequence[ColumnDescriptor],
    target_columns: Sequence[ColumnDescriptor],
    target_label: str,
) -> ColumnComparison:
    """Reconcile the columns of one table between source and target.

    Columns are matched by name; position is ignored. Each column yields at
    most one record, listing every mismatching attribute in its ``issue``.

    Args:
        table: Table name.
        source_columns: Columns of the table in the source, ordinal order.
        target_columns: Columns of the table in the target, ordinal order.
        target_label: Label of the target, copied onto every record.

    Returns:
        ``ColumnComparison`` with records for source-only and mismatching
        columns (source order) followed by target-only columns (target order).
    """
    source_map: dict[str, ColumnDescriptor] = {c.name: c for c in source_columns}
    target_map: dict[str, ColumnDescriptor] = {c.name: c for c in target_columns}

    comparison = ColumnComparison()

    for name, source_col in source_map.items():
        target_col = target_map.get(name)
        if target_col is None:
            comparison.diffs.append(
                ColumnDifference(
                    table=table,
                    column=name,
                    source=source_col.attributes(),
                    target=None,
                    issue="Column exists in source but missing in target",
                    target_label=target_label,
                )
            )
            continue

        issues = _column_issues(source_col, target_col)
        if issues:
            comparison.diffs.append(
                ColumnDifference(
                    table=table,
                    column=name,
                    source=source_col.attributes(),
                    target=target_col.attributes(),
                    issue=f"Column {', '.join(issues)}",
                    target_label=target_label,
                )
            )

    for name, target_col in target_map.items():
        if name not in source_map:
            comparison.diffs.append(
                ColumnDifference(
                    table=table,
                    column=name,
                    source=None,
                    target=target_col.attributes(),
                    issue="Column exists in target but missing in source",
                    target_label=target_label,
                )
            )

    return comparison


def _index_issues(source: IndexDescriptor, target: IndexDescriptor) -> list[str]:
    """List every mismatching attribute of an index present on both sides."""
    issues: list[str] = []

    # Key-part order matters: (a, b) and (b, a) are different indexes
    source_cols = ",".join(source.columns)
    target_cols = ",".join(target.columns)
    if source.columns != target.columns:
        issues.append(f"columns mismatch ({source_cols} vs {target_cols})")

    if source.kind != target.kind:
        issues.append(f"type mismatch ({source.kind} vs {target.kind})")

    return issues


def compare_indexes(
    table: str,
    source_indexes: Sequence[IndexDescriptor],
    target_indexes: Sequence[IndexDescriptor],
    target_label: str,
) -> IndexComparison:
    """Reconcile the indexes of one table between source and target.

    Indexes are matched by name and compared on their ordered column list and
    kind.

    Args:
        table: Table name.
        source_indexes: Indexes of the table in the source.
        target_indexes: Indexes of the table in the target.
        target_label: Label of the target, copied onto every record.

    Returns:
        ``IndexComparison`` with records for source-only and mismatching
        indexes (source order) followed by target-only indexes (target order).
    """
    source_map: dict[str, IndexDescriptor] = {i.name: i for i in source_indexes}
    target_map: dict[str, IndexDescriptor] = {i.name: i for i in target_indexes}

    comparison = IndexComparison()

    for name, source_idx in source_map.items():
        target_idx = target_map.get(name)
        if target_idx is None:
            comparison.diffs.append(
                IndexDifference(
                    table=table,
                    index_name=name,
                    source=source_idx.attributes(),
                    target=None,
                    issue="Index exists in source but missing in target",
                    target_label=target_label,
                )
            )
            continue

        issues = _index_issues(source_idx, target_idx)
        if issues:
            comparison.diffs.append(
                IndexDifference(
                    table=table,
                    index_name=name,
                    source=source_idx.attributes(),
                    target=target_idx.attributes(),
                    issue=f"Index {', '.join(issues)}",
                    target_label=target_label,
                )
            )

    for name, target_idx in target_map.items():
        if name not in source_map:
            comparison.diffs.append(
                IndexDifference(
                    table=table,
                    index_name=name,
                    source=None,
                    target=target_idx.attributes(),
                    issue="Index exists in target but missing in source",
                    target_label=target_label,
                )
            )

    return comparison
