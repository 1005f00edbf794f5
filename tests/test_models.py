"""Tests for snapshot, difference and result models."""

import json

import pytest
from pydantic import ValidationError

from db_compare.schema.models import (
    ColumnDescriptor,
    ColumnDifference,
    ComparisonResult,
    IndexDescriptor,
    IndexKind,
    SchemaSnapshot,
    SummaryCounters,
    TableDifference,
)


class TestIndexKind:
    """Derivation of the closed index kind."""

    def test_named_primary(self) -> None:
        assert IndexKind.derive("PRIMARY", unique=True) is IndexKind.PRIMARY

    def test_primary_flag(self) -> None:
        assert IndexKind.derive("users_pkey", unique=True, primary=True) is IndexKind.PRIMARY

    def test_unique(self) -> None:
        assert IndexKind.derive("idx_email", unique=True) is IndexKind.UNIQUE

    def test_non_unique(self) -> None:
        assert IndexKind.derive("idx_created", unique=False) is IndexKind.INDEX

    def test_name_match_is_case_sensitive(self) -> None:
        assert IndexKind.derive("primary", unique=False) is IndexKind.INDEX

    def test_renders_as_plain_string(self) -> None:
        assert f"{IndexKind.UNIQUE}" == "UNIQUE"


class TestSchemaSnapshot:
    """Immutable table list of one database."""

    def test_tables_sorted(self) -> None:
        snap = SchemaSnapshot(database_name="app", tables=["users", "orders", "accounts"])

        assert snap.tables == ("accounts", "orders", "users")
        assert len(snap) == 3
        assert snap.table_set == frozenset({"users", "orders", "accounts"})

    def test_duplicates_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate table names: users"):
            SchemaSnapshot(database_name="app", tables=["users", "users"])

    def test_frozen(self) -> None:
        snap = SchemaSnapshot(database_name="app", tables=["users"])

        with pytest.raises(ValidationError):
            snap.tables = ("other",)

    def test_empty(self) -> None:
        snap = SchemaSnapshot(database_name="app")

        assert snap.tables == ()
        assert len(snap) == 0


class TestDescriptors:
    """Column and index descriptors."""

    def test_column_defaults(self) -> None:
        col = ColumnDescriptor(name="id", type="integer")

        assert col.nullable is True
        assert col.default is None
        assert col.extra == ""

    def test_column_keeps_native_default(self) -> None:
        assert ColumnDescriptor(name="n", type="integer", default=0).default == 0
        assert ColumnDescriptor(name="n", type="integer", default="0").default == "0"

    def test_index_attributes(self) -> None:
        idx = IndexDescriptor(name="idx", columns=("a", "b"), kind=IndexKind.UNIQUE)

        attrs = idx.attributes()

        assert attrs.columns == ["a", "b"]
        assert attrs.type is IndexKind.UNIQUE


class TestTableDifference:
    """Exactly one side flag must be set."""

    def test_both_flags_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Exactly one"):
            TableDifference(table="t", source_only=True, target_only=True, target_label="x")

    def test_no_flag_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Exactly one"):
            TableDifference(table="t", target_label="x")


class TestSummaryCounters:
    """Counters are non-negative."""

    def test_defaults_zero(self) -> None:
        summary = SummaryCounters()

        assert summary.model_dump() == {
            "total_tables": 0,
            "tables_with_diffs": 0,
            "tables_only_in_source": 0,
            "tables_only_in_targets": 0,
            "columns_with_diffs": 0,
            "indexes_with_diffs": 0,
        }

    def test_negative_rejected(self) -> None:
        summary = SummaryCounters()

        with pytest.raises(ValidationError):
            summary.columns_with_diffs = -1


class TestComparisonResult:
    """Serialization and reporting of the aggregated result."""

    def _result(self) -> ComparisonResult:
        result = ComparisonResult()
        result.table_diffs.append(
            TableDifference(table="orders", source_only=True, target_label="staging")
        )
        result.column_diffs.append(
            ColumnDifference(
                table="users",
                column="email",
                source=None,
                target=ColumnDescriptor(name="email", type="text").attributes(),
                issue="Column exists in target but missing in source",
                target_label="staging",
            )
        )
        result.summary.total_tables = 2
        result.summary.tables_only_in_source = 1
        result.summary.columns_with_diffs = 1
        return result

    def test_wire_format_aliases(self) -> None:
        data = self._result().model_dump(by_alias=True)

        assert set(data) == {"tableDiffs", "columnDiffs", "indexDiffs", "summary"}
        assert data["tableDiffs"][0] == {
            "table": "orders",
            "sourceOnly": True,
            "targetOnly": False,
            "targetDb": "staging",
        }
        assert data["columnDiffs"][0]["source"] is None
        assert data["summary"]["tablesOnlyInSource"] == 1

    def test_json_round_trip(self) -> None:
        result = self._result()

        payload = result.model_dump_json(by_alias=True)

        assert ComparisonResult.model_validate(json.loads(payload)) == result

    def test_has_differences(self) -> None:
        assert ComparisonResult().has_differences is False
        assert self._result().has_differences is True

    def test_format_report_no_differences(self) -> None:
        result = ComparisonResult(summary=SummaryCounters(total_tables=4))

        assert result.format_report() == "No differences (4 tables compared)"

    def test_format_report_lists_differences(self) -> None:
        report = self._result().format_report()

        assert "Tables (1):" in report
        assert "[staging] orders: only in source" in report
        assert "[staging] users.email: Column exists in target but missing in source" in report
