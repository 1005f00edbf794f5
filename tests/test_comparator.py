"""Tests for the pure table, column and index comparison functions."""

import pytest

from db_compare.schema.comparator import (
    compare_columns,
    compare_indexes,
    compare_table_sets,
    defaults_equal,
)
from db_compare.schema.models import (
    ColumnAttributes,
    ColumnDescriptor,
    IndexAttributes,
    IndexDescriptor,
    IndexKind,
)


def _col(name: str, type: str = "integer", **kwargs) -> ColumnDescriptor:
    return ColumnDescriptor(name=name, type=type, **kwargs)


def _idx(name: str, *columns: str, kind: IndexKind = IndexKind.INDEX) -> IndexDescriptor:
    return IndexDescriptor(name=name, columns=columns, kind=kind)


# ============================================================
# Default value equality
# ============================================================


class TestDefaultsEqual:
    """The null-aware, string-normalized default comparison."""

    def test_both_absent(self) -> None:
        assert defaults_equal(None, None) is True

    def test_one_absent(self) -> None:
        assert defaults_equal("0", None) is False
        assert defaults_equal(None, "0") is False

    def test_native_and_string_forms_match(self) -> None:
        """Different native representations with the same string form are equal."""
        assert defaults_equal(0, "0") is True
        assert defaults_equal(1.5, "1.5") is True

    def test_different_literal_forms_differ(self) -> None:
        """No semantic equivalence beyond str(): quoted literal vs bare number."""
        assert defaults_equal("'0'", 0) is False
        assert defaults_equal("now()", "CURRENT_TIMESTAMP") is False

    def test_empty_string_is_not_absent(self) -> None:
        assert defaults_equal("", None) is False
        assert defaults_equal("", "") is True


# ============================================================
# Table set comparison
# ============================================================


class TestCompareTableSets:
    """Reconciliation of table name sets."""

    def test_identical_sets(self) -> None:
        result = compare_table_sets(["orders", "users"], ["orders", "users"], "t1")

        assert result.diffs == []
        assert result.source_only == []
        assert result.target_only == []
        assert result.common == ["orders", "users"]

    def test_users_orders_payments_scenario(self) -> None:
        """Source {users, orders} vs target {users, payments}."""
        result = compare_table_sets(["orders", "users"], ["payments", "users"], "staging")

        assert [(d.table, d.source_only, d.target_only) for d in result.diffs] == [
            ("orders", True, False),
            ("payments", False, True),
        ]
        assert all(d.target_label == "staging" for d in result.diffs)
        assert result.common == ["users"]

    def test_one_sided_tables_in_lexicographic_order(self) -> None:
        result = compare_table_sets(["c", "a", "b"], [], "t1")

        assert result.source_only == ["a", "b", "c"]
        assert [d.table for d in result.diffs] == ["a", "b", "c"]

    def test_names_are_case_sensitive(self) -> None:
        result = compare_table_sets(["Users"], ["users"], "t1")

        assert result.source_only == ["Users"]
        assert result.target_only == ["users"]
        assert result.common == []

    def test_swapping_sides_flips_flags(self) -> None:
        forward = compare_table_sets(["a", "b"], ["b", "c"], "t1")
        backward = compare_table_sets(["b", "c"], ["a", "b"], "t1")

        forward_flags = {d.table: (d.source_only, d.target_only) for d in forward.diffs}
        backward_flags = {d.table: (d.target_only, d.source_only) for d in backward.diffs}
        assert forward_flags == backward_flags


# ============================================================
# Column comparison
# ============================================================


class TestCompareColumns:
    """Reconciliation of column definitions for one table."""

    def test_identical_columns(self) -> None:
        cols = [
            _col("id", extra="identity always", nullable=False),
            _col("email", "varchar(255)", nullable=False),
            _col("status", "text", default="'active'::text"),
        ]

        result = compare_columns("users", cols, list(cols), "t1")

        assert result.has_differences is False
        assert result.diffs == []

    def test_type_mismatch_scenario(self) -> None:
        """varchar(255) vs varchar(191) yields exactly one record."""
        source = [_col("email", "varchar(255)", nullable=False)]
        target = [_col("email", "varchar(191)", nullable=False)]

        result = compare_columns("users", source, target, "t1")

        assert result.has_differences is True
        assert len(result.diffs) == 1
        diff = result.diffs[0]
        assert diff.issue == "Column type mismatch (varchar(255) vs varchar(191))"
        assert diff.table == "users"
        assert diff.column == "email"
        assert diff.source == ColumnAttributes(type="varchar(255)", nullable=False)
        assert diff.target == ColumnAttributes(type="varchar(191)", nullable=False)

    def test_multiple_mismatches_single_record(self) -> None:
        """Every differing attribute is listed in one record, in fixed order."""
        source = [_col("qty", "integer", nullable=True, default="0", extra="")]
        target = [_col("qty", "bigint", nullable=False, default=None, extra="identity always")]

        result = compare_columns("items", source, target, "t1")

        assert len(result.diffs) == 1
        assert result.diffs[0].issue == (
            "Column type mismatch (integer vs bigint), "
            "nullability mismatch (NULL vs NOT NULL), "
            "extra attributes mismatch (none vs identity always), "
            "default value mismatch (0 vs NULL)"
        )

    def test_default_compared_by_string_form(self) -> None:
        source = [_col("n", default=0)]
        target = [_col("n", default="0")]

        result = compare_columns("t", source, target, "t1")

        assert result.diffs == []

    def test_empty_default_displays_as_null(self) -> None:
        """An empty default still differs from an absent one but prints as NULL."""
        source = [_col("note", "text", default="")]
        target = [_col("note", "text", default="'x'::text")]

        result = compare_columns("t", source, target, "t1")

        assert result.diffs[0].issue == "Column default value mismatch (NULL vs 'x'::text)"

    def test_missing_in_target(self) -> None:
        source = [_col("id"), _col("legacy")]
        target = [_col("id")]

        result = compare_columns("users", source, target, "t1")

        assert len(result.diffs) == 1
        diff = result.diffs[0]
        assert diff.column == "legacy"
        assert diff.issue == "Column exists in source but missing in target"
        assert diff.source is not None
        assert diff.target is None

    def test_missing_in_source(self) -> None:
        source = [_col("id")]
        target = [_col("id"), _col("added")]

        result = compare_columns("users", source, target, "t1")

        assert len(result.diffs) == 1
        diff = result.diffs[0]
        assert diff.column == "added"
        assert diff.issue == "Column exists in target but missing in source"
        assert diff.source is None
        assert diff.target is not None

    def test_position_is_ignored(self) -> None:
        source = [_col("a"), _col("b")]
        target = [_col("b"), _col("a")]

        assert compare_columns("t", source, target, "t1").diffs == []

    def test_record_order(self) -> None:
        """Source-side records in source order, then target-only in target order."""
        source = [_col("z_gone"), _col("a_changed", "text"), _col("same")]
        target = [_col("same"), _col("y_new"), _col("a_changed", "varchar"), _col("b_new")]

        result = compare_columns("t", source, target, "t1")

        assert [d.column for d in result.diffs] == ["z_gone", "a_changed", "y_new", "b_new"]

    def test_target_label_on_every_record(self) -> None:
        result = compare_columns("t", [_col("a")], [_col("b")], "replica-2")

        assert [d.target_label for d in result.diffs] == ["replica-2", "replica-2"]


# ============================================================
# Index comparison
# ============================================================


class TestCompareIndexes:
    """Reconciliation of index definitions for one table."""

    def test_identical_indexes(self) -> None:
        idx = [
            _idx("users_pkey", "id", kind=IndexKind.PRIMARY),
            _idx("idx_email", "email", kind=IndexKind.UNIQUE),
        ]

        result = compare_indexes("users", idx, list(idx), "t1")

        assert result.has_differences is False

    def test_columns_and_kind_mismatch_scenario(self) -> None:
        """(a,b) UNIQUE vs (b,a) INDEX yields one record listing both."""
        source = [_idx("idx_a", "a", "b", kind=IndexKind.UNIQUE)]
        target = [_idx("idx_a", "b", "a", kind=IndexKind.INDEX)]

        result = compare_indexes("t", source, target, "t1")

        assert len(result.diffs) == 1
        diff = result.diffs[0]
        assert diff.issue == "Index columns mismatch (a,b vs b,a), type mismatch (UNIQUE vs INDEX)"
        assert diff.index_name == "idx_a"
        assert diff.source == IndexAttributes(columns=["a", "b"], type=IndexKind.UNIQUE)
        assert diff.target == IndexAttributes(columns=["b", "a"], type=IndexKind.INDEX)

    def test_column_order_is_significant(self) -> None:
        source = [_idx("idx", "a", "b")]
        target = [_idx("idx", "b", "a")]

        result = compare_indexes("t", source, target, "t1")

        assert result.diffs[0].issue == "Index columns mismatch (a,b vs b,a)"

    def test_kind_only_mismatch(self) -> None:
        source = [_idx("idx", "a", kind=IndexKind.INDEX)]
        target = [_idx("idx", "a", kind=IndexKind.UNIQUE)]

        result = compare_indexes("t", source, target, "t1")

        assert result.diffs[0].issue == "Index type mismatch (INDEX vs UNIQUE)"

    def test_missing_on_each_side(self) -> None:
        source = [_idx("idx_old", "a")]
        target = [_idx("idx_new", "a")]

        result = compare_indexes("t", source, target, "t1")

        assert [(d.index_name, d.issue) for d in result.diffs] == [
            ("idx_old", "Index exists in source but missing in target"),
            ("idx_new", "Index exists in target but missing in source"),
        ]
        assert result.diffs[0].target is None
        assert result.diffs[1].source is None

    @pytest.mark.parametrize(
        "source,target",
        [
            ([], []),
            ([_idx("idx", "a")], [_idx("idx", "a")]),
        ],
    )
    def test_no_records_when_equal(self, source, target) -> None:
        assert compare_indexes("t", source, target, "t1").diffs == []
