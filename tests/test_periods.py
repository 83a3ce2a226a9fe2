"""Tests for period keys, comparison windows and bucketing."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from budgetline.domain.entities import (
    BudgetItem,
    BudgetItemType,
    EntryKind,
    PeriodEntry,
    Transaction,
    TransactionType,
)
from budgetline.domain.errors import UnparseableDateError, ValidationError
from budgetline.domain.periods import (
    budget_item_entries,
    bucketize,
    build_comparison_window,
    is_period_key,
    period_key_of,
    period_label,
    periods_with_data,
    split_period_key,
    transaction_entries,
)


class TestPeriodKeyOf:
    """Tests for mapping dates to YYYY-MM keys."""

    @pytest.mark.parametrize(
        "value",
        [
            "2025-03-15",
            "03-15-2025",
            "3/15/2025",
            "03/15/2025",
            "2025-03",
            "2025-03-15T23:30:00Z",
            date(2025, 3, 15),
            datetime(2025, 3, 31, 23, 59),
        ],
    )
    def test_supported_forms(self, value):
        assert period_key_of(value) == "2025-03"

    def test_first_of_month_never_shifts(self):
        assert period_key_of("2025-03-01") == "2025-03"
        assert period_key_of("2025-01-01") == "2025-01"

    @pytest.mark.parametrize("value", ["", "not a date", "2025-13-01", "15/2025", None, 20250301])
    def test_unparseable_values_raise(self, value):
        with pytest.raises(UnparseableDateError):
            period_key_of(value)


def test_is_period_key():
    assert is_period_key("2025-03")
    assert not is_period_key("2025-3")
    assert not is_period_key("2025-13")
    assert not is_period_key("2025-03-01")
    assert not is_period_key(None)


def test_split_period_key():
    assert split_period_key("2024-11") == (2024, 11)
    with pytest.raises(ValidationError):
        split_period_key("November")


def test_period_label():
    assert period_label("2025-03") == "Mar 2025"
    assert period_label("2024-12") == "Dec 2024"


class TestBuildComparisonWindow:
    """Tests for choosing the periods a comparison shows."""

    def test_empty_data_uses_months_ending_at_reference(self):
        window = build_comparison_window([], date(2025, 6, 18))

        assert window == ["2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06"]

    def test_empty_data_crosses_year_boundary(self):
        window = build_comparison_window(set(), date(2025, 2, 28), window_size=4)

        assert window == ["2024-11", "2024-12", "2025-01", "2025-02"]

    def test_fewer_periods_than_window_are_not_padded(self):
        window = build_comparison_window({"2025-04", "2025-02"}, date(2025, 6, 1))

        assert window == ["2025-02", "2025-04"]

    def test_keeps_latest_periods(self):
        periods = [f"2024-{month:02d}" for month in range(1, 13)]

        window = build_comparison_window(periods, date(2025, 1, 1), window_size=3)

        assert window == ["2024-10", "2024-11", "2024-12"]

    def test_duplicates_and_malformed_keys_are_ignored(self):
        window = build_comparison_window(
            ["2025-01", "2025-01", "bogus", "2025-1"], date(2025, 6, 1)
        )

        assert window == ["2025-01"]

    def test_window_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            build_comparison_window([], date(2025, 6, 1), window_size=0)


class TestBucketize:
    """Tests for summing entries by period."""

    def test_routes_each_kind(self):
        entries = [
            PeriodEntry("2025-03", Decimal("4000"), EntryKind.BUDGET_INCOME),
            PeriodEntry("2025-03", Decimal("1500"), EntryKind.BUDGET_EXPENSE),
            PeriodEntry("2025-03", Decimal("3900"), EntryKind.INCOME),
            PeriodEntry("2025-03", Decimal("1200"), EntryKind.EXPENSE),
            PeriodEntry("2025-03", Decimal("300"), EntryKind.TRANSFER),
        ]

        totals = bucketize(entries)

        march = totals["2025-03"]
        assert march.budget_income == Decimal("4000")
        assert march.budget_expenses == Decimal("1500")
        assert march.actual_income == Decimal("3900")
        assert march.actual_expenses == Decimal("1500")

    def test_totals_match_sum_of_entries_per_period(self):
        entries = [
            PeriodEntry("2025-01", Decimal("10"), EntryKind.EXPENSE),
            PeriodEntry("2025-02", Decimal("20"), EntryKind.EXPENSE),
            PeriodEntry("2025-01", Decimal("5.5"), EntryKind.TRANSFER),
            PeriodEntry("2025-02", Decimal("7"), EntryKind.INCOME),
        ]

        totals = bucketize(entries)

        assert set(totals) == {"2025-01", "2025-02"}
        assert totals["2025-01"].actual_expenses == Decimal("15.5")
        assert totals["2025-02"].actual_expenses == Decimal("20")
        assert totals["2025-02"].actual_income == Decimal("7")

    def test_invalid_keys_are_skipped_with_warning(self):
        entries = [
            PeriodEntry(None, Decimal("10"), EntryKind.EXPENSE),
            PeriodEntry("03/2025", Decimal("10"), EntryKind.EXPENSE),
            PeriodEntry("2025-03", Decimal("1"), EntryKind.EXPENSE),
        ]

        with capture_logs() as logs:
            totals = bucketize(entries)

        assert list(totals) == ["2025-03"]
        assert totals["2025-03"].actual_expenses == Decimal("1")
        assert len([entry for entry in logs if entry["event"] == "period_key_invalid"]) == 2

    def test_unknown_kind_is_skipped_with_warning(self):
        entries = [
            PeriodEntry("2025-03", Decimal("10"), "refund"),
            PeriodEntry("2025-04", Decimal("10"), "refund"),
            PeriodEntry("2025-03", Decimal("4"), EntryKind.INCOME),
        ]

        with capture_logs() as logs:
            totals = bucketize(entries)

        assert list(totals) == ["2025-03"]
        assert totals["2025-03"].actual_income == Decimal("4")
        assert totals["2025-03"].actual_expenses == Decimal("0")
        assert len([entry for entry in logs if entry["event"] == "period_entry_kind_invalid"]) == 2

    def test_invalid_amount_counts_as_zero(self):
        entries = [PeriodEntry("2025-03", "abc", EntryKind.INCOME)]

        with capture_logs() as logs:
            totals = bucketize(entries)

        assert totals["2025-03"].actual_income == Decimal("0")
        assert any(entry["event"] == "period_amount_invalid" for entry in logs)

    def test_empty_entries(self):
        assert bucketize([]) == {}


def test_transaction_entries_map_types_and_skip_bad_dates():
    transactions = [
        Transaction("a", "2025-03-02", "Pay", Decimal("100"), "salary", TransactionType.INCOME, 1),
        Transaction("b", "3/9/2025", "Food", Decimal("20"), "food", TransactionType.EXPENSE, 1),
        Transaction("c", "garbage", "Bad", Decimal("5"), "food", TransactionType.EXPENSE, 1),
        Transaction("d", "2025-04-01", "Move", Decimal("50"), "transfer", TransactionType.TRANSFER, 1, 2),
    ]

    with capture_logs() as logs:
        entries = transaction_entries(transactions)

    assert [(e.period_key, e.kind) for e in entries] == [
        ("2025-03", EntryKind.INCOME),
        ("2025-03", EntryKind.EXPENSE),
        ("2025-04", EntryKind.TRANSFER),
    ]
    assert any(entry["event"] == "transaction_date_unparseable" for entry in logs)
    assert periods_with_data(entries) == {"2025-03", "2025-04"}


def test_budget_item_entries_use_due_date_or_given_period():
    items = [
        BudgetItem("i1", "Salary", Decimal("4000"), BudgetItemType.INCOME, "salary", date(2025, 1, 15)),
        BudgetItem("i2", "Rent", Decimal("1200"), BudgetItemType.EXPENSE, "housing", date(2025, 2, 1)),
    ]

    anchored = budget_item_entries(items)
    projected = budget_item_entries(items, period_key="2025-06")

    assert [(e.period_key, e.kind) for e in anchored] == [
        ("2025-01", EntryKind.BUDGET_INCOME),
        ("2025-02", EntryKind.BUDGET_EXPENSE),
    ]
    assert {e.period_key for e in projected} == {"2025-06"}
