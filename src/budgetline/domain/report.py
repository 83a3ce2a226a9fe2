"""Multi-month budget vs actual comparison report."""

from datetime import date
from typing import Optional, Sequence

from budgetline.database.base import Database
from budgetline.domain.budget import select_items_for_period
from budgetline.domain.entities import (
    ZERO,
    BudgetItem,
    ComparisonSeries,
    PeriodTotals,
    Transaction,
)
from budgetline.domain.periods import (
    DEFAULT_WINDOW_SIZE,
    bucketize,
    budget_item_entries,
    build_comparison_window,
    period_label,
    periods_with_data,
    split_period_key,
    transaction_entries,
)


def build_monthly_comparison(
    budget_items: Sequence[BudgetItem],
    transactions: Sequence[Transaction],
    reference_date: date,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> ComparisonSeries:
    """Build the budget vs actual series for a window of months.

    The window is chosen from the months that have data (transaction dates
    and budget item due dates). Budget figures for each month in the window
    come from the items that apply to that month, so recurring items appear
    in every month rather than only in their anchor month.

    Args:
        budget_items: Active budget items
        transactions: Transactions to compare against
        reference_date: Date whose month ends the window when there is no data
        window_size: Number of months to show at most

    Returns:
        ComparisonSeries with one value per period in each series
    """
    actual_entries = transaction_entries(transactions)
    anchor_entries = budget_item_entries(budget_items)
    window = build_comparison_window(
        periods_with_data(actual_entries) | periods_with_data(anchor_entries),
        reference_date,
        window_size,
    )

    budget_entries = []
    for period_key in window:
        year, month = split_period_key(period_key)
        selected = select_items_for_period(budget_items, month, year)
        budget_entries.extend(budget_item_entries(selected, period_key=period_key))

    totals = bucketize(actual_entries + budget_entries)
    empty = PeriodTotals()
    rows = [totals.get(key, empty) for key in window]

    return ComparisonSeries(
        periods=tuple(window),
        labels=tuple(period_label(key) for key in window),
        budget_income=tuple(row.budget_income for row in rows),
        actual_income=tuple(row.actual_income for row in rows),
        budget_expenses=tuple(row.budget_expenses for row in rows),
        actual_expenses=tuple(row.actual_expenses for row in rows),
    )


def series_totals(series: ComparisonSeries) -> PeriodTotals:
    """Sum a comparison series across its whole window."""
    return PeriodTotals(
        budget_income=sum(series.budget_income, ZERO),
        budget_expenses=sum(series.budget_expenses, ZERO),
        actual_income=sum(series.actual_income, ZERO),
        actual_expenses=sum(series.actual_expenses, ZERO),
    )


class ReportService:
    """Service for building comparison reports from the store."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def monthly_comparison(
        self,
        reference_date: Optional[date] = None,
        window_size: int = DEFAULT_WINDOW_SIZE,
    ) -> ComparisonSeries:
        """Budget vs actual series over recent months.

        Args:
            reference_date: Defaults to today
            window_size: Number of months to show at most
        """
        if reference_date is None:
            reference_date = date.today()
        budget_items = tuple(self.db.list_budget_items())
        transactions = tuple(self.db.list_transactions())
        return build_monthly_comparison(
            budget_items, transactions, reference_date, window_size
        )
