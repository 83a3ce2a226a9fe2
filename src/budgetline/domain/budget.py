"""Budget reconciliation and budget item management."""

import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

import structlog

from budgetline.database.base import Database
from budgetline.domain.entities import (
    ZERO,
    ActualTotals,
    BudgetComparison,
    BudgetItem,
    BudgetItemType,
    BudgetSummary,
    DateLike,
    Transaction,
    TransactionType,
)
from budgetline.domain.errors import (
    NotFoundError,
    UnparseableDateError,
    ValidationError,
    budget_item_not_found,
)
from budgetline.utils.amount_parser import to_decimal
from budgetline.utils.date_parser import normalize_date

logger = structlog.get_logger(__name__)

HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


def _validate_period(month: int, year: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")
    if not 1 <= year <= 9999:
        raise ValidationError(f"Invalid year {year}")


def _calendar_month(value: Optional[DateLike]) -> Optional[tuple[int, int]]:
    """Return (month, year) for a date-like value, or None if unparseable."""
    try:
        parsed = normalize_date(value)
    except UnparseableDateError:
        return None
    return parsed.month, parsed.year


def _amount(value, **context) -> Decimal:
    amount = to_decimal(value)
    if amount is None:
        logger.warning("amount_invalid", amount=value, **context)
        return ZERO
    return amount


def ratio_percent(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100``, or 0 when whole is not positive."""
    if whole <= 0:
        return ZERO
    return part / whole * HUNDRED


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """Like :func:`ratio_percent`, rounded to cents."""
    return ratio_percent(part, whole).quantize(CENTS, rounding=ROUND_HALF_UP)


def select_items_for_period(
    items: Iterable[BudgetItem], month: int, year: int
) -> list[BudgetItem]:
    """Select the budget items that apply to a month.

    Recurring items apply to every period: their ``due_date`` only anchors
    the day of month. Recurring items without a usable date are kept as
    well. One-time items apply only to the month of their ``due_date``.

    Args:
        items: Budget items
        month: Target month (1-12)
        year: Target year

    Returns:
        Matching items, in input order

    Raises:
        ValidationError: If month or year is out of range
    """
    _validate_period(month, year)

    selected = []
    for item in items:
        if item.is_recurring:
            selected.append(item)
            continue

        period = _calendar_month(item.due_date)
        if period is None:
            logger.warning(
                "budget_item_date_unparseable", budget_item_id=item.id, due_date=item.due_date
            )
            continue
        if period == (month, year):
            selected.append(item)
    return selected


def summarize(items: Sequence[BudgetItem]) -> BudgetSummary:
    """Total up budgeted income and expenses.

    ``savings_rate`` is the share of income left after expenses, in percent,
    unrounded; it is 0 when there is no budgeted income.

    Raises:
        ValidationError: If items is None
    """
    if items is None:
        raise ValidationError("Budget items are required to build a summary")

    income_items = tuple(item for item in items if item.type == BudgetItemType.INCOME)
    expense_items = tuple(item for item in items if item.type == BudgetItemType.EXPENSE)

    total_income = sum(
        (_amount(item.amount, budget_item_id=item.id) for item in income_items), ZERO
    )
    total_expenses = sum(
        (_amount(item.amount, budget_item_id=item.id) for item in expense_items), ZERO
    )
    net_income = total_income - total_expenses

    return BudgetSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=net_income,
        savings_rate=ratio_percent(net_income, total_income),
        income_items=income_items,
        expense_items=expense_items,
    )


def transactions_in_period(
    transactions: Iterable[Transaction], month: int, year: int
) -> list[Transaction]:
    """Filter transactions dated within a month; unparseable dates are skipped."""
    _validate_period(month, year)

    selected = []
    for txn in transactions:
        period = _calendar_month(txn.date)
        if period is None:
            logger.warning("transaction_date_unparseable", transaction_id=txn.id, date=txn.date)
            continue
        if period == (month, year):
            selected.append(txn)
    return selected


def actual_for_period(
    transactions: Iterable[Transaction], month: int, year: int
) -> ActualTotals:
    """Sum actual income and spending for a month.

    Transfers count as spending, matching the multi-month comparison.
    """
    actual_income = ZERO
    actual_expenses = ZERO
    for txn in transactions_in_period(transactions, month, year):
        if txn.type == TransactionType.INCOME:
            actual_income += _amount(txn.amount, transaction_id=txn.id)
        elif txn.type in (TransactionType.EXPENSE, TransactionType.TRANSFER):
            actual_expenses += _amount(txn.amount, transaction_id=txn.id)

    return ActualTotals(
        actual_income=actual_income,
        actual_expenses=actual_expenses,
        actual_net=actual_income - actual_expenses,
    )


def transaction_matches_item(txn: Transaction, item: BudgetItem) -> bool:
    """Check whether a transaction counts toward a budget item.

    The categories must be equal and either the types match or the item is an
    expense and the transaction is a transfer.
    """
    if txn.category != item.category:
        return False
    if txn.type == item.type:
        return True
    return item.type == BudgetItemType.EXPENSE and txn.type == TransactionType.TRANSFER


def compare_to_actual(
    item: BudgetItem,
    transactions: Iterable[Transaction],
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> BudgetComparison:
    """Compare one budget item to the transactions that count toward it.

    Args:
        item: Budget item
        transactions: Candidate transactions; only those matching the item's
            category and type within the target period are counted
        month: Target month; defaults to the item's due-date month
        year: Target year; defaults to the item's due-date year

    Returns:
        BudgetComparison with budgeted, actual, difference and percentage

    Raises:
        ValidationError: If no period is given and the item's due date is unusable
    """
    if month is None or year is None:
        period = _calendar_month(item.due_date)
        if period is None:
            raise ValidationError(
                f"Budget item {item.id} has no usable due date; a period is required"
            )
        month = month if month is not None else period[0]
        year = year if year is not None else period[1]

    budgeted = _amount(item.amount, budget_item_id=item.id)
    actual = sum(
        (
            abs(_amount(txn.amount, transaction_id=txn.id))
            for txn in transactions_in_period(transactions, month, year)
            if transaction_matches_item(txn, item)
        ),
        ZERO,
    )

    return BudgetComparison(
        item=item,
        budgeted=budgeted,
        actual=actual,
        difference=budgeted - actual,
        percentage=percent_of(actual, budgeted),
    )


def compare_budget(
    items: Iterable[BudgetItem],
    transactions: Sequence[Transaction],
    month: int,
    year: int,
) -> list[BudgetComparison]:
    """Compare every budget item that applies to a month with actual spending."""
    return [
        compare_to_actual(item, transactions, month, year)
        for item in select_items_for_period(items, month, year)
    ]


class BudgetService:
    """Service for managing budget items and reconciling them with transactions."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_fields(
        self,
        name: str,
        amount: Decimal,
        item_type: str,
        category: str,
        due_date: DateLike,
    ) -> tuple[Decimal, BudgetItemType, date]:
        if not name or not name.strip():
            raise ValidationError("Budget item name is required")
        if not category or not category.strip():
            raise ValidationError("Budget item category is required")

        parsed_amount = to_decimal(amount)
        if parsed_amount is None:
            raise ValidationError(f"Invalid budget amount '{amount}'")
        if parsed_amount < 0:
            raise ValidationError("Budget amount must not be negative")

        try:
            parsed_type = BudgetItemType(item_type)
        except ValueError:
            raise ValidationError(
                f"Invalid budget item type '{item_type}'. Must be 'income' or 'expense'"
            )

        return parsed_amount, parsed_type, normalize_date(due_date)

    def create_budget_item(
        self,
        name: str,
        amount: Decimal,
        item_type: str,
        category: str,
        due_date: DateLike,
        is_recurring: bool = True,
    ) -> str:
        """Create a budget item.

        Args:
            name: Display name
            amount: Non-negative budgeted amount
            item_type: 'income' or 'expense'
            category: Category the item is reconciled against
            due_date: Anchor date (its day of month is reused by recurring items)
            is_recurring: Whether the item applies to every month

        Returns:
            New budget item ID

        Raises:
            ValidationError: If any field is invalid
        """
        parsed_amount, parsed_type, parsed_date = self._validate_fields(
            name, amount, item_type, category, due_date
        )
        item_id = str(uuid.uuid4())
        self.db.create_budget_item(
            item_id=item_id,
            name=name.strip(),
            amount=parsed_amount,
            item_type=parsed_type,
            category=category.strip(),
            due_date=parsed_date,
            is_recurring=is_recurring,
        )
        return item_id

    def get_budget_item(self, item_id: str) -> Optional[BudgetItem]:
        """Get budget item by ID."""
        return self.db.get_budget_item(item_id)

    def list_budget_items(self, include_inactive: bool = False) -> list[BudgetItem]:
        """List budget items ordered by due date, type and name."""
        return self.db.list_budget_items(include_inactive=include_inactive)

    def update_budget_item(
        self,
        item_id: str,
        name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        item_type: Optional[str] = None,
        category: Optional[str] = None,
        due_date: Optional[DateLike] = None,
        is_recurring: Optional[bool] = None,
    ) -> None:
        """Update the provided fields of a budget item.

        Raises:
            NotFoundError: If the item does not exist
            ValidationError: If the resulting item is invalid
        """
        existing = self.db.get_budget_item(item_id)
        if existing is None:
            raise NotFoundError(budget_item_not_found(item_id))

        parsed_amount, parsed_type, parsed_date = self._validate_fields(
            name if name is not None else existing.name,
            amount if amount is not None else existing.amount,
            item_type if item_type is not None else existing.type,
            category if category is not None else existing.category,
            due_date if due_date is not None else existing.due_date,
        )
        self.db.update_budget_item(
            item_id=item_id,
            name=name.strip() if name is not None else None,
            amount=parsed_amount if amount is not None else None,
            item_type=parsed_type if item_type is not None else None,
            category=category.strip() if category is not None else None,
            due_date=parsed_date if due_date is not None else None,
            is_recurring=is_recurring,
        )

    def delete_budget_item(self, item_id: str) -> None:
        """Delete a budget item permanently.

        Raises:
            NotFoundError: If the item does not exist
        """
        if self.db.get_budget_item(item_id) is None:
            raise NotFoundError(budget_item_not_found(item_id))
        self.db.delete_budget_item(item_id)

    def get_items_for_period(self, month: int, year: int) -> list[BudgetItem]:
        """Active budget items that apply to a month."""
        return select_items_for_period(self.list_budget_items(), month, year)

    def get_period_summary(self, month: int, year: int) -> BudgetSummary:
        """Budgeted totals for a month."""
        return summarize(self.get_items_for_period(month, year))

    def get_actual_for_period(self, month: int, year: int) -> ActualTotals:
        """Actual totals for a month."""
        return actual_for_period(self.db.list_transactions(), month, year)

    def get_budget_comparison(self, month: int, year: int) -> list[BudgetComparison]:
        """Per-item budget vs actual comparison for a month."""
        transactions = tuple(self.db.list_transactions())
        return compare_budget(self.list_budget_items(), transactions, month, year)
