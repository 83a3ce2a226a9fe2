"""Domain model entities for budgetline.

These are pure data classes representing business concepts, independent of
database schema. Derived values (balances, summaries, comparison series) are
frozen as well so they can be regenerated and handed around without anyone
patching them in place.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

# Dates arrive as date objects from the store, but imported or legacy rows
# may still carry strings such as "03/15/2025".
DateLike = Union[date, datetime, str]

ZERO = Decimal("0")


class AccountType(str, Enum):
    """Kinds of accounts a user can track."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    STUDENT_LOAN = "student_loan"

    @property
    def is_debt(self) -> bool:
        """Whether balances of this type represent an amount owed."""
        return self in (AccountType.CREDIT_CARD, AccountType.STUDENT_LOAN)


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class BudgetItemType(str, Enum):
    """Direction of a budget item."""

    INCOME = "income"
    EXPENSE = "expense"


TRANSFER_CATEGORY = "transfer"


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: int
    account_type: AccountType
    account_name: str
    initial_balance: Decimal = ZERO
    interest_rate: Decimal = ZERO
    minimum_payment: Decimal = ZERO
    due_date: int = 1
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_debt(self) -> bool:
        return AccountType(self.account_type).is_debt


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is non-negative; the direction is carried by ``type``.
    """

    id: str
    date: DateLike
    description: str
    amount: Decimal
    category: str
    type: TransactionType
    account_id: Optional[int] = None
    transfer_to_account_id: Optional[int] = None
    tags: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BudgetItem:
    """Budget item domain entity.

    ``due_date`` anchors the item: recurring items reuse its day of month in
    every period, one-time items only apply to its month.
    """

    id: str
    name: str
    amount: Decimal
    type: BudgetItemType
    category: str
    due_date: Optional[DateLike]
    is_recurring: bool = True
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AccountBalance:
    """Derived balance and rollups for one account."""

    account: Account
    balance: Decimal
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_transfers_in: Decimal = ZERO
    total_transfers_out: Decimal = ZERO
    transaction_count: int = 0

    @property
    def account_id(self) -> int:
        return self.account.id

    @property
    def display_balance(self) -> Decimal:
        """Balance for presentation; debt accounts show the owed amount unsigned."""
        if self.account.is_debt:
            return abs(self.balance)
        return self.balance


@dataclass(frozen=True)
class FinancialSummary:
    """Net worth overview across active accounts."""

    total_checking: Decimal
    total_savings: Decimal
    total_debt: Decimal
    net_worth: Decimal
    checking_accounts: tuple[AccountBalance, ...] = ()
    savings_accounts: tuple[AccountBalance, ...] = ()
    debt_accounts: tuple[AccountBalance, ...] = ()


class EntryKind(str, Enum):
    """What a period entry contributes to."""

    BUDGET_INCOME = "budget_income"
    BUDGET_EXPENSE = "budget_expense"
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class PeriodEntry:
    """A single amount assigned to a period key."""

    period_key: Optional[str]
    amount: Decimal
    kind: EntryKind


@dataclass(frozen=True)
class PeriodTotals:
    """Budgeted and actual totals for one period."""

    budget_income: Decimal = ZERO
    budget_expenses: Decimal = ZERO
    actual_income: Decimal = ZERO
    actual_expenses: Decimal = ZERO


@dataclass(frozen=True)
class ComparisonSeries:
    """Chart-ready budget vs actual series over a window of periods."""

    periods: tuple[str, ...]
    labels: tuple[str, ...]
    budget_income: tuple[Decimal, ...]
    actual_income: tuple[Decimal, ...]
    budget_expenses: tuple[Decimal, ...]
    actual_expenses: tuple[Decimal, ...]


@dataclass(frozen=True)
class BudgetSummary:
    """Budgeted totals for a set of budget items."""

    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    savings_rate: Decimal
    income_items: tuple[BudgetItem, ...] = field(default_factory=tuple)
    expense_items: tuple[BudgetItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ActualTotals:
    """Actual income and spending for one period."""

    actual_income: Decimal
    actual_expenses: Decimal
    actual_net: Decimal


@dataclass(frozen=True)
class BudgetComparison:
    """Budgeted vs actual figures for one budget item."""

    item: BudgetItem
    budgeted: Decimal
    actual: Decimal
    difference: Decimal
    percentage: Decimal
