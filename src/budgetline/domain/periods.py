"""Calendar-month period keys and multi-month bucketing."""

import re
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

import structlog
from dateutil.relativedelta import relativedelta

from budgetline.domain.entities import (
    ZERO,
    BudgetItem,
    BudgetItemType,
    DateLike,
    EntryKind,
    PeriodEntry,
    PeriodTotals,
    Transaction,
    TransactionType,
)
from budgetline.domain.errors import UnparseableDateError, ValidationError
from budgetline.utils.amount_parser import to_decimal
from budgetline.utils.date_parser import normalize_date

logger = structlog.get_logger(__name__)

DEFAULT_WINDOW_SIZE = 6

PERIOD_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

# Fixed English abbreviations so labels never depend on the process locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_BUDGET_KINDS = {
    BudgetItemType.INCOME: EntryKind.BUDGET_INCOME,
    BudgetItemType.EXPENSE: EntryKind.BUDGET_EXPENSE,
}

_TRANSACTION_KINDS = {
    TransactionType.INCOME: EntryKind.INCOME,
    TransactionType.EXPENSE: EntryKind.EXPENSE,
    TransactionType.TRANSFER: EntryKind.TRANSFER,
}


def format_period_key(year: int, month: int) -> str:
    """Build a "YYYY-MM" key."""
    return f"{year:04d}-{month:02d}"


def period_key_of(date_like: DateLike) -> str:
    """Map a date-like value to its "YYYY-MM" period key.

    Accepts date objects, "YYYY-MM-DD", "YYYY-MM", "MM-DD-YYYY" and
    "MM/DD/YYYY". Only calendar fields are read, so the month never shifts
    with the runtime timezone.

    Raises:
        UnparseableDateError: If the value cannot be parsed
    """
    parsed = normalize_date(date_like)
    return format_period_key(parsed.year, parsed.month)


def is_period_key(value: Any) -> bool:
    """Check whether a value is a well-formed "YYYY-MM" key."""
    return isinstance(value, str) and PERIOD_KEY_PATTERN.match(value) is not None


def split_period_key(period_key: str) -> tuple[int, int]:
    """Split a period key into (year, month).

    Raises:
        ValidationError: If the key is malformed
    """
    if not is_period_key(period_key):
        raise ValidationError(f"Invalid period key '{period_key}'")
    year, month = period_key.split("-")
    return int(year), int(month)


def period_label(period_key: str) -> str:
    """Human-readable label for a period key, e.g. "Mar 2025"."""
    year, month = split_period_key(period_key)
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def build_comparison_window(
    periods_with_data: Iterable[str],
    reference_date: date,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> list[str]:
    """Choose the ordered period keys a comparison chart should show.

    - With at least ``window_size`` periods of data, the latest
      ``window_size`` of them.
    - With fewer, all of them (no padding with empty months).
    - With none, the ``window_size`` months ending at ``reference_date``'s
      month so an empty ledger still gets a labelled axis.

    Malformed keys are ignored.

    Raises:
        ValidationError: If window_size is smaller than 1
    """
    if window_size < 1:
        raise ValidationError(f"Window size must be at least 1, got {window_size}")

    keys = sorted({key for key in periods_with_data if is_period_key(key)})
    if keys:
        return keys[-window_size:]

    first_of_month = reference_date.replace(day=1)
    window = []
    for offset in range(window_size - 1, -1, -1):
        month_start = first_of_month - relativedelta(months=offset)
        window.append(format_period_key(month_start.year, month_start.month))
    return window


def transaction_entries(transactions: Iterable[Transaction]) -> list[PeriodEntry]:
    """Turn transactions into period entries.

    Transactions with missing or unparseable dates, or an unknown type, are
    skipped with a warning.
    """
    entries = []
    for txn in transactions:
        try:
            kind = _TRANSACTION_KINDS[TransactionType(txn.type)]
        except ValueError:
            logger.warning("transaction_type_invalid", transaction_id=txn.id, type=txn.type)
            continue
        try:
            key = period_key_of(txn.date)
        except UnparseableDateError:
            logger.warning("transaction_date_unparseable", transaction_id=txn.id, date=txn.date)
            continue
        entries.append(PeriodEntry(period_key=key, amount=txn.amount, kind=kind))
    return entries


def budget_item_entries(
    items: Iterable[BudgetItem], period_key: Optional[str] = None
) -> list[PeriodEntry]:
    """Turn budget items into period entries.

    Args:
        items: Budget items
        period_key: If given, every item is placed in this period (used to
            project items selected for a period). Otherwise each item goes to
            its own due-date period.

    Returns:
        List of PeriodEntry; items with bad dates or types are skipped with a
        warning
    """
    entries = []
    for item in items:
        try:
            kind = _BUDGET_KINDS[BudgetItemType(item.type)]
        except ValueError:
            logger.warning("budget_item_type_invalid", budget_item_id=item.id, type=item.type)
            continue
        key = period_key
        if key is None:
            try:
                key = period_key_of(item.due_date)
            except UnparseableDateError:
                logger.warning(
                    "budget_item_date_unparseable",
                    budget_item_id=item.id,
                    due_date=item.due_date,
                )
                continue
        entries.append(PeriodEntry(period_key=key, amount=item.amount, kind=kind))
    return entries


def bucketize(entries: Iterable[PeriodEntry]) -> dict[str, PeriodTotals]:
    """Sum period entries into per-period budget and actual totals.

    Transfers count as actual expenses: for comparison purposes money moved
    out of an account is no longer spendable.

    Entries with a missing or malformed period key or an unknown kind are
    skipped with a warning; invalid amounts count as zero.

    Returns:
        Mapping of period key to PeriodTotals
    """
    totals: dict[str, dict[str, Decimal]] = defaultdict(
        lambda: {
            "budget_income": ZERO,
            "budget_expenses": ZERO,
            "actual_income": ZERO,
            "actual_expenses": ZERO,
        }
    )

    for entry in entries:
        if not is_period_key(entry.period_key):
            logger.warning("period_key_invalid", period_key=entry.period_key, kind=entry.kind)
            continue

        try:
            kind = EntryKind(entry.kind)
        except ValueError:
            logger.warning("period_entry_kind_invalid", period_key=entry.period_key, kind=entry.kind)
            continue

        amount = to_decimal(entry.amount)
        if amount is None:
            logger.warning(
                "period_amount_invalid", period_key=entry.period_key, amount=entry.amount
            )
            amount = ZERO

        bucket = totals[entry.period_key]
        if kind is EntryKind.BUDGET_INCOME:
            bucket["budget_income"] += amount
        elif kind is EntryKind.BUDGET_EXPENSE:
            bucket["budget_expenses"] += amount
        elif kind is EntryKind.INCOME:
            bucket["actual_income"] += amount
        else:
            bucket["actual_expenses"] += amount

    return {key: PeriodTotals(**values) for key, values in totals.items()}


def periods_with_data(entries: Sequence[PeriodEntry]) -> set[str]:
    """Collect the well-formed period keys present in entries."""
    return {entry.period_key for entry in entries if is_period_key(entry.period_key)}
