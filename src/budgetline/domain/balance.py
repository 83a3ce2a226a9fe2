"""Account balance derivation.

Balances are never stored. They are recomputed from each account's initial
balance and the full transaction history every time a caller needs them:

- asset accounts (checking, savings):
  ``initial + income - expenses + transfers_in - transfers_out``
- debt accounts (credit_card, student_loan), where the balance is the amount
  owed: ``initial + expenses + transfers_out - income - transfers_in``

Transfers are double-entry: the source leg is ``account_id`` and the
destination leg is ``transfer_to_account_id``.
"""

from decimal import Decimal
from typing import Any, Optional, Sequence

import structlog

from budgetline.database.base import Database
from budgetline.domain.entities import (
    ZERO,
    Account,
    AccountBalance,
    AccountType,
    FinancialSummary,
    Transaction,
    TransactionType,
)
from budgetline.domain.errors import ValidationError
from budgetline.utils.amount_parser import to_decimal

logger = structlog.get_logger(__name__)


def _new_rollup() -> dict[str, Any]:
    return {
        "income": ZERO,
        "expenses": ZERO,
        "transfers_in": ZERO,
        "transfers_out": ZERO,
        "count": 0,
    }


def _transaction_type(txn: Transaction) -> Optional[TransactionType]:
    try:
        return TransactionType(txn.type)
    except ValueError:
        logger.warning(
            "transaction_type_invalid", transaction_id=txn.id, type=txn.type
        )
        return None


def _is_debt(account: Account) -> bool:
    try:
        return AccountType(account.account_type).is_debt
    except ValueError:
        logger.warning(
            "account_type_invalid",
            account_id=account.id,
            account_type=account.account_type,
        )
        return False


def _transaction_amount(txn: Transaction) -> Decimal:
    amount = to_decimal(txn.amount)
    if amount is None:
        logger.warning(
            "transaction_amount_invalid", transaction_id=txn.id, amount=txn.amount
        )
        return ZERO
    return amount


def _initial_balance(account: Account) -> Decimal:
    initial = to_decimal(account.initial_balance)
    if initial is None:
        logger.warning(
            "initial_balance_invalid",
            account_id=account.id,
            initial_balance=account.initial_balance,
        )
        return ZERO
    return initial


def accumulate_rollups(
    account_ids: Sequence[Any], transactions: Sequence[Transaction]
) -> dict[Any, dict[str, Any]]:
    """Accumulate per-account income, expense and transfer totals.

    Only accounts listed in ``account_ids`` get a rollup. Income and expense
    rows without a source account (legacy rows) are ignored. A transfer whose
    other leg was detached still posts the leg that remains; a transfer from
    an account to itself is skipped with a warning.

    Args:
        account_ids: IDs of the accounts to accumulate for
        transactions: Full transaction history

    Returns:
        Mapping of account ID to rollup dictionary (income, expenses,
        transfers_in, transfers_out, count)
    """
    rollups = {account_id: _new_rollup() for account_id in account_ids}
    tracked = set(account_ids)

    for txn in transactions:
        if txn.account_id is None and txn.transfer_to_account_id is None:
            continue

        txn_type = _transaction_type(txn)
        if txn_type is None:
            continue

        if txn_type is not TransactionType.TRANSFER:
            if txn.account_id is None:
                continue
        elif txn.account_id == txn.transfer_to_account_id:
            logger.warning(
                "transfer_skipped",
                transaction_id=txn.id,
                account_id=txn.account_id,
                transfer_to_account_id=txn.transfer_to_account_id,
            )
            continue

        if txn.account_id not in tracked and txn.transfer_to_account_id not in tracked:
            continue

        amount = _transaction_amount(txn)

        if txn.account_id is not None and txn.account_id in tracked:
            source = rollups[txn.account_id]
            source["count"] += 1
            if txn_type is TransactionType.INCOME:
                source["income"] += amount
            elif txn_type is TransactionType.EXPENSE:
                source["expenses"] += amount
            else:
                source["transfers_out"] += amount

        if (
            txn_type is TransactionType.TRANSFER
            and txn.transfer_to_account_id is not None
            and txn.transfer_to_account_id in tracked
        ):
            rollups[txn.transfer_to_account_id]["transfers_in"] += amount

    return rollups


def compute_balances(
    accounts: Sequence[Account], transactions: Sequence[Transaction]
) -> list[AccountBalance]:
    """Derive the current balance of every account.

    Inactive accounts are not filtered out here: every input account gets
    exactly one result, in input order. Callers that only want active accounts
    filter before or after calling.

    Rows with invalid amounts contribute zero and are reported as warnings;
    a single bad row never aborts the computation.

    Args:
        accounts: Accounts to compute balances for
        transactions: Full transaction history

    Returns:
        List of AccountBalance, one per account

    Raises:
        ValidationError: If either collection is missing
    """
    if accounts is None or transactions is None:
        raise ValidationError("Accounts and transactions are required to compute balances")

    rollups = accumulate_rollups([acc.id for acc in accounts], transactions)

    results = []
    for account in accounts:
        data = rollups[account.id]
        initial = _initial_balance(account)
        if _is_debt(account):
            balance = (
                initial
                + data["expenses"]
                + data["transfers_out"]
                - data["income"]
                - data["transfers_in"]
            )
        else:
            balance = (
                initial
                + data["income"]
                - data["expenses"]
                + data["transfers_in"]
                - data["transfers_out"]
            )
        results.append(
            AccountBalance(
                account=account,
                balance=balance,
                total_income=data["income"],
                total_expenses=data["expenses"],
                total_transfers_in=data["transfers_in"],
                total_transfers_out=data["transfers_out"],
                transaction_count=data["count"],
            )
        )
    return results


def calculate_financial_summary(balances: Sequence[AccountBalance]) -> FinancialSummary:
    """Summarize balances into checking, savings, debt and net worth totals.

    Inactive accounts are left out. Debt is counted by its absolute value.
    """
    active = [b for b in balances if b.account.is_active]
    checking = tuple(b for b in active if b.account.account_type == AccountType.CHECKING)
    savings = tuple(b for b in active if b.account.account_type == AccountType.SAVINGS)
    debt = tuple(b for b in active if _is_debt(b.account))

    total_checking = sum((b.balance for b in checking), ZERO)
    total_savings = sum((b.balance for b in savings), ZERO)
    total_debt = sum((abs(b.balance) for b in debt), ZERO)

    return FinancialSummary(
        total_checking=total_checking,
        total_savings=total_savings,
        total_debt=total_debt,
        net_worth=total_checking + total_savings - total_debt,
        checking_accounts=checking,
        savings_accounts=savings,
        debt_accounts=debt,
    )


class BalanceService:
    """Service for reading derived account balances from the store."""

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_account_balances(self, include_inactive: bool = False) -> list[AccountBalance]:
        """Compute balances from a fresh snapshot of accounts and transactions.

        Args:
            include_inactive: If True, also compute balances for deactivated accounts

        Returns:
            List of AccountBalance in store order (account type, then name)
        """
        accounts = tuple(self.db.list_accounts(include_inactive=include_inactive))
        transactions = tuple(self.db.list_transactions())
        return compute_balances(accounts, transactions)

    def get_account_balance(self, account_id: int) -> Optional[AccountBalance]:
        """Compute the balance of a single account (active or not)."""
        account = self.db.get_account(account_id)
        if account is None:
            return None
        transactions = tuple(self.db.list_transactions())
        return compute_balances((account,), transactions)[0]

    def get_financial_summary(self) -> FinancialSummary:
        """Compute the net worth overview for active accounts."""
        return calculate_financial_summary(self.get_account_balances())
