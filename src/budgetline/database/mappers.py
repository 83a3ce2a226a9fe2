"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the calculations only ever see
the canonical domain shape (enum types, Decimal amounts, date objects).
"""

from decimal import Decimal

from budgetline.domain import entities as domain
from budgetline.database.models import (
    Account as ORMAccount,
    BudgetItem as ORMBudgetItem,
    Transaction as ORMTransaction,
)


def _decimal(value) -> Decimal:
    return Decimal("0") if value is None else Decimal(value)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        account_type=domain.AccountType(orm_account.account_type),
        account_name=orm_account.account_name,
        initial_balance=_decimal(orm_account.initial_balance),
        interest_rate=_decimal(orm_account.interest_rate),
        minimum_payment=_decimal(orm_account.minimum_payment),
        due_date=orm_account.due_date,
        is_active=bool(orm_account.is_active),
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=_decimal(orm_transaction.amount),
        category=orm_transaction.category,
        type=domain.TransactionType(orm_transaction.type),
        account_id=orm_transaction.account_id,
        transfer_to_account_id=orm_transaction.transfer_to_account_id,
        tags=orm_transaction.tags,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
    )


def budget_item_to_domain(orm_item: ORMBudgetItem) -> domain.BudgetItem:
    """Convert SQLAlchemy BudgetItem model to domain BudgetItem entity."""
    return domain.BudgetItem(
        id=orm_item.id,
        name=orm_item.name,
        amount=_decimal(orm_item.amount),
        type=domain.BudgetItemType(orm_item.type),
        category=orm_item.category,
        due_date=orm_item.due_date,
        is_recurring=bool(orm_item.is_recurring),
        is_active=bool(orm_item.is_active),
        created_at=orm_item.created_at,
    )
