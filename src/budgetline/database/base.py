"""Abstract ledger store interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from budgetline.domain.entities import (
    Account,
    AccountType,
    BudgetItem,
    BudgetItemType,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for budgetline.

    Every mutation is durable once the method returns.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        account_type: AccountType,
        account_name: str,
        initial_balance: Decimal,
        interest_rate: Decimal,
        minimum_payment: Decimal,
        due_date: int,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID, active or not."""
        pass

    @abstractmethod
    def list_accounts(self, include_inactive: bool = True) -> list[Account]:
        """List accounts ordered by type and name."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        account_name: Optional[str] = None,
        interest_rate: Optional[Decimal] = None,
        minimum_payment: Optional[Decimal] = None,
        due_date: Optional[int] = None,
    ) -> None:
        """Update the provided account fields."""
        pass

    @abstractmethod
    def update_account_initial_balance(self, account_id: int, initial_balance: Decimal) -> None:
        """Set an account's initial balance."""
        pass

    @abstractmethod
    def deactivate_account(self, account_id: int) -> None:
        """Soft-delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions referencing an account on either leg."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_id: str,
        txn_date: date,
        description: str,
        amount: Decimal,
        category: str,
        txn_type: TransactionType,
        account_id: Optional[int] = None,
        transfer_to_account_id: Optional[int] = None,
        tags: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: str,
        txn_type: TransactionType,
        txn_date: date,
        description: str,
        amount: Decimal,
        category: str,
        account_id: Optional[int],
        transfer_to_account_id: Optional[int],
        tags: Optional[str],
        notes: Optional[str],
    ) -> None:
        """Replace all editable fields of a transaction."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            account_id: Optional filter matching either transaction leg
        """
        pass

    @abstractmethod
    def detach_account_transactions(self, account_id: int) -> int:
        """Clear references to an account from all transactions.

        Returns the number of transactions changed.
        """
        pass

    # Budget item operations
    @abstractmethod
    def create_budget_item(
        self,
        item_id: str,
        name: str,
        amount: Decimal,
        item_type: BudgetItemType,
        category: str,
        due_date: date,
        is_recurring: bool = True,
    ) -> str:
        """Create a budget item. Returns budget item ID."""
        pass

    @abstractmethod
    def get_budget_item(self, item_id: str) -> Optional[BudgetItem]:
        """Get budget item by ID."""
        pass

    @abstractmethod
    def update_budget_item(
        self,
        item_id: str,
        name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        item_type: Optional[BudgetItemType] = None,
        category: Optional[str] = None,
        due_date: Optional[date] = None,
        is_recurring: Optional[bool] = None,
    ) -> None:
        """Update the provided budget item fields."""
        pass

    @abstractmethod
    def delete_budget_item(self, item_id: str) -> None:
        """Delete a budget item permanently."""
        pass

    @abstractmethod
    def list_budget_items(self, include_inactive: bool = False) -> list[BudgetItem]:
        """List budget items ordered by due date, type and name."""
        pass
