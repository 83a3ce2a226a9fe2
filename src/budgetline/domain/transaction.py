"""Transaction domain service.

This is the write boundary for transactions: every row is validated and
normalized here (canonical date, non-negative amount, well-formed transfer
legs) before it reaches the store, so the balance and budget calculations
only ever see one shape.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from budgetline.database.base import Database
from budgetline.domain.entities import (
    TRANSFER_CATEGORY,
    DateLike,
    Transaction as TransactionEntity,
    TransactionType,
)
from budgetline.domain.errors import (
    NotFoundError,
    ValidationError,
    account_inactive,
    account_not_found,
    destination_only_for_transfers,
    transaction_not_found,
    transfer_requires_destination,
    transfer_same_account,
)
from budgetline.utils.amount_parser import to_decimal
from budgetline.utils.date_parser import normalize_date


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_active_account(self, account_id: int) -> None:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if not account.is_active:
            raise ValidationError(account_inactive(account_id))

    def _validate(
        self,
        txn_type: str,
        txn_date: DateLike,
        description: str,
        amount: Decimal,
        category: Optional[str],
        account_id: Optional[int],
        transfer_to_account_id: Optional[int],
    ) -> tuple[TransactionType, date, Decimal, str]:
        try:
            parsed_type = TransactionType(txn_type)
        except ValueError:
            raise ValidationError(
                f"Invalid transaction type '{txn_type}'. Must be 'income', 'expense' or 'transfer'"
            )

        if not description or not description.strip():
            raise ValidationError("Transaction description is required")

        parsed_amount = to_decimal(amount)
        if parsed_amount is None:
            raise ValidationError(f"Invalid transaction amount '{amount}'")
        if parsed_amount < 0:
            raise ValidationError(
                "Transaction amount must not be negative; use the transaction type for direction"
            )

        parsed_date = normalize_date(txn_date)

        if parsed_type is TransactionType.TRANSFER:
            if account_id is None or transfer_to_account_id is None:
                raise ValidationError(transfer_requires_destination())
            if account_id == transfer_to_account_id:
                raise ValidationError(transfer_same_account(account_id))
            category = TRANSFER_CATEGORY
        elif transfer_to_account_id is not None:
            raise ValidationError(destination_only_for_transfers())

        if not category or not category.strip():
            raise ValidationError("Transaction category is required")

        return parsed_type, parsed_date, parsed_amount, category.strip()

    def create_transaction(
        self,
        txn_type: str,
        txn_date: DateLike,
        description: str,
        amount: Decimal,
        account_id: int,
        category: Optional[str] = None,
        transfer_to_account_id: Optional[int] = None,
        tags: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Create a transaction.

        Transfers always get the "transfer" category.

        Args:
            txn_type: income, expense or transfer
            txn_date: Transaction date
            description: Non-empty description
            amount: Non-negative amount
            account_id: Source account
            category: Category (ignored for transfers)
            transfer_to_account_id: Destination account, transfers only
            tags: Optional tags
            notes: Optional notes

        Returns:
            New transaction ID (UUID4)

        Raises:
            ValidationError: If the transaction is malformed
            NotFoundError: If an account doesn't exist
        """
        parsed_type, parsed_date, parsed_amount, category = self._validate(
            txn_type,
            txn_date,
            description,
            amount,
            category,
            account_id,
            transfer_to_account_id,
        )

        self._require_active_account(account_id)
        if transfer_to_account_id is not None:
            self._require_active_account(transfer_to_account_id)

        transaction_id = str(uuid.uuid4())
        self.db.create_transaction(
            transaction_id=transaction_id,
            txn_date=parsed_date,
            description=description.strip(),
            amount=parsed_amount,
            category=category,
            txn_type=parsed_type,
            account_id=account_id,
            transfer_to_account_id=transfer_to_account_id,
            tags=tags,
            notes=notes,
        )
        return transaction_id

    def get_transaction(self, transaction_id: str) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List transactions, newest first.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            account_id: Optional filter on either leg of the transaction
        """
        return self.db.list_transactions(
            start_date=start_date, end_date=end_date, account_id=account_id
        )

    def update_transaction(
        self,
        transaction_id: str,
        txn_type: Optional[str] = None,
        txn_date: Optional[DateLike] = None,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        category: Optional[str] = None,
        account_id: Optional[int] = None,
        transfer_to_account_id: Optional[int] = None,
        tags: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update the provided fields of a transaction.

        The merged result is validated as a whole, so switching a transfer to
        an expense clears its destination account.

        Raises:
            NotFoundError: If transaction or account doesn't exist
            ValidationError: If the updated transaction is malformed
        """
        existing = self.db.get_transaction(transaction_id)
        if existing is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        try:
            merged_type = TransactionType(txn_type if txn_type is not None else existing.type)
        except ValueError:
            raise ValidationError(
                f"Invalid transaction type '{txn_type}'. Must be 'income', 'expense' or 'transfer'"
            )
        merged_account = account_id if account_id is not None else existing.account_id
        if merged_type is TransactionType.TRANSFER:
            merged_destination = (
                transfer_to_account_id
                if transfer_to_account_id is not None
                else existing.transfer_to_account_id
            )
        else:
            merged_destination = transfer_to_account_id

        merged_category = category if category is not None else existing.category
        if existing.type == TransactionType.TRANSFER and merged_type is not TransactionType.TRANSFER:
            if category is None:
                raise ValidationError("A category is required when changing a transfer's type")

        parsed_type, parsed_date, parsed_amount, parsed_category = self._validate(
            merged_type,
            txn_date if txn_date is not None else existing.date,
            description if description is not None else existing.description,
            amount if amount is not None else existing.amount,
            merged_category,
            merged_account,
            merged_destination,
        )

        if account_id is not None:
            self._require_active_account(account_id)
        if transfer_to_account_id is not None:
            self._require_active_account(transfer_to_account_id)

        self.db.update_transaction(
            transaction_id=transaction_id,
            txn_type=parsed_type,
            txn_date=parsed_date,
            description=(description if description is not None else existing.description).strip(),
            amount=parsed_amount,
            category=parsed_category,
            account_id=merged_account,
            transfer_to_account_id=merged_destination,
            tags=tags if tags is not None else existing.tags,
            notes=notes if notes is not None else existing.notes,
        )

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        self.db.delete_transaction(transaction_id)

