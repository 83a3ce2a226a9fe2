"""Account domain service."""

from decimal import Decimal
from typing import Optional

import structlog

from budgetline.database.base import Database
from budgetline.domain.entities import Account as AccountEntity, AccountType
from budgetline.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_account_name,
)
from budgetline.utils.amount_parser import to_decimal

logger = structlog.get_logger(__name__)


def _parse_account_type(account_type: str) -> AccountType:
    try:
        return AccountType(account_type)
    except ValueError:
        valid = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{account_type}'. Must be one of: {valid}")


def _parse_decimal(value, field: str, allow_negative: bool = True) -> Decimal:
    parsed = to_decimal(value)
    if parsed is None:
        raise ValidationError(f"Invalid {field} '{value}'")
    if not allow_negative and parsed < 0:
        raise ValidationError(f"{field.capitalize()} must not be negative")
    return parsed


def _validate_due_day(due_date: int) -> int:
    try:
        day = int(due_date)
    except (TypeError, ValueError):
        raise ValidationError(f"Due date must be a day of month between 1 and 31, got {due_date}")
    if not 1 <= day <= 31:
        raise ValidationError(f"Due date must be a day of month between 1 and 31, got {due_date}")
    return day


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        account_type: str,
        account_name: str,
        initial_balance: Decimal = Decimal("0"),
        interest_rate: Decimal = Decimal("0"),
        minimum_payment: Decimal = Decimal("0"),
        due_date: int = 1,
    ) -> int:
        """Create a new account.

        Interest rate, minimum payment and due date only matter for debt
        accounts; they default to 0, 0 and the 1st.

        Args:
            account_type: checking, savings, credit_card or student_loan
            account_name: Display name
            initial_balance: Balance before any recorded transaction
            interest_rate: Interest rate in percent
            minimum_payment: Minimum monthly payment
            due_date: Payment day of month (1-31)

        Returns:
            Account ID

        Raises:
            ValidationError: If a field is invalid
            ConflictError: If an active account with the same name exists
        """
        if not account_name or not account_name.strip():
            raise ValidationError("Account name is required")
        account_name = account_name.strip()
        parsed_type = _parse_account_type(account_type)

        for acc in self.db.list_accounts(include_inactive=False):
            if acc.account_name == account_name:
                raise ConflictError(duplicate_account_name(account_name))

        return self.db.create_account(
            account_type=parsed_type,
            account_name=account_name,
            initial_balance=_parse_decimal(initial_balance, "initial balance"),
            interest_rate=_parse_decimal(interest_rate, "interest rate", allow_negative=False),
            minimum_payment=_parse_decimal(minimum_payment, "minimum payment", allow_negative=False),
            due_date=_validate_due_day(due_date),
        )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self, include_inactive: bool = False) -> list[AccountEntity]:
        """List accounts ordered by type and name.

        Args:
            include_inactive: If True, include soft-deleted accounts
        """
        return self.db.list_accounts(include_inactive=include_inactive)

    def update_account(
        self,
        account_id: int,
        account_name: Optional[str] = None,
        interest_rate: Optional[Decimal] = None,
        minimum_payment: Optional[Decimal] = None,
        due_date: Optional[int] = None,
    ) -> None:
        """Update account details.

        The account type cannot change, and the initial balance is only
        changed through ``set_initial_balance``.

        Raises:
            NotFoundError: If account not found
            ConflictError: If the new name is used by another active account
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        if account_name is not None:
            account_name = account_name.strip()
            if not account_name:
                raise ValidationError("Account name is required")
            for acc in self.db.list_accounts(include_inactive=False):
                if acc.id != account_id and acc.account_name == account_name:
                    raise ConflictError(duplicate_account_name(account_name))

        self.db.update_account(
            account_id=account_id,
            account_name=account_name,
            interest_rate=(
                _parse_decimal(interest_rate, "interest rate", allow_negative=False)
                if interest_rate is not None
                else None
            ),
            minimum_payment=(
                _parse_decimal(minimum_payment, "minimum payment", allow_negative=False)
                if minimum_payment is not None
                else None
            ),
            due_date=_validate_due_day(due_date) if due_date is not None else None,
        )

    def get_transaction_count(self, account_id: int) -> int:
        """Count transactions that reference an account on either leg."""
        return self.db.get_account_transaction_count(account_id)

    def set_initial_balance(self, account_id: int, initial_balance: Decimal) -> None:
        """Explicitly change the starting balance of an account.

        Raises:
            NotFoundError: If account not found
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        self.db.update_account_initial_balance(
            account_id, _parse_decimal(initial_balance, "initial balance")
        )

    def delete_account(self, account_id: int, detach_transactions: bool = False) -> int:
        """Soft-delete an account.

        The account is marked inactive and drops out of balance summaries.
        Its transactions are kept. With ``detach_transactions`` the account is
        also removed from computation entirely: transactions referencing it
        have that reference cleared (set to NULL), never deleted.

        Args:
            account_id: Account ID to delete
            detach_transactions: Clear transaction references to the account

        Returns:
            Number of transactions detached

        Raises:
            NotFoundError: If account not found
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        self.db.deactivate_account(account_id)
        detached = 0
        if detach_transactions:
            detached = self.db.detach_account_transactions(account_id)
        logger.info(
            "account_deactivated",
            account_id=account_id,
            detached_transactions=detached,
        )
        return detached
