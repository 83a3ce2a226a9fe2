"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class UnparseableDateError(ValidationError):
    """A date value could not be mapped to a calendar date or period."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def budget_item_not_found(item_id: str) -> str:
    """Return message for missing budget item."""
    return f"Budget item {item_id} not found"


def duplicate_account_name(name: str) -> str:
    """Return message for duplicate account name."""
    return f"Account with name '{name}' already exists"


def unparseable_date(value: object) -> str:
    """Return message for a date that cannot be parsed."""
    return f"Could not parse date '{value}'"


def transfer_requires_destination() -> str:
    """Return message for a transfer without a destination account."""
    return "Transfer transactions require a destination account"


def transfer_same_account(account_id: int) -> str:
    """Return message for a transfer whose legs are the same account."""
    return f"Transfer source and destination must differ (both are account {account_id})"


def destination_only_for_transfers() -> str:
    """Return message for a destination account on a non-transfer."""
    return "Only transfer transactions may have a destination account"


def account_inactive(account_id: int) -> str:
    """Return message when posting against a deactivated account."""
    return f"Account {account_id} is inactive"
