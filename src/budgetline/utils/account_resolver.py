"""Utility for resolving account names to IDs."""

from budgetline.domain.account import AccountService
from budgetline.domain.errors import NotFoundError


def resolve_account(
    account_service: AccountService, account: str | int, include_inactive: bool = False
) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)
        include_inactive: If True, names of deactivated accounts also resolve

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if account_service.get_account(account_id) is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    for acc in account_service.list_accounts(include_inactive=include_inactive):
        if acc.account_name == account:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
