"""CLI error handling helpers."""

import click

from budgetline.domain.errors import DomainError
from budgetline.domain.account import AccountService
from budgetline.utils.account_resolver import resolve_account


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def resolve_account_or_exit(
    ctx: click.Context,
    account_service: AccountService,
    account: str | int,
    include_inactive: bool = False,
) -> int:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account, include_inactive=include_inactive)
    except ValueError as exc:
        handle_domain_error(ctx, exc)
