"""Account management commands."""

import click
from budgetline.domain.account import AccountService
from budgetline.domain.entities import AccountType
from budgetline.cli.error_handling import handle_domain_error, resolve_account_or_exit
from budgetline.utils.amount_parser import parse_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES),
    default=AccountType.CHECKING.value,
    show_default=True,
    help="Account type",
)
@click.option("--initial-balance", default="0", help="Balance before any recorded transaction")
@click.option("--interest-rate", default="0", help="Interest rate in percent (debt accounts)")
@click.option("--minimum-payment", default="0", help="Minimum monthly payment (debt accounts)")
@click.option("--due-day", type=int, default=1, help="Payment day of month (debt accounts)")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    initial_balance: str,
    interest_rate: str,
    minimum_payment: str,
    due_day: int,
):
    """Create a new account.

    Examples:
        budgetline account create "Primary Checking" --initial-balance 1500
        budgetline account create "Visa" --type credit_card --initial-balance 320.50 --due-day 15
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account_id = service.create_account(
            account_type=account_type,
            account_name=name,
            initial_balance=parse_amount(initial_balance),
            interest_rate=parse_amount(interest_rate),
            minimum_payment=parse_amount(minimum_payment),
            due_date=due_day,
        )
        click.echo(f"Created {account_type} account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include deleted accounts")
@click.pass_context
def list_accounts(ctx, include_inactive: bool):
    """List accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.account_name:24s} | {acc.account_type.value:12s} | "
            f"Initial: ${acc.initial_balance:,.2f}{status}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--interest-rate", help="Interest rate in percent")
@click.option("--minimum-payment", help="Minimum monthly payment")
@click.option("--due-day", type=int, help="Payment day of month")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    interest_rate: str | None,
    minimum_payment: str | None,
    due_day: int | None,
) -> None:
    """Update account details.

    ACCOUNT can be an account name or ID.

    Examples:
        budgetline account update "Visa" --interest-rate 19.99 --minimum-payment 35
        budgetline account update 1 --name "Joint Checking"
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.update_account(
            account_id=account_id,
            account_name=name,
            interest_rate=parse_amount(interest_rate) if interest_rate is not None else None,
            minimum_payment=parse_amount(minimum_payment) if minimum_payment is not None else None,
            due_date=due_day,
        )
        click.echo(f"Updated account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("set-balance")
@click.argument("account", metavar="ACCOUNT")
@click.argument("initial_balance", metavar="INITIAL_BALANCE")
@click.pass_context
def set_initial_balance(ctx, account: str, initial_balance: str) -> None:
    """Set the initial balance of an account.

    The initial balance is the starting point before any recorded
    transaction; posting transactions never changes it.

    Examples:
        budgetline account set-balance "Primary Checking" 2000
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        amount = parse_amount(initial_balance)
        service.set_initial_balance(account_id, amount)
        click.echo(f"Initial balance of account {account_id} set to ${amount:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option(
    "--detach-transactions",
    is_flag=True,
    help="Also clear the account from its transactions (they are kept, unassigned)",
)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, detach_transactions: bool, yes: bool) -> None:
    """Delete (deactivate) an account.

    ACCOUNT can be an account name or ID.

    The account is hidden from balances and summaries, but its transactions
    are kept for history.

    Examples:
        budgetline account delete "Old Savings"
        budgetline account delete 3 --detach-transactions
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)
    txn_count = service.get_transaction_count(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.account_name}' (ID: {account_id}, "
        f"{txn_count} transaction{'s' if txn_count != 1 else ''})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        detached = service.delete_account(account_id, detach_transactions=detach_transactions)
        click.echo(f"Deleted account '{account_obj.account_name}'")
        if detach_transactions:
            click.echo(f"Detached {detached} transaction reference{'s' if detached != 1 else ''}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
