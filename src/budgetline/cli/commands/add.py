"""Add transaction command."""

import click
from budgetline.domain.transaction import TransactionService
from budgetline.domain.account import AccountService
from budgetline.domain.entities import TransactionType
from budgetline.cli.error_handling import handle_domain_error, resolve_account_or_exit
from budgetline.utils.date_parser import parse_date
from budgetline.utils.amount_parser import parse_amount

TRANSACTION_TYPES = [t.value for t in TransactionType]


@click.command("add")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(TRANSACTION_TYPES),
    required=True,
    help="Transaction type",
)
@click.option("--account", required=True, help="Source account name or ID")
@click.option("--to-account", help="Destination account name or ID (transfers only)")
@click.option(
    "--date",
    "txn_date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD, MM/DD/YYYY or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount (non-negative, e.g. 123.45)")
@click.option("--description", required=True, help="Transaction description")
@click.option("--category", help="Category (e.g. 'food'); transfers always use 'transfer'")
@click.option("--tags", help="Tags")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    account: str,
    to_account: str | None,
    txn_date: str,
    amount: str,
    description: str,
    category: str | None,
    tags: str | None,
    notes: str | None,
):
    """Add a transaction manually.

    Examples:
        budgetline add --type expense --account Checking --amount 54.20 --description "Groceries" --category food
        budgetline add --type income --account 1 --date 2025-03-01 --amount 3200 --description "Paycheck" --category salary
        budgetline add --type transfer --account Checking --to-account Savings --amount 300 --description "Monthly savings"
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    to_account_id = None
    if to_account is not None:
        to_account_id = resolve_account_or_exit(ctx, account_service, to_account)

    try:
        parsed_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = transaction_service.create_transaction(
            txn_type=txn_type,
            txn_date=parsed_date,
            description=description,
            amount=parsed_amount,
            account_id=account_id,
            category=category,
            transfer_to_account_id=to_account_id,
            tags=tags,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    txn = transaction_service.get_transaction(transaction_id)
    source = account_service.get_account(account_id)
    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Account: {source.account_name}")
    if to_account_id is not None:
        destination = account_service.get_account(to_account_id)
        click.echo(f"  To account: {destination.account_name}")
    click.echo(f"  Date: {txn.date.isoformat()}")
    click.echo(f"  Amount: ${txn.amount:,.2f}")
    click.echo(f"  Category: {txn.category}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
