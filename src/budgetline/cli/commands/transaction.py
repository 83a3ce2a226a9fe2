"""Transaction management commands."""

import click
from budgetline.domain.transaction import TransactionService
from budgetline.domain.account import AccountService
from budgetline.domain.entities import TransactionType
from budgetline.cli.error_handling import handle_domain_error, resolve_account_or_exit
from budgetline.utils.date_parser import parse_date
from budgetline.utils.amount_parser import parse_amount


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--account", help="Account name or ID (matches either side of a transfer)")
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None, account: str | None):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, account_service, account, include_inactive=True)

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    transactions = service.list_transactions(start_date=start, end_date=end, account_id=account_id)
    if not transactions:
        click.echo("No transactions found.")
        return

    names = {
        acc.id: acc.account_name
        for acc in account_service.list_accounts(include_inactive=True)
    }

    click.echo(f"\n{'Date':<10}  {'Type':<8}  {'Amount':>12}  {'Category':<16}  {'Account':<24}  Description")
    click.echo("-" * 110)
    for txn in transactions:
        account_label = names.get(txn.account_id, "Unassigned")
        if txn.type == TransactionType.TRANSFER:
            account_label = f"{account_label} -> {names.get(txn.transfer_to_account_id, 'Unassigned')}"
        amount_str = f"${txn.amount:,.2f}"
        click.echo(
            f"{txn.date.isoformat():<10}  {txn.type.value:<8}  {amount_str:>12}  "
            f"{txn.category:<16}  {account_label:<24}  {txn.description}"
        )
        click.echo(f"{'':<10}  id: {txn.id}")


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--account", help="Source account name or ID")
@click.option("--to-account", help="Destination account name or ID (transfers only)")
@click.option("--date", "txn_date", help="Transaction date")
@click.option("--amount", help="Transaction amount")
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category")
@click.option("--tags", help="Tags")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    txn_type: str | None,
    account: str | None,
    to_account: str | None,
    txn_date: str | None,
    amount: str | None,
    description: str | None,
    category: str | None,
    tags: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        budgetline transaction update 3f1c... --amount 75.00
        budgetline transaction update 3f1c... --type expense --category food
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account) if account else None
    to_account_id = (
        resolve_account_or_exit(ctx, account_service, to_account) if to_account else None
    )

    try:
        parsed_date = parse_date(txn_date) if txn_date is not None else None
        parsed_amount = parse_amount(amount) if amount is not None else None
        service.update_transaction(
            transaction_id=transaction_id,
            txn_type=txn_type,
            txn_date=parsed_date,
            description=description,
            amount=parsed_amount,
            category=category,
            account_id=account_id,
            transfer_to_account_id=to_account_id,
            tags=tags,
            notes=notes,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str) -> None:
    """Delete a transaction."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
