"""Account balance commands."""

import click
from budgetline.domain.balance import BalanceService


def _money(value) -> str:
    return f"${value:,.2f}"


@click.command("balances")
@click.option("--all", "include_inactive", is_flag=True, help="Include deleted accounts")
@click.option("--detail", is_flag=True, help="Show income, expense and transfer totals per account")
@click.pass_context
def show_balances(ctx, include_inactive: bool, detail: bool):
    """Show derived account balances and net worth.

    Balances are always computed from the initial balance plus every
    recorded transaction; debt accounts show what is owed.

    Examples:
        budgetline balances
        budgetline balances --detail --all
    """
    db = ctx.obj["db"]
    service = BalanceService(db)

    balances = service.get_account_balances(include_inactive=include_inactive)
    if not balances:
        click.echo("No accounts found.")
        return

    click.echo(f"\n{'Account':<24}  {'Type':<12}  {'Balance':>14}  {'Txns':>5}")
    click.echo("-" * 62)
    for entry in balances:
        account = entry.account
        status = " (inactive)" if not account.is_active else ""
        click.echo(
            f"{account.account_name:<24}  {account.account_type.value:<12}  "
            f"{_money(entry.display_balance):>14}  {entry.transaction_count:>5}{status}"
        )
        if detail:
            click.echo(
                f"{'':<4}income {_money(entry.total_income)}, "
                f"expenses {_money(entry.total_expenses)}, "
                f"transfers in {_money(entry.total_transfers_in)}, "
                f"transfers out {_money(entry.total_transfers_out)}"
            )

    summary = service.get_financial_summary()
    click.echo("-" * 62)
    click.echo(f"{'Checking':<24}  {_money(summary.total_checking):>14}")
    click.echo(f"{'Savings':<24}  {_money(summary.total_savings):>14}")
    click.echo(f"{'Debt':<24}  {_money(summary.total_debt):>14}")
    click.echo(f"{'Net worth':<24}  {_money(summary.net_worth):>14}")


def register_commands(cli):
    """Register balances command with main CLI."""
    cli.add_command(show_balances)
