"""Budget planning commands."""

from datetime import date

import click
from budgetline.domain.budget import BudgetService
from budgetline.domain.entities import BudgetItemType
from budgetline.cli.error_handling import handle_domain_error
from budgetline.utils.date_parser import parse_date, parse_month
from budgetline.utils.amount_parser import parse_amount

ITEM_TYPES = [t.value for t in BudgetItemType]


def _month_or_exit(ctx, month: str | None) -> tuple[int, int]:
    """Parse a --month option, defaulting to the current month."""
    if month is None:
        today = date.today()
        return today.month, today.year
    try:
        return parse_month(month)
    except ValueError as e:
        click.echo(f"Error: Invalid month: {e}", err=True)
        ctx.exit(1)


@click.group()
def budget_group():
    """Plan monthly income and expenses."""
    pass


@budget_group.command("add")
@click.argument("name")
@click.option("--amount", required=True, help="Budgeted amount (non-negative)")
@click.option(
    "--type",
    "item_type",
    type=click.Choice(ITEM_TYPES),
    default=BudgetItemType.EXPENSE.value,
    show_default=True,
    help="Budget item type",
)
@click.option("--category", required=True, help="Category matched against transactions")
@click.option("--due-date", default="today", show_default=True, help="Due date of the item")
@click.option(
    "--one-time",
    is_flag=True,
    help="Apply only to the month of the due date instead of every month",
)
@click.pass_context
def add_budget_item(
    ctx,
    name: str,
    amount: str,
    item_type: str,
    category: str,
    due_date: str,
    one_time: bool,
):
    """Add a budget item.

    Examples:
        budgetline budget add "Rent" --amount 1200 --category housing --due-date 2025-03-01
        budgetline budget add "Salary" --type income --amount 4000 --category salary
        budgetline budget add "Car repair" --amount 600 --category auto --due-date 2025-05-10 --one-time
    """
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        parsed_date = parse_date(due_date)
        item_id = service.create_budget_item(
            name=name,
            amount=parse_amount(amount),
            item_type=item_type,
            category=category,
            due_date=parsed_date,
            is_recurring=not one_time,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    kind = "one-time" if one_time else "recurring"
    click.echo(f"Created {kind} {item_type} item '{name}' (ID: {item_id})")


@budget_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive items")
@click.pass_context
def list_budget_items(ctx, include_inactive: bool):
    """List budget items."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    items = service.list_budget_items(include_inactive=include_inactive)
    if not items:
        click.echo("No budget items found.")
        return

    click.echo(f"\n{'Due':<10}  {'Type':<7}  {'Amount':>12}  {'Category':<16}  {'Recurs':<6}  Name")
    click.echo("-" * 80)
    for item in items:
        amount_str = f"${item.amount:,.2f}"
        recurs = "yes" if item.is_recurring else "no"
        click.echo(
            f"{item.due_date.isoformat():<10}  {item.type.value:<7}  {amount_str:>12}  "
            f"{item.category:<16}  {recurs:<6}  {item.name}"
        )
        click.echo(f"{'':<10}  id: {item.id}")


@budget_group.command("update")
@click.argument("item_id")
@click.option("--name", help="New name")
@click.option("--amount", help="Budgeted amount")
@click.option("--type", "item_type", type=click.Choice(ITEM_TYPES), help="Budget item type")
@click.option("--category", help="Category")
@click.option("--due-date", help="Due date")
@click.option("--recurring/--one-time", "is_recurring", default=None, help="Recurrence")
@click.pass_context
def update_budget_item(
    ctx,
    item_id: str,
    name: str | None,
    amount: str | None,
    item_type: str | None,
    category: str | None,
    due_date: str | None,
    is_recurring: bool | None,
) -> None:
    """Update a budget item.

    Updates only the fields that are provided.
    """
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        service.update_budget_item(
            item_id=item_id,
            name=name,
            amount=parse_amount(amount) if amount is not None else None,
            item_type=item_type,
            category=category,
            due_date=parse_date(due_date) if due_date is not None else None,
            is_recurring=is_recurring,
        )
        click.echo(f"Updated budget item {item_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@budget_group.command("delete")
@click.argument("item_id")
@click.pass_context
def delete_budget_item(ctx, item_id: str) -> None:
    """Delete a budget item."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        service.delete_budget_item(item_id)
        click.echo(f"Deleted budget item {item_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@budget_group.command("summary")
@click.option("--month", help="Month to summarize (YYYY-MM, default: current month)")
@click.pass_context
def budget_summary(ctx, month: str | None):
    """Show budgeted and actual totals for a month.

    Examples:
        budgetline budget summary --month 2025-03
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    month_num, year = _month_or_exit(ctx, month)

    try:
        summary = service.get_period_summary(month_num, year)
        actual = service.get_actual_for_period(month_num, year)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nBudget summary for {year:04d}-{month_num:02d}")
    click.echo("=" * 44)
    click.echo(f"{'':<16}  {'Budgeted':>12}  {'Actual':>12}")
    click.echo(
        f"{'Income':<16}  {f'${summary.total_income:,.2f}':>12}  "
        f"{f'${actual.actual_income:,.2f}':>12}"
    )
    click.echo(
        f"{'Expenses':<16}  {f'${summary.total_expenses:,.2f}':>12}  "
        f"{f'${actual.actual_expenses:,.2f}':>12}"
    )
    click.echo(
        f"{'Net':<16}  {f'${summary.net_income:,.2f}':>12}  "
        f"{f'${actual.actual_net:,.2f}':>12}"
    )
    click.echo("-" * 44)
    click.echo(f"Savings rate: {summary.savings_rate:.2f}%")


@budget_group.command("compare")
@click.option("--month", help="Month to compare (YYYY-MM, default: current month)")
@click.pass_context
def budget_compare(ctx, month: str | None):
    """Compare each budget item with matching transactions for a month.

    A transaction counts toward an item when the categories match and the
    types match; transfers also count toward expense items.

    Examples:
        budgetline budget compare --month 2025-03
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    month_num, year = _month_or_exit(ctx, month)

    try:
        comparisons = service.get_budget_comparison(month_num, year)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not comparisons:
        click.echo(f"No budget items apply to {year:04d}-{month_num:02d}.")
        return

    click.echo(f"\nBudget vs actual for {year:04d}-{month_num:02d}")
    click.echo(f"{'Item':<24}  {'Budgeted':>12}  {'Actual':>12}  {'Remaining':>12}  {'Used':>8}")
    click.echo("-" * 76)
    for comparison in comparisons:
        click.echo(
            f"{comparison.item.name:<24}  "
            f"{f'${comparison.budgeted:,.2f}':>12}  "
            f"{f'${comparison.actual:,.2f}':>12}  "
            f"{f'${comparison.difference:,.2f}':>12}  "
            f"{f'{comparison.percentage}%':>8}"
        )


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
