"""Budget vs actual trend command."""

import click
from budgetline.domain.periods import DEFAULT_WINDOW_SIZE
from budgetline.domain.report import ReportService, series_totals
from budgetline.cli.error_handling import handle_domain_error
from budgetline.utils.date_parser import parse_date


@click.command("trends")
@click.option(
    "--months",
    type=int,
    default=DEFAULT_WINDOW_SIZE,
    show_default=True,
    help="Number of months to show",
)
@click.option(
    "--reference-date",
    help="Month that ends the window when there is no data yet (default: today)",
)
@click.pass_context
def show_trends(ctx, months: int, reference_date: str | None):
    """Compare budgeted and actual income and expenses month by month.

    The window covers the most recent months that have transactions or
    budget items.

    Examples:
        budgetline trends
        budgetline trends --months 12
    """
    db = ctx.obj["db"]
    service = ReportService(db)

    try:
        reference = parse_date(reference_date) if reference_date else None
        series = service.monthly_comparison(reference_date=reference, window_size=months)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    header = (
        f"{'Month':<10}  {'Budget in':>12}  {'Actual in':>12}  "
        f"{'Budget out':>12}  {'Actual out':>12}"
    )
    click.echo(f"\n{header}")
    click.echo("-" * len(header))
    for index, label in enumerate(series.labels):
        click.echo(
            f"{label:<10}  "
            f"{f'${series.budget_income[index]:,.2f}':>12}  "
            f"{f'${series.actual_income[index]:,.2f}':>12}  "
            f"{f'${series.budget_expenses[index]:,.2f}':>12}  "
            f"{f'${series.actual_expenses[index]:,.2f}':>12}"
        )

    totals = series_totals(series)
    click.echo("-" * len(header))
    click.echo(
        f"{'Total':<10}  "
        f"{f'${totals.budget_income:,.2f}':>12}  "
        f"{f'${totals.actual_income:,.2f}':>12}  "
        f"{f'${totals.budget_expenses:,.2f}':>12}  "
        f"{f'${totals.actual_expenses:,.2f}':>12}"
    )


def register_commands(cli):
    """Register trends command with main CLI."""
    cli.add_command(show_trends)
