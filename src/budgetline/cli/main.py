"""Main CLI entry point."""

import click
from budgetline.database.factories import DB_PATH_ENV_VAR, create_sqlite_database
from budgetline.log import configure_logging

# Import and register all commands at module level
from budgetline.cli.commands import (
    account,
    add,
    transaction,
    budget,
    balances,
    trends,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV_VAR} environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.option("--verbose", is_flag=True, help="Show debug log events on stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Budgetline - Personal finance tracker.

    Track accounts, income, expenses and transfers, plan a monthly budget and
    compare it against what actually happened.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose=verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
budget.register_commands(cli)
balances.register_commands(cli)
trends.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
