#!/usr/bin/env python3
"""Migration script to move legacy transactions onto real accounts.

Older databases stored the account of a transaction as a free-form
``account_type`` text column (often a bank name) instead of a reference to
the accounts table. This migration:

- adds the columns the current transaction model needs (``account_id``,
  ``transfer_to_account_id``, tags, notes and timestamps)
- maps each legacy ``account_type`` value to an account of the matching type,
  creating one account per type when none exists yet:
  - chase, bank_of_america, wells_fargo, checking → checking
  - savings, savings_account → savings
  - discover, visa, mastercard, credit_card → credit_card
  - student_loan → student_loan
- rewrites M/D/YYYY dates as ISO dates (YYYY-MM-DD)
- sets empty categories to 'other' and missing amounts to 0

Rows with an unknown ``account_type`` are left unassigned and reported.

Usage:
    python migrations/migrate_normalize_legacy_transactions.py [--db-path PATH]
"""

import sys
from decimal import Decimal
from pathlib import Path

# Add src to path so we can import budgetline modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from budgetline.database.factories import create_sqlite_database
from budgetline.database.models import Transaction
from budgetline.domain.entities import AccountType
from budgetline.domain.errors import UnparseableDateError
from budgetline.utils.date_parser import normalize_date

LEGACY_ACCOUNT_ALIASES = {
    "checking": AccountType.CHECKING,
    "chase": AccountType.CHECKING,
    "bank_of_america": AccountType.CHECKING,
    "wells_fargo": AccountType.CHECKING,
    "savings": AccountType.SAVINGS,
    "savings_account": AccountType.SAVINGS,
    "credit_card": AccountType.CREDIT_CARD,
    "discover": AccountType.CREDIT_CARD,
    "visa": AccountType.CREDIT_CARD,
    "mastercard": AccountType.CREDIT_CARD,
    "student_loan": AccountType.STUDENT_LOAN,
}

DEFAULT_ACCOUNT_NAMES = {
    AccountType.CHECKING: "Checking",
    AccountType.SAVINGS: "Savings",
    AccountType.CREDIT_CARD: "Credit Card",
    AccountType.STUDENT_LOAN: "Student Loan",
}


def column_exists(engine, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table.

    Args:
        engine: SQLAlchemy engine
        table_name: Name of the table
        column_name: Name of the column

    Returns:
        True if column exists, False otherwise
    """
    inspector = inspect(engine)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def resolve_legacy_account_type(value: str | None) -> AccountType | None:
    """Map a legacy account_type text to an AccountType, or None if unknown."""
    if value is None:
        return None
    key = value.strip().lower().replace(" ", "_").replace("-", "_")
    return LEGACY_ACCOUNT_ALIASES.get(key)


def get_or_create_account_id(db, account_type: AccountType, cache: dict) -> int:
    """Find the first active account of a type, creating a default one if needed."""
    if account_type in cache:
        return cache[account_type]

    for account in db.list_accounts(include_inactive=False):
        if account.account_type == account_type:
            cache[account_type] = account.id
            return account.id

    account_id = db.create_account(
        account_type=account_type,
        account_name=DEFAULT_ACCOUNT_NAMES[account_type],
        initial_balance=Decimal("0"),
        interest_rate=Decimal("0"),
        minimum_payment=Decimal("0"),
        due_date=1,
    )
    print(f"  Created {account_type.value} account '{DEFAULT_ACCOUNT_NAMES[account_type]}' (ID: {account_id})")
    cache[account_type] = account_id
    return account_id


def migrate_database(database_path: str | None = None) -> None:
    """Migrate legacy transactions to account references and clean up fields.

    Args:
        database_path: Path to database file. If None, uses default location.

    Raises:
        Exception: If migration fails
    """
    # Creating the database also creates any missing tables (accounts, budget)
    db = create_sqlite_database(database_path=database_path)
    db.connect()
    db.initialize_schema()

    try:
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise Exception("Could not get database engine from session")
        finally:
            session.close()

        if not column_exists(engine, "transactions", "account_type"):
            print("Migration not needed: transactions table has no legacy account_type column")
            return

        print("Starting migration: normalizing legacy transactions...")

        # Bring the legacy table up to the current model (account references,
        # tags, notes, timestamps). Added columns are nullable.
        existing = {col["name"] for col in inspect(engine).get_columns("transactions")}
        missing_columns = [
            column for column in Transaction.__table__.columns if column.name not in existing
        ]
        with engine.begin() as conn:
            for column in missing_columns:
                column_type = column.type.compile(dialect=engine.dialect)
                conn.execute(text(f"ALTER TABLE transactions ADD COLUMN {column.name} {column_type}"))
                print(f"  Added column: {column.name}")

        with engine.connect() as conn:
            rows = conn.execute(
                text("SELECT id, account_type, date FROM transactions WHERE account_id IS NULL")
            ).fetchall()

        cache: dict = {}
        assignments = []
        unknown = {}
        for row in rows:
            account_type = resolve_legacy_account_type(row.account_type)
            if account_type is None:
                unknown[row.account_type] = unknown.get(row.account_type, 0) + 1
                continue
            assignments.append((row.id, get_or_create_account_id(db, account_type, cache)))

        with engine.begin() as conn:
            for txn_id, account_id in assignments:
                conn.execute(
                    text("UPDATE transactions SET account_id = :account_id WHERE id = :id"),
                    {"account_id": account_id, "id": txn_id},
                )
        print(f"  Assigned {len(assignments)} transaction(s) to accounts")
        for value, count in sorted(unknown.items(), key=lambda item: str(item[0])):
            print(f"  Left {count} transaction(s) with unknown account type '{value}' unassigned")

        with engine.begin() as conn:
            dates = conn.execute(text("SELECT id, date FROM transactions")).fetchall()
            rewritten = 0
            for row in dates:
                if row.date is None or "/" not in str(row.date):
                    continue
                try:
                    iso = normalize_date(str(row.date)).isoformat()
                except UnparseableDateError:
                    print(f"  Could not parse date '{row.date}' of transaction {row.id}, left as is")
                    continue
                conn.execute(
                    text("UPDATE transactions SET date = :date WHERE id = :id"),
                    {"date": iso, "id": row.id},
                )
                rewritten += 1
            print(f"  Rewrote {rewritten} date(s) to YYYY-MM-DD")

            result = conn.execute(
                text("UPDATE transactions SET category = 'other' WHERE category IS NULL OR TRIM(category) = ''")
            )
            print(f"  Set {result.rowcount} empty categor(y/ies) to 'other'")

            result = conn.execute(text("UPDATE transactions SET amount = 0 WHERE amount IS NULL"))
            print(f"  Set {result.rowcount} missing amount(s) to 0")

        print("Migration completed successfully!")

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Migrate legacy transactions to account references"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides BUDGETLINE_DB_PATH environment variable)",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
