"""Shared pytest fixtures for budgetline tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest
import structlog

from budgetline.database.factories import create_sqlite_database
from budgetline.domain.account import AccountService
from budgetline.domain.balance import BalanceService
from budgetline.domain.budget import BudgetService
from budgetline.domain.report import ReportService
from budgetline.domain.transaction import TransactionService


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo CLI logging configuration, which binds the runner's stderr."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a temporary database."""
    return BudgetService(temp_db)


@pytest.fixture
def report_service(temp_db):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db)


@pytest.fixture
def sample_accounts(account_service):
    """Create one account of each type and return them by name."""
    ids = {
        "Checking": account_service.create_account(
            account_type="checking", account_name="Checking", initial_balance=Decimal("1000")
        ),
        "Savings": account_service.create_account(
            account_type="savings", account_name="Savings", initial_balance=Decimal("0")
        ),
        "Visa": account_service.create_account(
            account_type="credit_card",
            account_name="Visa",
            initial_balance=Decimal("500"),
            interest_rate=Decimal("19.99"),
            minimum_payment=Decimal("35"),
            due_date=15,
        ),
    }
    return {name: account_service.get_account(account_id) for name, account_id in ids.items()}


@pytest.fixture
def sample_transactions(transaction_service, sample_accounts):
    """Record a small March 2025 history across the sample accounts."""
    checking = sample_accounts["Checking"].id
    savings = sample_accounts["Savings"].id
    visa = sample_accounts["Visa"].id

    return [
        transaction_service.create_transaction(
            txn_type="income",
            txn_date=date(2025, 3, 1),
            description="Paycheck",
            amount=Decimal("3000"),
            account_id=checking,
            category="salary",
        ),
        transaction_service.create_transaction(
            txn_type="expense",
            txn_date=date(2025, 3, 3),
            description="Rent",
            amount=Decimal("1200"),
            account_id=checking,
            category="housing",
        ),
        transaction_service.create_transaction(
            txn_type="transfer",
            txn_date=date(2025, 3, 5),
            description="Monthly savings",
            amount=Decimal("300"),
            account_id=checking,
            transfer_to_account_id=savings,
        ),
        transaction_service.create_transaction(
            txn_type="expense",
            txn_date=date(2025, 3, 10),
            description="Groceries",
            amount=Decimal("80"),
            account_id=visa,
            category="food",
        ),
        transaction_service.create_transaction(
            txn_type="transfer",
            txn_date=date(2025, 3, 20),
            description="Card payment",
            amount=Decimal("200"),
            account_id=checking,
            transfer_to_account_id=visa,
        ),
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
