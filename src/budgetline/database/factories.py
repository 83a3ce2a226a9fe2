"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from budgetline.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV_VAR = "BUDGETLINE_DB_PATH"


def resolve_database_path(database_path: Optional[str] = None) -> str:
    """Resolve the SQLite database file path.

    Args:
        database_path: Explicit path. If None, checks the BUDGETLINE_DB_PATH
            environment variable, then defaults to ~/.budgetline/budgetline.db

    Returns:
        Database file path
    """
    if database_path is None:
        database_path = os.environ.get(DB_PATH_ENV_VAR)

    if database_path is None:
        db_dir = Path.home() / ".budgetline"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "budgetline.db")

    return database_path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file (see resolve_database_path)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    return SQLAlchemyDatabase(f"sqlite:///{resolve_database_path(database_path)}")
