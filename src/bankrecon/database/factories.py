"""Database factory functions for creating database instances."""

from typing import Optional

from bankrecon.config import load_settings
from bankrecon.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks BANKRECON_DB_PATH
            environment variable, then defaults to ~/.bankrecon/bankrecon.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = load_settings().resolved_db_path()

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_memory_database() -> SQLAlchemyDatabase:
    """Create an in-memory SQLite database, mainly for tests and dry runs."""
    return SQLAlchemyDatabase("sqlite://")
