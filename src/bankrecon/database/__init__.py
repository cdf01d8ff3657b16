"""Record store layer for bankrecon."""

from bankrecon.database.base import Database
from bankrecon.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
