"""Database layer for debtbook application."""

from debtbook.database.base import Database
from debtbook.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
