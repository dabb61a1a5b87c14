"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from debtbook.database.sqlalchemy_db import SQLAlchemyDatabase
from debtbook.domain.errors import SchemaVersionError, StoreOpenError

logger = logging.getLogger(__name__)


def resolve_database_path(database_path: Optional[str] = None) -> str:
    """Resolve the local store path.

    Args:
        database_path: Explicit path. If None, checks DEBTBOOK_DB_PATH
            environment variable, then defaults to ~/.debtbook/debtbook.db
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("DEBTBOOK_DB_PATH")

    if database_path is None:
        # Default to ~/.debtbook/debtbook.db
        home = Path.home()
        db_dir = home / ".debtbook"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "debtbook.db")

    return database_path


def _open(database_path: str) -> SQLAlchemyDatabase:
    db = SQLAlchemyDatabase(f"sqlite:///{database_path}")
    try:
        db.initialize_schema()
    except (SQLAlchemyError, SchemaVersionError):
        db.disconnect()
        raise
    db.database_path = database_path
    return db


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Open the SQLite local store, recreating it once if it cannot be opened.

    A store that is corrupt or was written by another schema version is
    deleted and created afresh, losing its local data.

    Args:
        database_path: Path to SQLite database file (see resolve_database_path)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite

    Raises:
        StoreOpenError: If the store cannot be opened after recreating it
    """
    database_path = resolve_database_path(database_path)
    try:
        return _open(database_path)
    except (SQLAlchemyError, SchemaVersionError) as e:
        logger.warning("Could not open local store at %s (%s); recreating it", database_path, e)

    Path(database_path).unlink(missing_ok=True)
    try:
        return _open(database_path)
    except (SQLAlchemyError, SchemaVersionError, OSError) as e:
        raise StoreOpenError(f"Could not open local store at {database_path}: {e}") from e
