"""Database factory functions."""

from typing import Optional

from equitrack.config import Settings, default_database_path
from equitrack.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[str] = None, settings: Optional[Settings] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite-backed transaction store.

    The path is taken from the argument, then from settings (EQUITRACK_DB_PATH),
    and finally defaults to ~/.equitrack/equitrack.db.

    Args:
        database_path: Explicit path to the SQLite file
        settings: Loaded settings

    Returns:
        SQLAlchemyDatabase instance (not yet connected)
    """
    path = database_path
    if path is None and settings is not None:
        path = settings.database_path
    if path is None:
        path = default_database_path()
    return SQLAlchemyDatabase(f"sqlite:///{path}")
