"""Database layer for equitrack application."""

from equitrack.database.base import Database
from equitrack.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
