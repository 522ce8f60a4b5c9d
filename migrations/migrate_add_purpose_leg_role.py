#!/usr/bin/env python3
"""Migration script to add explicit purpose and leg role tags.

This migration adds three columns:
- transactions.purpose (TEXT, nullable): economic meaning of a transaction
- transactions.leg_role (TEXT, nullable): role of a transaction inside a batch
- accounts.system_role (TEXT, nullable): marks system accounts such as clearing

Existing rows are backfilled from the legacy conventions:
- purpose is inferred from account types, descriptions and unique IDs
- leg_role is inferred from the unique ID prefix of batch legs
- the account named "Internal Clearing" receives the "clearing" system role

Untagged rows keep working, so the backfill can be re-run safely.

Usage:
    python migrations/migrate_add_purpose_leg_role.py [--db-path PATH]
"""

import sys
from pathlib import Path

# Add src to path so we can import equitrack modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from equitrack.config import CLEARING_ACCOUNT_NAME, CLEARING_SYSTEM_ROLE
from equitrack.database.factories import create_sqlite_database
from equitrack.database.mappers import account_to_domain, transaction_to_domain
from equitrack.database.models import Account, Transaction
from equitrack.domain.classification import infer_purpose, legacy_leg_role

NEW_COLUMNS = [
    ("transactions", "purpose", "TEXT"),
    ("transactions", "leg_role", "TEXT"),
    ("accounts", "system_role", "TEXT"),
]


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


def backfill(session) -> tuple[int, int]:
    """Tag untagged transactions with an inferred purpose and leg role.

    Returns:
        Tuple of (purposes set, leg roles set)
    """
    accounts_by_id = {acc.id: account_to_domain(acc) for acc in session.query(Account).all()}

    purposes = roles = 0
    untagged = session.query(Transaction).filter(Transaction.purpose.is_(None)).all()
    for orm_txn in untagged:
        txn = transaction_to_domain(orm_txn)
        purpose = infer_purpose(txn, accounts_by_id)
        if purpose is not None:
            orm_txn.purpose = purpose.value
            purposes += 1
        if orm_txn.leg_role is None and txn.batch_id:
            role = legacy_leg_role(txn)
            if role is not None:
                orm_txn.leg_role = role.value
                roles += 1
    return purposes, roles


def tag_clearing_account(session) -> bool:
    """Give the legacy clearing account the clearing system role.

    Returns:
        True if an account was tagged
    """
    if session.query(Account).filter(Account.system_role == CLEARING_SYSTEM_ROLE).first():
        return False
    clearing = session.query(Account).filter(Account.name == CLEARING_ACCOUNT_NAME).first()
    if clearing is None:
        return False
    clearing.system_role = CLEARING_SYSTEM_ROLE
    return True


def migrate_database(database_path: str | None = None) -> None:
    """Migrate database to add purpose, leg_role and system_role columns.

    Args:
        database_path: Path to database file. If None, uses default location.

    Raises:
        Exception: If migration fails
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise Exception("Could not get database engine from session")
        finally:
            session.close()

        inspector = inspect(engine)
        for table_name in ("transactions", "accounts"):
            if table_name not in inspector.get_table_names():
                raise Exception(
                    f"Table '{table_name}' does not exist. Please initialize the database schema first."
                )

        print("Starting migration: adding purpose and leg role columns...")

        missing = []
        for table_name, column_name, column_type in NEW_COLUMNS:
            if column_exists(engine, table_name, column_name):
                print(f"  Column already exists: {table_name}.{column_name}")
            else:
                missing.append((table_name, column_name, column_type))

        with engine.begin() as conn:
            for table_name, column_name, column_type in missing:
                conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_type}"))
                print(f"  Added column: {table_name}.{column_name}")
            # SQLite cannot add a UNIQUE column, so uniqueness comes from an index
            conn.execute(
                text(
                    "CREATE UNIQUE INDEX IF NOT EXISTS ix_accounts_system_role "
                    "ON accounts (system_role)"
                )
            )

        print("Backfilling tags for existing rows...")

        session = db.session_factory()
        try:
            if tag_clearing_account(session):
                print(f"  Tagged '{CLEARING_ACCOUNT_NAME}' as the clearing account")
            purposes, roles = backfill(session)
            print(f"  Set purpose on {purposes} transaction(s)")
            print(f"  Set leg role on {roles} transaction(s)")
            session.commit()
        finally:
            session.close()

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
        description="Migrate database to add purpose and leg role tags"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides EQUITRACK_DB_PATH environment variable)",
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
