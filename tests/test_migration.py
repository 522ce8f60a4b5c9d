"""Tests for the purpose and leg role tag migration."""

import importlib.util
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from equitrack.database.factories import create_sqlite_database
from equitrack.domain.entities import AccountType, LegRole, NewTransaction, Purpose, TransactionType

MIGRATION_PATH = Path(__file__).parent.parent / "migrations" / "migrate_add_purpose_leg_role.py"


@pytest.fixture
def migration():
    """Load the migration script as a module."""
    module_spec = importlib.util.spec_from_file_location("migrate_add_purpose_leg_role", MIGRATION_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def _untagged(unique_id, from_id, to_id, description=None, batch_id=None, purpose=None):
    return NewTransaction(
        unique_id=unique_id,
        transaction_type=TransactionType.TRANSFER,
        amount=Decimal("1000"),
        date=date(2024, 1, 15),
        description=description,
        account_id=from_id,
        from_account_id=from_id,
        to_account_id=to_id,
        batch_id=batch_id,
        purpose=purpose,
    )


@pytest.fixture
def legacy_store(temp_db):
    """A store written before tags existed: clearing found by name, no purposes."""
    alice = temp_db.create_account(name="Alice Capital", account_type=AccountType.EQUITY)
    bank = temp_db.create_account(name="Main Bank", account_type=AccountType.BANK)
    clearing = temp_db.create_account(name="Internal Clearing", account_type=AccountType.BANK)
    temp_db.append_transactions(
        [
            _untagged("eq-tx-1", alice, bank, "Investment in Tower A"),
            _untagged("eq-tx-2", bank, alice, "Owner Withdrawal"),
            _untagged("divest-eq-move-x-1", clearing, alice, "Equity Move out", batch_id="eq-move-x"),
            _untagged("invest-eq-move-x-1", alice, clearing, "Equity Move in", batch_id="eq-move-x"),
            _untagged("eq-tx-3", bank, alice, "Bonus", purpose=Purpose.PROFIT_SHARE),
        ]
    )
    return temp_db


def _reload(path):
    db = create_sqlite_database(database_path=path)
    return {txn.unique_id: txn for txn in db.list_transactions()}, db


def test_backfill_tags_legacy_rows(migration, legacy_store):
    migration.migrate_database(legacy_store.database_path)

    txns, db = _reload(legacy_store.database_path)
    try:
        assert txns["eq-tx-1"].purpose == Purpose.INVESTMENT
        assert txns["eq-tx-2"].purpose == Purpose.WITHDRAWAL
        assert txns["divest-eq-move-x-1"].purpose == Purpose.EQUITY_MOVE_OUT
        assert txns["divest-eq-move-x-1"].leg_role == LegRole.DIVEST
        assert txns["invest-eq-move-x-1"].purpose == Purpose.EQUITY_MOVE_IN
        assert txns["invest-eq-move-x-1"].leg_role == LegRole.INVEST
        assert txns["eq-tx-1"].leg_role is None

        clearing = next(acc for acc in db.list_accounts() if acc.name == "Internal Clearing")
        assert clearing.system_role == "clearing"
    finally:
        db.disconnect()


def test_backfill_keeps_existing_tags(migration, legacy_store):
    """Tagged rows are left alone and re-running the migration changes nothing."""
    migration.migrate_database(legacy_store.database_path)
    migration.migrate_database(legacy_store.database_path)

    txns, db = _reload(legacy_store.database_path)
    try:
        assert txns["eq-tx-3"].purpose == Purpose.PROFIT_SHARE
        assert txns["eq-tx-2"].purpose == Purpose.WITHDRAWAL
    finally:
        db.disconnect()
