"""Tests for the Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from equitrack.domain import entities
from equitrack.domain.entities import AccountType, LegRole, NewTransaction, Purpose, TransactionType
from equitrack.domain.errors import ConflictError, NotFoundError, StoreWriteError


def _new_transaction(account_id: int, unique_id: str, amount: str = "100", batch_id=None, **kwargs):
    return NewTransaction(
        unique_id=unique_id,
        transaction_type=TransactionType.TRANSFER,
        amount=Decimal(amount),
        date=date(2024, 1, 15),
        description="Test",
        account_id=account_id,
        batch_id=batch_id,
        **kwargs,
    )


@pytest.fixture
def account_id(temp_db):
    return temp_db.create_account(name="Alice Capital", account_type=AccountType.EQUITY)


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_account_returns_domain_model(self, temp_db):
        """Test that get_account returns a domain Account entity."""
        account_id = temp_db.create_account(
            name="Internal Clearing", account_type=AccountType.BANK, is_permanent=True, system_role="clearing"
        )

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.account_type == AccountType.BANK
        assert account.is_permanent is True
        assert account.system_role == "clearing"
        assert isinstance(account.created_at, datetime)

    def test_duplicate_account_name(self, temp_db, account_id):
        with pytest.raises(ConflictError):
            temp_db.create_account(name="Alice Capital", account_type=AccountType.BANK)

    def test_duplicate_project_name(self, temp_db):
        temp_db.create_project("Tower A")

        with pytest.raises(ConflictError):
            temp_db.create_project("Tower A")

    def test_category_round_trip(self, temp_db):
        category_id = temp_db.create_category("Owner Equity", TransactionType.EXPENSE)

        category = temp_db.get_category(category_id)

        assert isinstance(category, entities.Category)
        assert category.category_type == TransactionType.EXPENSE

    def test_transaction_tags_round_trip(self, temp_db, account_id):
        txn_id = temp_db.append_transaction(
            _new_transaction(
                account_id, "t-1", batch_id="b-1", purpose=Purpose.EQUITY_MOVE_OUT, leg_role=LegRole.DIVEST
            )
        )

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.amount == Decimal("100.00")
        assert txn.date == date(2024, 1, 15)
        assert txn.purpose == Purpose.EQUITY_MOVE_OUT
        assert txn.leg_role == LegRole.DIVEST
        assert txn.batch_id == "b-1"

    def test_list_transactions_in_insertion_order(self, temp_db, account_id):
        ids = temp_db.append_transactions(
            [_new_transaction(account_id, f"t-{n}", batch_id="b" if n % 2 else None) for n in range(4)]
        )

        assert [t.id for t in temp_db.list_transactions()] == ids
        assert [t.id for t in temp_db.list_transactions(batch_id="b")] == [ids[1], ids[3]]
        assert temp_db.batch_exists("b")
        assert not temp_db.batch_exists("missing")

    def test_append_transactions_is_atomic(self, temp_db, account_id):
        """A failing row rolls back the whole batch."""
        legs = [_new_transaction(account_id, "dup"), _new_transaction(account_id, "dup")]

        with pytest.raises(StoreWriteError):
            temp_db.append_transactions(legs)

        assert temp_db.list_transactions() == []
        # The store is usable after the rollback
        temp_db.append_transaction(_new_transaction(account_id, "ok"))
        assert len(temp_db.list_transactions()) == 1

    def test_update_transactions(self, temp_db, account_id):
        from dataclasses import replace

        ids = temp_db.append_transactions(
            [_new_transaction(account_id, "a"), _new_transaction(account_id, "b")]
        )
        txns = temp_db.list_transactions()

        temp_db.update_transactions([replace(t, amount=Decimal("250")) for t in txns])

        assert [temp_db.get_transaction(i).amount for i in ids] == [Decimal("250.00")] * 2

    def test_update_missing_transaction_changes_nothing(self, temp_db, account_id):
        from dataclasses import replace

        txn_id = temp_db.append_transaction(_new_transaction(account_id, "a"))
        txn = temp_db.get_transaction(txn_id)

        with pytest.raises(NotFoundError):
            temp_db.update_transactions(
                [replace(txn, amount=Decimal("999")), replace(txn, id=12345)]
            )

        assert temp_db.get_transaction(txn_id).amount == Decimal("100.00")

    def test_update_flush_failure_rolls_back(self, temp_db, account_id):
        """A constraint error flushed while loading a later row becomes a StoreWriteError."""
        from dataclasses import replace

        temp_db.append_transactions(
            [_new_transaction(account_id, "a"), _new_transaction(account_id, "b")]
        )
        first, second = temp_db.list_transactions()

        with pytest.raises(StoreWriteError):
            temp_db.update_transactions(
                [replace(first, unique_id="b"), replace(second, amount=Decimal("999"))]
            )

        assert temp_db.get_transaction(first.id).unique_id == "a"
        assert temp_db.get_transaction(second.id).amount == Decimal("100.00")
        temp_db.append_transaction(_new_transaction(account_id, "c"))
        assert len(temp_db.list_transactions()) == 3

    def test_delete_transactions(self, temp_db, account_id):
        ids = temp_db.append_transactions(
            [_new_transaction(account_id, "a"), _new_transaction(account_id, "b")]
        )

        temp_db.delete_transactions(ids)

        assert temp_db.list_transactions() == []

    def test_delete_missing_transaction(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.delete_transaction(42)
