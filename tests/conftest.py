"""Shared pytest fixtures for equitrack tests."""

import itertools
import os
import tempfile
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

import pytest
from click.testing import CliRunner

from equitrack.config import Settings
from equitrack.database.factories import create_sqlite_database
from equitrack.domain.account import AccountService
from equitrack.domain.batch import BatchService
from equitrack.domain.category import CategoryService
from equitrack.domain.distribution import DistributionService
from equitrack.domain.entities import Account, AccountType, Transaction, TransactionType
from equitrack.domain.ledger import LedgerService
from equitrack.domain.project import ProjectService
from equitrack.domain.transaction import TransactionService
from equitrack.domain.transfer import TransferService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that invoke the CLI
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    """Default engine settings."""
    return Settings()


@pytest.fixture
def account_service(temp_db, settings):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, settings)


@pytest.fixture
def project_service(temp_db):
    """Create a ProjectService with a temporary database."""
    return ProjectService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def ledger_service(temp_db, settings):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db, settings)


@pytest.fixture
def distribution_service(temp_db, settings):
    """Create a DistributionService with a temporary database."""
    return DistributionService(temp_db, settings)


@pytest.fixture
def transfer_service(temp_db, settings):
    """Create a TransferService with a temporary database."""
    return TransferService(temp_db, settings)


@pytest.fixture
def batch_service(temp_db):
    """Create a BatchService with a temporary database."""
    return BatchService(temp_db)


@dataclass
class Portfolio:
    """IDs of the seeded accounts and projects."""

    alice: int
    bob: int
    bank: int
    tower_a: int
    tower_b: int


@pytest.fixture
def portfolio(account_service, project_service, transaction_service):
    """Two investors in Tower A: Alice invests 10,000 and Bob 5,000."""
    alice = account_service.create_account("Alice Capital", AccountType.EQUITY)
    bob = account_service.create_account("Bob Capital", AccountType.EQUITY)
    bank = account_service.create_account("Main Bank", AccountType.BANK)
    tower_a = project_service.create_project("Tower A")
    tower_b = project_service.create_project("Tower B")

    transaction_service.record_investment(alice, tower_a, bank, Decimal("10000"), date(2024, 1, 10))
    transaction_service.record_investment(bob, tower_a, bank, Decimal("5000"), date(2024, 1, 12))

    return Portfolio(alice=alice, bob=bob, bank=bank, tower_a=tower_a, tower_b=tower_b)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_account():
    """Factory for in-memory Account entities."""

    def _make(account_id: int, name: str, account_type=AccountType.EQUITY, system_role=None):
        return Account(
            id=account_id,
            name=name,
            account_type=account_type,
            is_permanent=False,
            created_at=datetime(2024, 1, 1),
            system_role=system_role,
        )

    return _make


@pytest.fixture
def make_transaction():
    """Factory for in-memory Transaction entities with sequential IDs."""
    counter = itertools.count(1)

    def _make(
        transaction_type=TransactionType.TRANSFER,
        amount="100",
        from_account_id=None,
        to_account_id=None,
        account_id=None,
        project_id=None,
        description=None,
        on_date=date(2024, 1, 1),
        **kwargs,
    ):
        txn_id = kwargs.pop("id", None) or next(counter)
        return Transaction(
            id=txn_id,
            unique_id=kwargs.pop("unique_id", f"tx-{txn_id}"),
            transaction_type=transaction_type,
            amount=Decimal(str(amount)),
            date=on_date,
            description=description,
            account_id=account_id if account_id is not None else from_account_id,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            project_id=project_id,
            **kwargs,
        )

    return _make
