"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from equitrack.domain.entities import (
    Account,
    AccountType,
    Category,
    NewTransaction,
    Project,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for equitrack.

    Multi-row writes (append_transactions, update_transactions,
    delete_transactions) are all-or-nothing: on failure nothing is written
    and StoreWriteError is raised.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        account_type: AccountType,
        is_permanent: bool = False,
        system_role: Optional[str] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    # Project operations
    @abstractmethod
    def create_project(self, name: str) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def list_projects(self) -> list[Project]:
        """List all projects."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, category_type: TransactionType) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    # Transaction operations
    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self, batch_id: Optional[str] = None) -> list[Transaction]:
        """List transactions in insertion order, optionally for one batch."""
        pass

    @abstractmethod
    def batch_exists(self, batch_id: str) -> bool:
        """Check if any transaction carries the given batch ID."""
        pass

    @abstractmethod
    def append_transaction(self, transaction: NewTransaction) -> int:
        """Append one transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def append_transactions(self, transactions: Sequence[NewTransaction]) -> list[int]:
        """Append transactions atomically. Returns IDs in input order."""
        pass

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> None:
        """Replace the stored fields of one transaction by ID."""
        pass

    @abstractmethod
    def update_transactions(self, transactions: Sequence[Transaction]) -> None:
        """Replace several transactions by ID atomically."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete one transaction."""
        pass

    @abstractmethod
    def delete_transactions(self, transaction_ids: Sequence[int]) -> None:
        """Delete several transactions atomically."""
        pass
