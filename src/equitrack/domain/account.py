"""Account domain service."""

import logging
from typing import Optional

from equitrack.config import CLEARING_ACCOUNT_NAME, CLEARING_SYSTEM_ROLE, Settings
from equitrack.database.base import Database
from equitrack.domain.entities import Account as AccountEntity, AccountType
from equitrack.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    not_an_equity_account,
)

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing accounts and resolving system accounts."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize account service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()

    def create_account(
        self, name: str, account_type: AccountType, is_permanent: bool = False
    ) -> int:
        """Create a new account.

        Args:
            name: Account name
            account_type: EQUITY, BANK or OTHER
            is_permanent: Whether the account is protected from deletion

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Account name is required")

        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(
            name=name, account_type=account_type, is_permanent=is_permanent
        )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def require_equity_account(self, account_id: int) -> AccountEntity:
        """Get an investor equity account or raise."""
        account = self.require_account(account_id)
        if not account.is_equity:
            raise ValidationError(not_an_equity_account(account_id))
        return account

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts()

    def list_equity_accounts(self) -> list[AccountEntity]:
        """List investor equity accounts."""
        return [acc for acc in self.db.list_accounts() if acc.is_equity]

    def resolve_clearing_account(self, create: bool = False) -> Optional[AccountEntity]:
        """Find the internal clearing account.

        Resolution order: the configured account ID, the account carrying the
        clearing system role, then (legacy data) the account named
        "Internal Clearing". When none exists and create is True, a permanent
        BANK account with the clearing role is created.

        Args:
            create: Create the clearing account if it does not exist

        Returns:
            Clearing account, or None if it does not exist and create is False

        Raises:
            NotFoundError: If the configured clearing account ID does not exist
        """
        if self.settings.clearing_account_id is not None:
            account = self.db.get_account(self.settings.clearing_account_id)
            if account is None:
                raise NotFoundError(
                    f"Configured clearing account {self.settings.clearing_account_id} not found"
                )
            return account

        accounts = self.db.list_accounts()
        for acc in accounts:
            if acc.system_role == CLEARING_SYSTEM_ROLE:
                return acc
        for acc in accounts:
            if acc.name == CLEARING_ACCOUNT_NAME:
                return acc

        if not create:
            return None

        account_id = self.db.create_account(
            name=CLEARING_ACCOUNT_NAME,
            account_type=AccountType.BANK,
            is_permanent=True,
            system_role=CLEARING_SYSTEM_ROLE,
        )
        logger.info("Created clearing account '%s' (ID: %d)", CLEARING_ACCOUNT_NAME, account_id)
        return self.db.get_account(account_id)

    def clearing_account_ids(self) -> list[int]:
        """IDs treated as the clearing account (empty if none exists yet)."""
        account = self.resolve_clearing_account()
        return [account.id] if account is not None else []
