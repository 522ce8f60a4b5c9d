"""Transaction domain service for single-leg equity entries."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from equitrack.database.base import Database
from equitrack.domain.account import AccountService
from equitrack.domain.entities import (
    NewTransaction,
    Purpose,
    Transaction as TransactionEntity,
    TransactionType,
)
from equitrack.domain.errors import (
    NotFoundError,
    ValidationError,
    batch_member_delete_blocked,
    transaction_not_found,
)
from equitrack.domain.project import ProjectService
from equitrack.utils.amount_parser import require_positive_amount
from equitrack.utils.ids import entry_unique_id

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for recording and managing single equity entries."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.account_service = AccountService(db)
        self.project_service = ProjectService(db)

    def _validate_entry(
        self,
        investor_id: Optional[int],
        project_id: Optional[int],
        bank_account_id: Optional[int],
        amount: Decimal,
    ) -> tuple[Decimal, str]:
        if investor_id is None or project_id is None or bank_account_id is None:
            raise ValidationError("Investor, project and bank account are all required")
        value = require_positive_amount(amount)
        self.account_service.require_equity_account(investor_id)
        bank = self.account_service.require_account(bank_account_id)
        if bank.is_equity:
            raise ValidationError(f"Account {bank_account_id} is an equity account, not a bank account")
        project = self.project_service.require_project(project_id)
        return value, project.name

    def record_investment(
        self,
        investor_id: Optional[int],
        project_id: Optional[int],
        bank_account_id: Optional[int],
        amount: Decimal,
        on_date: date,
        description: Optional[str] = None,
    ) -> int:
        """Record capital flowing from an investor into a project bank account.

        Args:
            investor_id: Investor equity account ID
            project_id: Project ID
            bank_account_id: Receiving bank account ID
            amount: Positive amount
            on_date: Transaction date
            description: Optional description (defaults to "Investment in <project>")

        Returns:
            Transaction ID

        Raises:
            ValidationError: If a selection is missing or the amount is not positive
            NotFoundError: If an account or the project doesn't exist
        """
        value, project_name = self._validate_entry(investor_id, project_id, bank_account_id, amount)
        txn_id = self.db.append_transaction(
            NewTransaction(
                unique_id=entry_unique_id(),
                transaction_type=TransactionType.TRANSFER,
                amount=value,
                date=on_date,
                description=description or f"Investment in {project_name}",
                account_id=investor_id,
                from_account_id=investor_id,
                to_account_id=bank_account_id,
                project_id=project_id,
                purpose=Purpose.INVESTMENT,
            )
        )
        logger.info("Recorded investment %d of %s by account %d", txn_id, value, investor_id)
        return txn_id

    def record_withdrawal(
        self,
        investor_id: Optional[int],
        project_id: Optional[int],
        bank_account_id: Optional[int],
        amount: Decimal,
        on_date: date,
        description: Optional[str] = None,
    ) -> int:
        """Record capital returned from a project bank account to an investor.

        Raises:
            ValidationError: If a selection is missing or the amount is not positive
            NotFoundError: If an account or the project doesn't exist
        """
        value, _project_name = self._validate_entry(
            investor_id, project_id, bank_account_id, amount
        )
        txn_id = self.db.append_transaction(
            NewTransaction(
                unique_id=entry_unique_id(),
                transaction_type=TransactionType.TRANSFER,
                amount=value,
                date=on_date,
                description=description or "Owner Withdrawal",
                account_id=bank_account_id,
                from_account_id=bank_account_id,
                to_account_id=investor_id,
                project_id=project_id,
                purpose=Purpose.WITHDRAWAL,
            )
        )
        logger.info("Recorded withdrawal %d of %s to account %d", txn_id, value, investor_id)
        return txn_id

    def record_profit_income(
        self,
        investor_id: Optional[int],
        project_id: Optional[int],
        amount: Decimal,
        on_date: date,
        description: Optional[str] = None,
    ) -> int:
        """Record profit booked directly as income into an equity account.

        Raises:
            ValidationError: If the investor is missing or the amount is not positive
        """
        if investor_id is None:
            raise ValidationError("Investor is required")
        value = require_positive_amount(amount)
        self.account_service.require_equity_account(investor_id)
        if project_id is not None:
            self.project_service.require_project(project_id)

        return self.db.append_transaction(
            NewTransaction(
                unique_id=entry_unique_id(),
                transaction_type=TransactionType.INCOME,
                amount=value,
                date=on_date,
                description=description or "Profit Share",
                account_id=investor_id,
                project_id=project_id,
                purpose=Purpose.PROFIT_SHARE,
            )
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        project_id: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List transactions in log order with optional filters.

        Args:
            project_id: Optional project ID filter
            account_id: Optional filter on account, source or destination
        """
        transactions = self.db.list_transactions()
        if project_id is not None:
            transactions = [t for t in transactions if t.project_id == project_id]
        if account_id is not None:
            transactions = [
                t
                for t in transactions
                if account_id in (t.account_id, t.from_account_id, t.to_account_id)
            ]
        return transactions

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a single transaction that is not part of a batch.

        Raises:
            NotFoundError: If transaction doesn't exist
            ValidationError: If the transaction belongs to a batch
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.batch_id and len(self.db.list_transactions(batch_id=txn.batch_id)) > 1:
            raise ValidationError(batch_member_delete_blocked(transaction_id, txn.batch_id))

        self.db.delete_transaction(transaction_id)
        logger.info("Deleted transaction %d", transaction_id)
