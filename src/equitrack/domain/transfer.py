"""Equity transfers out of a project.

Investors' equity in a source project can be moved into another project
(two legs routed through the clearing account) or paid out to them from a
bank account (one leg).
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from equitrack.config import Settings
from equitrack.database.base import Database
from equitrack.domain.account import AccountService
from equitrack.domain.classification import is_divestment
from equitrack.domain.entities import (
    Account,
    LegRole,
    NewTransaction,
    Purpose,
    Transaction,
    TransactionType,
    TransferRow,
    TransferType,
)
from equitrack.domain.errors import NoEquityError, ValidationError
from equitrack.domain.project import ProjectService
from equitrack.utils.ids import leg_unique_id, new_batch_id

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
MOVE_BATCH_PREFIX = "eq-move"
PAYOUT_BATCH_PREFIX = "eq-payout"
MOVE_OUT_DESCRIPTION = "Equity Move out"
MOVE_IN_DESCRIPTION = "Equity Move in"
PAYOUT_DESCRIPTION = "Capital Payout"


def plan_transfer(
    source_project_id: int,
    transactions: Iterable[Transaction],
    equity_accounts: Sequence[Account],
    clearing_account_ids: Sequence[int],
) -> list[TransferRow]:
    """Compute each investor's transferable equity in a project.

    Funds routed to an investor from the clearing account count as equity
    (profit shares) unless they are an earlier move out of the project.

    Args:
        source_project_id: Project to transfer out of
        transactions: Transaction log
        equity_accounts: Investor equity accounts
        clearing_account_ids: IDs of the clearing account

    Returns:
        One selected row per investor with positive equity

    Raises:
        NoEquityError: If no investor has positive equity in the project
    """
    equity_ids = {acc.id for acc in equity_accounts}
    clearing_ids = set(clearing_account_ids)
    balances: dict[int, Decimal] = {}

    for txn in transactions:
        if txn.transaction_type != TransactionType.TRANSFER:
            continue
        if txn.project_id != source_project_id:
            continue
        source, target = txn.from_account_id, txn.to_account_id
        if source in equity_ids and target not in equity_ids:
            balances[source] = balances.get(source, ZERO) + txn.amount
        elif target in equity_ids and source not in equity_ids:
            if source in clearing_ids and not is_divestment(txn):
                balances[target] = balances.get(target, ZERO) + txn.amount
            else:
                balances[target] = balances.get(target, ZERO) - txn.amount

    rows = [
        TransferRow(investor_id=investor_id, current_equity=amount, transfer_amount=amount)
        for investor_id, amount in balances.items()
        if amount > 0
    ]
    if not rows:
        raise NoEquityError(f"Project {source_project_id} has no positive investor equity")
    return rows


def clamp_transfer_amount(row: TransferRow) -> Decimal:
    """Transfer amount limited to [0, current equity]."""
    return max(ZERO, min(row.transfer_amount, row.current_equity))


def build_transfer_legs(
    rows: Sequence[TransferRow],
    transfer_type: TransferType,
    source_project_id: int,
    dest_project_id: Optional[int],
    clearing_account_id: Optional[int],
    payout_account_id: Optional[int],
    on_date: date,
    batch_id: str,
) -> list[NewTransaction]:
    """Build the legs of an equity move or capital payout.

    Raises:
        ValidationError: If the destination or payout account is missing, or
            no row is selected with a positive amount
    """
    if transfer_type == TransferType.PROJECT:
        if dest_project_id is None:
            raise ValidationError("A destination project is required to move equity")
        if dest_project_id == source_project_id:
            raise ValidationError("Source and destination projects must differ")
        if clearing_account_id is None:
            raise ValidationError("A clearing account is required to move equity")
    elif payout_account_id is None:
        raise ValidationError("A payout account is required for a capital payout")

    selected = [(row, clamp_transfer_amount(row)) for row in rows if row.selected]
    selected = [(row, amount) for row, amount in selected if amount > 0]
    if not selected:
        raise ValidationError("No investors selected for transfer")

    legs = []
    for row, amount in selected:
        investor_id = row.investor_id
        if transfer_type == TransferType.PAYOUT:
            legs.append(
                NewTransaction(
                    unique_id=leg_unique_id(LegRole.PAYOUT, batch_id, investor_id),
                    transaction_type=TransactionType.TRANSFER,
                    amount=amount,
                    date=on_date,
                    description=PAYOUT_DESCRIPTION,
                    account_id=payout_account_id,
                    from_account_id=payout_account_id,
                    to_account_id=investor_id,
                    project_id=source_project_id,
                    batch_id=batch_id,
                    purpose=Purpose.CAPITAL_PAYOUT,
                    leg_role=LegRole.PAYOUT,
                )
            )
            continue

        legs.append(
            NewTransaction(
                unique_id=leg_unique_id(LegRole.DIVEST, batch_id, investor_id),
                transaction_type=TransactionType.TRANSFER,
                amount=amount,
                date=on_date,
                description=MOVE_OUT_DESCRIPTION,
                account_id=clearing_account_id,
                from_account_id=clearing_account_id,
                to_account_id=investor_id,
                project_id=source_project_id,
                batch_id=batch_id,
                purpose=Purpose.EQUITY_MOVE_OUT,
                leg_role=LegRole.DIVEST,
            )
        )
        legs.append(
            NewTransaction(
                unique_id=leg_unique_id(LegRole.INVEST, batch_id, investor_id),
                transaction_type=TransactionType.TRANSFER,
                amount=amount,
                date=on_date,
                description=MOVE_IN_DESCRIPTION,
                account_id=investor_id,
                from_account_id=investor_id,
                to_account_id=clearing_account_id,
                project_id=dest_project_id,
                batch_id=batch_id,
                purpose=Purpose.EQUITY_MOVE_IN,
                leg_role=LegRole.INVEST,
            )
        )
    return legs


class TransferService:
    """Service planning and committing equity moves and payouts."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize transfer service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()
        self.account_service = AccountService(db, self.settings)
        self.project_service = ProjectService(db)

    def plan(self, source_project_id: int) -> list[TransferRow]:
        """Transferable equity per investor in a project."""
        self.project_service.require_project(source_project_id)
        rows = plan_transfer(
            source_project_id,
            self.db.list_transactions(),
            self.account_service.list_equity_accounts(),
            self.account_service.clearing_account_ids(),
        )
        logger.debug("Planned transfer from project %d: %d investor(s)", source_project_id, len(rows))
        return rows

    def commit(
        self,
        rows: Sequence[TransferRow],
        transfer_type: TransferType,
        source_project_id: int,
        dest_project_id: Optional[int] = None,
        payout_account_id: Optional[int] = None,
        on_date: Optional[date] = None,
        batch_id: Optional[str] = None,
    ) -> str:
        """Write an equity move or capital payout as one batch.

        Args:
            rows: Rows returned by plan(), possibly edited
            transfer_type: PROJECT or PAYOUT
            source_project_id: Project the equity leaves
            dest_project_id: Destination project (PROJECT only)
            payout_account_id: Bank account paying out (PAYOUT only)
            on_date: Transaction date (defaults to today)
            batch_id: Retry key; if this batch already exists nothing is written

        Returns:
            Batch ID

        Raises:
            ValidationError: If a required selection is missing or nothing is selected
            NotFoundError: If a project or the payout account doesn't exist
            StoreWriteError: If the write fails; nothing is written
        """
        if batch_id is not None and self.db.batch_exists(batch_id):
            logger.info("Transfer batch %s already committed; skipping", batch_id)
            return batch_id

        self.project_service.require_project(source_project_id)
        if dest_project_id is not None:
            self.project_service.require_project(dest_project_id)
        if payout_account_id is not None:
            payout_account = self.account_service.require_account(payout_account_id)
            if payout_account.is_equity:
                raise ValidationError(
                    f"Account {payout_account_id} is an equity account, not a bank account"
                )

        clearing_account_id = None
        if transfer_type == TransferType.PROJECT:
            prefix = MOVE_BATCH_PREFIX
            if dest_project_id is not None:
                clearing_account_id = self.account_service.resolve_clearing_account(create=True).id
        else:
            prefix = PAYOUT_BATCH_PREFIX

        batch_id = batch_id or new_batch_id(prefix)
        legs = build_transfer_legs(
            rows,
            transfer_type,
            source_project_id,
            dest_project_id,
            clearing_account_id,
            payout_account_id,
            on_date or date.today(),
            batch_id,
        )
        self.db.append_transactions(legs)
        logger.info(
            "Committed %s transfer %s from project %d: %d leg(s)",
            transfer_type.value.lower(),
            batch_id,
            source_project_id,
            len(legs),
        )
        return batch_id
