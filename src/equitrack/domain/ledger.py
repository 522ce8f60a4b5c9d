"""Equity ledger views.

A ledger view filters the transaction log to one selection scope, sorts it
chronologically, labels every row with a payment type and folds the rows
into a running balance.

Amounts are rounded to the nearest rounding unit (100 by default) before
they are displayed and before they are added to the running balance, so the
balance is the sum of rounded increments rather than the rounded sum of raw
amounts. Rows with equal dates keep their order in the log.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from equitrack.config import DEFAULT_ROUNDING_UNIT, Settings
from equitrack.database.base import Database
from equitrack.domain.balances import is_equity_transaction
from equitrack.domain.classification import (
    is_clearing_account,
    is_ledger_profit_share,
    is_pm_fee,
)
from equitrack.domain.entities import (
    Account,
    LedgerRow,
    LedgerScope,
    Project,
    ScopeKind,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

INVESTMENT = "Investment"
WITHDRAWAL = "Withdrawal"
PROFIT_SHARE = "Profit Share"
PM_FEE_DEPOSIT = "PM Fee Deposit"
EQUITY_TRANSFER = "Equity Transfer"
TRANSFER = "Transfer"


def round_to_unit(amount: Decimal, unit: Decimal = DEFAULT_ROUNDING_UNIT) -> Decimal:
    """Round an amount to the nearest multiple of unit, halves away from zero.

    Examples:
        >>> round_to_unit(Decimal("149"))
        Decimal('100')
        >>> round_to_unit(Decimal("150"))
        Decimal('200')
    """
    return (amount / unit).quantize(Decimal("1"), rounding=ROUND_HALF_UP) * unit


def _touches(txn: Transaction, account_id: int) -> bool:
    return account_id in (txn.account_id, txn.from_account_id, txn.to_account_id)


def filter_scope(
    transactions: Iterable[Transaction], scope: LedgerScope, equity_ids: set[int]
) -> list[Transaction]:
    """Keep the equity transactions that belong to a ledger scope."""
    txns = [txn for txn in transactions if is_equity_transaction(txn, equity_ids)]

    if scope.kind == ScopeKind.ALL_INVESTORS:
        return [txn for txn in txns if any(_touches(txn, eid) for eid in equity_ids)]
    if scope.kind == ScopeKind.PROJECT:
        return [txn for txn in txns if txn.project_id == scope.target_id]

    txns = [txn for txn in txns if _touches(txn, scope.target_id)]
    # Drilling into an investor under a project must not show other projects
    restricted = scope.restricted_project_id
    if restricted is not None:
        txns = [txn for txn in txns if txn.project_id == restricted]
    return txns


def classify_transaction(
    txn: Transaction,
    scope: LedgerScope,
    equity_ids: set[int],
    accounts_by_id: dict[int, Account],
    clearing_ids: Sequence[int] = (),
) -> tuple[str, bool, bool]:
    """Label a transaction relative to the scope.

    Returns:
        Tuple of (payment type, is_deposit, is_withdrawal)
    """
    if txn.transaction_type == TransactionType.INCOME:
        return PROFIT_SHARE, True, False
    if txn.transaction_type != TransactionType.TRANSFER:
        return TRANSFER, False, False

    if scope.kind == ScopeKind.INVESTOR:
        is_target = txn.to_account_id == scope.target_id
        is_source = txn.from_account_id == scope.target_id
    else:
        is_target = txn.to_account_id in equity_ids
        is_source = txn.from_account_id in equity_ids

    # In an investor view a move to another investor reads as an investment
    # by the sender and a withdrawal by the receiver
    if is_source and not is_target:
        return INVESTMENT, True, False

    if is_target and not is_source:
        source = accounts_by_id.get(txn.from_account_id) if txn.from_account_id else None
        if is_clearing_account(source, clearing_ids) and is_pm_fee(txn):
            return PM_FEE_DEPOSIT, True, False
        if is_ledger_profit_share(txn):
            return PROFIT_SHARE, True, False
        return WITHDRAWAL, False, True

    if is_source and is_target:
        if scope.kind == ScopeKind.INVESTOR:
            if txn.from_account_id == scope.target_id:
                return EQUITY_TRANSFER, False, True
            return EQUITY_TRANSFER, True, False
        return EQUITY_TRANSFER, False, False

    return TRANSFER, False, False


def _counterpart_account_id(
    txn: Transaction, scope: LedgerScope, is_deposit: bool
) -> Optional[int]:
    if txn.transaction_type != TransactionType.TRANSFER:
        return txn.account_id
    if scope.kind == ScopeKind.INVESTOR:
        if txn.from_account_id == scope.target_id:
            return txn.to_account_id
        return txn.from_account_id
    return txn.from_account_id if is_deposit else txn.to_account_id


def build_ledger(
    transactions: Iterable[Transaction],
    scope: LedgerScope,
    equity_accounts: Sequence[Account],
    accounts: Sequence[Account],
    projects: Sequence[Project],
    rounding_unit: Decimal = DEFAULT_ROUNDING_UNIT,
    clearing_ids: Sequence[int] = (),
) -> list[LedgerRow]:
    """Build the ledger rows of a scope with a rounded running balance.

    Args:
        transactions: Transaction log in insertion order
        scope: Selection scope
        equity_accounts: Investor equity accounts
        accounts: All accounts (for counterpart names)
        projects: All projects (for project names)
        rounding_unit: Rounding unit for amounts and balances
        clearing_ids: IDs of the resolved clearing account(s)

    Returns:
        Ledger rows in chronological order
    """
    equity_ids = {acc.id for acc in equity_accounts}
    accounts_by_id = {acc.id: acc for acc in accounts}
    projects_by_id = {p.id: p for p in projects}

    # sorted() is stable, so equal dates keep log order
    txns = sorted(filter_scope(transactions, scope, equity_ids), key=lambda txn: txn.date)

    rows = []
    running_balance = Decimal("0")
    for txn in txns:
        payment_type, is_deposit, is_withdrawal = classify_transaction(
            txn, scope, equity_ids, accounts_by_id, clearing_ids
        )

        rounded_amount = round_to_unit(txn.amount, rounding_unit)
        if is_deposit:
            running_balance += rounded_amount
        if is_withdrawal:
            running_balance -= rounded_amount

        info_parts = []
        project = projects_by_id.get(txn.project_id)
        if project is not None:
            info_parts.append(f"Project: {project.name}")
        other = accounts_by_id.get(_counterpart_account_id(txn, scope, is_deposit))
        if other is not None:
            info_parts.append(other.name)

        rows.append(
            LedgerRow(
                transaction=txn,
                payment_type=payment_type,
                is_deposit=is_deposit,
                is_withdrawal=is_withdrawal,
                amount=rounded_amount,
                balance=round_to_unit(running_balance, rounding_unit),
                info=" | ".join(info_parts),
                project_name=project.name if project is not None else "-",
            )
        )

    return rows


class LedgerService:
    """Service building ledger views from the transaction store."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize ledger service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()

    def get_ledger(self, scope: LedgerScope) -> list[LedgerRow]:
        """Build the ledger for a scope."""
        accounts = self.db.list_accounts()
        clearing_ids = (
            [self.settings.clearing_account_id]
            if self.settings.clearing_account_id is not None
            else []
        )
        rows = build_ledger(
            self.db.list_transactions(),
            scope,
            [acc for acc in accounts if acc.is_equity],
            accounts,
            self.db.list_projects(),
            rounding_unit=self.settings.rounding_unit,
            clearing_ids=clearing_ids,
        )
        logger.debug("Built %s ledger with %d row(s)", scope.kind.value, len(rows))
        return rows
