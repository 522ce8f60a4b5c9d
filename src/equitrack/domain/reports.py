"""Investor equity report."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from equitrack.config import Settings
from equitrack.database.base import Database
from equitrack.domain.classification import is_clearing_account, is_divestment, is_pm_fee
from equitrack.domain.entities import (
    Account,
    InvestorReport,
    InvestorReportRow,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
ACTIVITY_THRESHOLD = Decimal("0.01")


@dataclass
class _Position:
    name: str
    invested: Decimal = ZERO
    withdrawn: Decimal = ZERO
    profit: Decimal = ZERO


def _accumulate(
    txn: Transaction,
    positions: dict[int, _Position],
    accounts_by_id: dict[int, Account],
    clearing_ids: Sequence[int],
) -> None:
    if txn.transaction_type == TransactionType.INCOME:
        if txn.account_id in positions:
            positions[txn.account_id].profit += txn.amount
        return
    if txn.transaction_type != TransactionType.TRANSFER:
        return

    from_equity = txn.from_account_id in positions
    to_equity = txn.to_account_id in positions

    if from_equity and not to_equity:
        positions[txn.from_account_id].invested += txn.amount

    if to_equity and not from_equity:
        position = positions[txn.to_account_id]
        from_clearing = is_clearing_account(accounts_by_id.get(txn.from_account_id), clearing_ids)
        if from_clearing and is_pm_fee(txn):
            position.invested += txn.amount
        elif from_clearing and not is_divestment(txn):
            position.profit += txn.amount
        else:
            # Withdrawals, payouts and moves out of the project
            position.withdrawn += txn.amount


def build_investor_report(
    transactions: Iterable[Transaction],
    accounts: Sequence[Account],
    project_id: Optional[int] = None,
    investor_id: Optional[int] = None,
    as_of: Optional[date] = None,
    clearing_ids: Sequence[int] = (),
) -> InvestorReport:
    """Summarize each investor's invested capital, profit and withdrawals.

    Args:
        transactions: Transaction log
        accounts: All accounts
        project_id: Only count transactions of this project
        investor_id: Only return this investor's row (totals stay global)
        as_of: Ignore transactions dated after this day
        clearing_ids: IDs of the resolved clearing account

    Returns:
        InvestorReport with rows sorted by invested capital, largest first
    """
    accounts_by_id = {acc.id: acc for acc in accounts}
    positions = {acc.id: _Position(name=acc.name) for acc in accounts if acc.is_equity}

    for txn in transactions:
        if as_of is not None and txn.date > as_of:
            continue
        if project_id is not None and txn.project_id != project_id:
            continue
        _accumulate(txn, positions, accounts_by_id, clearing_ids)

    total_invested = sum((p.invested for p in positions.values()), ZERO)
    total_profit = sum((p.profit for p in positions.values()), ZERO)

    rows = []
    for account_id, position in positions.items():
        if investor_id is not None and account_id != investor_id:
            continue
        ownership = position.invested / total_invested * HUNDRED if total_invested > 0 else ZERO
        net_balance = position.invested - position.withdrawn + position.profit
        if not (
            position.invested > 0
            or position.withdrawn > 0
            or position.profit > 0
            or abs(net_balance) > ACTIVITY_THRESHOLD
        ):
            continue
        rows.append(
            InvestorReportRow(
                account_id=account_id,
                investor_name=position.name,
                equity_invested=position.invested,
                ownership_percentage=ownership,
                profit_distributed=position.profit,
                withdrawals=position.withdrawn,
                net_balance=net_balance,
            )
        )
    rows.sort(key=lambda row: row.equity_invested, reverse=True)

    return InvestorReport(
        rows=tuple(rows),
        total_equity_raised=total_invested,
        total_profit_distributed=total_profit,
    )


class ReportService:
    """Service producing investor reports from the transaction store."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or Settings()

    def investor_report(
        self,
        project_id: Optional[int] = None,
        investor_id: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> InvestorReport:
        """Build the investor report for an optional project, investor and date."""
        clearing_ids = (
            [self.settings.clearing_account_id]
            if self.settings.clearing_account_id is not None
            else []
        )
        report = build_investor_report(
            self.db.list_transactions(),
            self.db.list_accounts(),
            project_id=project_id,
            investor_id=investor_id,
            as_of=as_of,
            clearing_ids=clearing_ids,
        )
        logger.debug("Built investor report with %d row(s)", len(report.rows))
        return report
