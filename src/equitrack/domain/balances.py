"""Balance aggregation over the transaction log.

Balances are never stored. ``aggregate_balances`` reduces the log into a
snapshot by summing signed impacts, so the result does not depend on the
order of the transactions and can be recomputed at any time.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from equitrack.database.base import Database
from equitrack.domain.classification import is_profit_share
from equitrack.domain.entities import (
    Account,
    BalanceSnapshot,
    EquityTreeNode,
    Project,
    ROOT_INVESTORS_ID,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
TREE_BALANCE_THRESHOLD = Decimal("0.01")


@dataclass(frozen=True)
class Impact:
    """Signed contribution of one transaction to one investor."""

    investor_id: int
    amount: Decimal
    project_id: Optional[int]


def is_equity_transaction(txn: Transaction, equity_ids: set[int]) -> bool:
    """Transfers, and income booked directly into an equity account."""
    if txn.transaction_type == TransactionType.TRANSFER:
        return True
    return txn.transaction_type == TransactionType.INCOME and txn.account_id in equity_ids


def transaction_impacts(txn: Transaction, equity_ids: set[int]) -> list[Impact]:
    """Derive the investor impacts of a single transaction.

    Args:
        txn: Transaction to inspect
        equity_ids: IDs of all equity accounts

    Returns:
        Zero, one or two impacts
    """
    if not is_equity_transaction(txn, equity_ids):
        return []

    if txn.transaction_type == TransactionType.INCOME:
        # Profit recorded directly as a deposit
        return [Impact(txn.account_id, txn.amount, txn.project_id)]

    from_equity = txn.from_account_id in equity_ids
    to_equity = txn.to_account_id in equity_ids

    if from_equity and not to_equity:
        # Investment
        return [Impact(txn.from_account_id, txn.amount, txn.project_id)]
    if to_equity and not from_equity:
        if is_profit_share(txn):
            return [Impact(txn.to_account_id, txn.amount, txn.project_id)]
        # Withdrawal: capital returned to the investor
        return [Impact(txn.to_account_id, -txn.amount, txn.project_id)]
    if from_equity and to_equity:
        return [
            Impact(txn.from_account_id, -txn.amount, txn.project_id),
            Impact(txn.to_account_id, txn.amount, txn.project_id),
        ]
    return []


def aggregate_balances(
    transactions: Iterable[Transaction],
    equity_accounts: Sequence[Account],
    projects: Sequence[Project],
) -> BalanceSnapshot:
    """Reduce the transaction log into per-project and per-investor balances.

    Impacts without a project only count towards the investor total.

    Args:
        transactions: Transactions to aggregate
        equity_accounts: Investor equity accounts
        projects: Known projects (seeded with zero balances)

    Returns:
        BalanceSnapshot
    """
    equity_ids = {acc.id for acc in equity_accounts}
    project_balances: dict[int, Decimal] = {p.id: ZERO for p in projects}
    investor_totals: dict[int, Decimal] = {acc.id: ZERO for acc in equity_accounts}
    investor_projects: dict[int, dict[int, Decimal]] = defaultdict(dict)

    for txn in transactions:
        for impact in transaction_impacts(txn, equity_ids):
            investor_totals[impact.investor_id] = (
                investor_totals.get(impact.investor_id, ZERO) + impact.amount
            )
            if impact.project_id is None:
                continue
            project_balances[impact.project_id] = (
                project_balances.get(impact.project_id, ZERO) + impact.amount
            )
            per_investor = investor_projects[impact.project_id]
            per_investor[impact.investor_id] = (
                per_investor.get(impact.investor_id, ZERO) + impact.amount
            )

    return BalanceSnapshot(
        project_balances=project_balances,
        investor_total_balances=investor_totals,
        investor_project_balances=dict(investor_projects),
    )


def build_equity_tree(
    snapshot: BalanceSnapshot,
    equity_accounts: Sequence[Account],
    projects: Sequence[Project],
) -> list[EquityTreeNode]:
    """Build the "All Investors" node followed by one node per active project."""
    investors_by_id = {acc.id: acc for acc in equity_accounts}

    investor_nodes = sorted(
        (
            EquityTreeNode(
                id=acc.id,
                name=acc.name,
                kind="investor",
                amount=snapshot.investor_total_balances.get(acc.id, ZERO),
            )
            for acc in equity_accounts
        ),
        key=lambda node: node.name,
    )
    root = EquityTreeNode(
        id=ROOT_INVESTORS_ID,
        name="All Investors",
        kind="root",
        amount=sum((node.amount for node in investor_nodes if node.amount != 0), ZERO),
        children=tuple(investor_nodes),
    )

    project_nodes = []
    for project in projects:
        project_balance = snapshot.project_balances.get(project.id, ZERO)
        children = sorted(
            (
                EquityTreeNode(
                    id=investor_id,
                    name=investors_by_id[investor_id].name,
                    kind="investor",
                    amount=amount,
                )
                for investor_id, amount in snapshot.investor_project_balances.get(
                    project.id, {}
                ).items()
                if investor_id in investors_by_id
            ),
            key=lambda node: node.name,
        )
        if children or abs(project_balance) > TREE_BALANCE_THRESHOLD:
            project_nodes.append(
                EquityTreeNode(
                    id=project.id,
                    name=project.name,
                    kind="project",
                    amount=project_balance,
                    children=tuple(children),
                )
            )
    project_nodes.sort(key=lambda node: node.name)

    return [root] + project_nodes


class BalanceService:
    """Service computing balances from the transaction store."""

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def _equity_accounts(self) -> list[Account]:
        return [acc for acc in self.db.list_accounts() if acc.is_equity]

    def get_snapshot(self) -> BalanceSnapshot:
        """Aggregate the current transaction log."""
        snapshot = aggregate_balances(
            self.db.list_transactions(), self._equity_accounts(), self.db.list_projects()
        )
        logger.debug(
            "Aggregated balances for %d investor(s) and %d project(s)",
            len(snapshot.investor_total_balances),
            len(snapshot.project_balances),
        )
        return snapshot

    def get_equity_tree(self) -> list[EquityTreeNode]:
        """Build the investor/project navigation tree."""
        equity_accounts = self._equity_accounts()
        projects = self.db.list_projects()
        snapshot = aggregate_balances(self.db.list_transactions(), equity_accounts, projects)
        return build_equity_tree(snapshot, equity_accounts, projects)
