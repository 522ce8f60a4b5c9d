"""Profit distribution planning and commits.

A distribution cycle splits a profit pool across a project's investors in
proportion to their contributed capital. Planning is read-only; committing
writes an EXPENSE leg and a TRANSFER leg per investor as one batch.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from equitrack.config import Settings
from equitrack.database.base import Database
from equitrack.domain.account import AccountService
from equitrack.domain.category import CategoryService
from equitrack.domain.entities import (
    Account,
    Category,
    DistributionPlan,
    LegRole,
    NewTransaction,
    ProjectFinancials,
    Purpose,
    Transaction,
    TransactionType,
)
from equitrack.domain.errors import NoCapitalError, ValidationError
from equitrack.domain.project import ProjectService
from equitrack.utils.ids import leg_unique_id, new_batch_id

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")
BATCH_PREFIX = "dist-cycle"


def default_cycle_name(on_date: date) -> str:
    """Default name of a distribution cycle, e.g. "Cycle 2024"."""
    return f"Cycle {on_date.year}"


def contributed_capital(
    project_id: int, transactions: Iterable[Transaction], equity_accounts: Sequence[Account]
) -> dict[int, Decimal]:
    """Net capital per investor from the project's TRANSFER legs.

    Only legs with exactly one equity side count: the investor gains capital
    as the source and loses it as the destination. Transfers between two
    investors are ignored. Investors are keyed in order of first appearance
    in the log.
    """
    equity_ids = {acc.id for acc in equity_accounts}
    capital: dict[int, Decimal] = {}

    for txn in transactions:
        if txn.transaction_type != TransactionType.TRANSFER or txn.project_id != project_id:
            continue
        source, target = txn.from_account_id, txn.to_account_id
        if source in equity_ids and target not in equity_ids:
            capital[source] = capital.get(source, ZERO) + txn.amount
        elif target in equity_ids and source not in equity_ids:
            capital[target] = capital.get(target, ZERO) - txn.amount

    return capital


def get_project_financials(
    project_id: int,
    transactions: Iterable[Transaction],
    categories: Sequence[Category],
    equity_accounts: Sequence[Account],
    equity_category_names: Sequence[str],
) -> ProjectFinancials:
    """Compute a project's operating result and what is left to distribute.

    Args:
        project_id: Project ID
        transactions: Transaction log
        categories: All categories
        equity_accounts: Investor equity accounts
        equity_category_names: Category names that mark equity movements

    Returns:
        ProjectFinancials
    """
    transactions = list(transactions)
    equity_category_ids = {c.id for c in categories if c.name in equity_category_names}

    income = expense = distributed = ZERO
    for txn in transactions:
        if txn.project_id != project_id:
            continue
        is_equity_category = txn.category_id in equity_category_ids
        if txn.transaction_type == TransactionType.INCOME and not is_equity_category:
            income += txn.amount
        elif txn.transaction_type == TransactionType.EXPENSE:
            if is_equity_category:
                distributed += txn.amount
            else:
                expense += txn.amount

    invested = sum(
        contributed_capital(project_id, transactions, equity_accounts).values(), ZERO
    )
    net_operating = income - expense
    return ProjectFinancials(
        income=income,
        expense=expense,
        net_operating=net_operating,
        distributed=distributed,
        available=net_operating - distributed,
        invested_capital=invested,
    )


def _validate_pool(pool_amount) -> Decimal:
    try:
        pool = pool_amount if isinstance(pool_amount, Decimal) else Decimal(str(pool_amount))
    except InvalidOperation:
        raise ValidationError(f"Invalid pool amount '{pool_amount}'")
    if not pool.is_finite() or pool < 0:
        raise ValidationError(f"Invalid pool amount '{pool_amount}': must be zero or more")
    return pool


def plan_distribution(
    project_id: int,
    transactions: Iterable[Transaction],
    equity_accounts: Sequence[Account],
    pool_amount: Optional[Decimal] = None,
    available: Optional[Decimal] = None,
) -> list[DistributionPlan]:
    """Split a profit pool across a project's investors by contributed capital.

    Args:
        project_id: Project ID
        transactions: Transaction log
        equity_accounts: Investor equity accounts
        pool_amount: Amount to distribute (defaults to available)
        available: The project's available-to-distribute figure

    Returns:
        One plan per investor with positive capital

    Raises:
        NoCapitalError: If no investor has positive capital in the project
        ValidationError: If the pool is negative, NaN or missing
    """
    capital = {
        investor_id: amount
        for investor_id, amount in contributed_capital(
            project_id, transactions, equity_accounts
        ).items()
        if amount > 0
    }
    total_capital = sum(capital.values(), ZERO)
    if total_capital <= 0:
        raise NoCapitalError(f"Project {project_id} has no positive investor capital")

    if pool_amount is None:
        pool_amount = available
    if pool_amount is None:
        raise ValidationError("A pool amount is required when nothing is available")
    pool = _validate_pool(pool_amount)

    plans = []
    for investor_id, principal in capital.items():
        share = principal / total_capital
        profit_share = pool * share
        plans.append(
            DistributionPlan(
                investor_id=investor_id,
                principal=principal,
                share_percentage=share,
                profit_share=profit_share,
                new_equity_balance=principal + profit_share,
            )
        )
    return plans


def _leg_amounts(plans: Sequence[DistributionPlan]) -> list[Decimal]:
    """Profit shares in cents; the rounding residue goes to the last investor."""
    amounts = [plan.profit_share.quantize(CENTS, rounding=ROUND_HALF_UP) for plan in plans]
    if amounts:
        target = sum((plan.profit_share for plan in plans), ZERO).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
        amounts[-1] += target - sum(amounts, ZERO)
    return amounts


def build_distribution_legs(
    plans: Sequence[DistributionPlan],
    project_id: int,
    cycle_name: str,
    clearing_account_id: int,
    category_id: int,
    on_date: date,
    batch_id: str,
) -> list[NewTransaction]:
    """Build the EXPENSE and TRANSFER legs of a distribution cycle.

    Returns:
        Two legs per investor with a positive share, all sharing batch_id
    """
    legs = []
    for plan, amount in zip(plans, _leg_amounts(plans)):
        if amount <= 0:
            continue
        legs.append(
            NewTransaction(
                unique_id=leg_unique_id(LegRole.DIST_EXPENSE, batch_id, plan.investor_id),
                transaction_type=TransactionType.EXPENSE,
                amount=amount,
                date=on_date,
                description=f"Profit Distribution: {cycle_name}",
                account_id=clearing_account_id,
                project_id=project_id,
                category_id=category_id,
                batch_id=batch_id,
                purpose=Purpose.PROFIT_DISTRIBUTION,
                leg_role=LegRole.DIST_EXPENSE,
            )
        )
        legs.append(
            NewTransaction(
                unique_id=leg_unique_id(LegRole.DIST_TRANSFER, batch_id, plan.investor_id),
                transaction_type=TransactionType.TRANSFER,
                amount=amount,
                date=on_date,
                description=f"Profit Share: {cycle_name}",
                account_id=clearing_account_id,
                from_account_id=clearing_account_id,
                to_account_id=plan.investor_id,
                project_id=project_id,
                batch_id=batch_id,
                purpose=Purpose.PROFIT_SHARE,
                leg_role=LegRole.DIST_TRANSFER,
            )
        )
    return legs


class DistributionService:
    """Service planning and committing profit distribution cycles."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize distribution service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()
        self.account_service = AccountService(db, self.settings)
        self.category_service = CategoryService(db)
        self.project_service = ProjectService(db)

    def financials(self, project_id: int) -> ProjectFinancials:
        """Operating and distribution figures of a project."""
        self.project_service.require_project(project_id)
        return get_project_financials(
            project_id,
            self.db.list_transactions(),
            self.db.list_categories(),
            self.account_service.list_equity_accounts(),
            self.settings.equity_category_names,
        )

    def plan(
        self, project_id: int, pool_amount: Optional[Decimal] = None
    ) -> list[DistributionPlan]:
        """Plan a distribution; the pool defaults to the project's available amount."""
        self.project_service.require_project(project_id)
        transactions = self.db.list_transactions()
        available = None
        if pool_amount is None:
            available = self.financials(project_id).available
        plans = plan_distribution(
            project_id,
            transactions,
            self.account_service.list_equity_accounts(),
            pool_amount=pool_amount,
            available=available,
        )
        logger.debug("Planned distribution for project %d: %d investor(s)", project_id, len(plans))
        return plans

    def commit(
        self,
        project_id: int,
        plans: Sequence[DistributionPlan],
        cycle_name: Optional[str] = None,
        on_date: Optional[date] = None,
        batch_id: Optional[str] = None,
    ) -> str:
        """Write a planned distribution as one batch.

        Args:
            project_id: Project ID
            plans: Plans returned by plan()
            cycle_name: Cycle name used in descriptions (defaults to "Cycle <year>")
            on_date: Transaction date (defaults to today)
            batch_id: Retry key; if this batch already exists nothing is written

        Returns:
            Batch ID of the committed cycle

        Raises:
            ValidationError: If no investor receives a positive share
            StoreWriteError: If the write fails; nothing is written
        """
        if batch_id is not None and self.db.batch_exists(batch_id):
            logger.info("Distribution batch %s already committed; skipping", batch_id)
            return batch_id

        self.project_service.require_project(project_id)
        on_date = on_date or date.today()
        cycle_name = cycle_name or default_cycle_name(on_date)
        batch_id = batch_id or new_batch_id(BATCH_PREFIX)

        clearing = self.account_service.resolve_clearing_account(create=True)
        category = self.category_service.get_or_create_category(
            self.settings.distribution_category, TransactionType.EXPENSE
        )
        legs = build_distribution_legs(
            plans, project_id, cycle_name, clearing.id, category.id, on_date, batch_id
        )
        if not legs:
            raise ValidationError("Nothing to distribute: every profit share is zero")

        self.db.append_transactions(legs)
        logger.info(
            "Committed distribution %s for project %d: %d leg(s), %s distributed",
            batch_id,
            project_id,
            len(legs),
            sum((leg.amount for leg in legs if leg.transaction_type == TransactionType.EXPENSE), ZERO),
        )
        return batch_id
