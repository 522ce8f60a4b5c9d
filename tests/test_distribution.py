"""Tests for profit distribution planning and commits."""

from datetime import date
from decimal import Decimal

import pytest

from equitrack.domain.distribution import (
    build_distribution_legs,
    get_project_financials,
    plan_distribution,
)
from equitrack.domain.entities import (
    Category,
    LegRole,
    Purpose,
    TransactionType,
)
from equitrack.domain.errors import NoCapitalError, ValidationError

ALICE, BOB, BANK, CLEARING = 1, 2, 10, 11
P1 = 100


@pytest.fixture
def investors(make_account):
    return [make_account(ALICE, "Alice"), make_account(BOB, "Bob")]


@pytest.fixture
def invested(make_transaction):
    return [
        make_transaction(amount="10000", from_account_id=ALICE, to_account_id=BANK, project_id=P1),
        make_transaction(amount="5000", from_account_id=BOB, to_account_id=BANK, project_id=P1),
    ]


def test_plan_splits_pool_by_capital(invested, investors):
    plans = plan_distribution(P1, invested, investors, pool_amount=Decimal("3000"))

    assert [plan.investor_id for plan in plans] == [ALICE, BOB]
    assert [plan.principal for plan in plans] == [Decimal("10000"), Decimal("5000")]
    assert [round(plan.profit_share, 2) for plan in plans] == [Decimal("2000.00"), Decimal("1000.00")]
    assert round(plans[0].new_equity_balance, 2) == Decimal("12000.00")
    assert round(sum(plan.share_percentage for plan in plans), 10) == Decimal("1")
    assert round(sum(plan.profit_share for plan in plans), 10) == Decimal("3000")


def test_plan_excludes_non_positive_capital(invested, investors, make_transaction):
    """Bob withdrew everything and is left out."""
    txns = invested + [
        make_transaction(amount="5000", from_account_id=BANK, to_account_id=BOB, project_id=P1),
    ]

    plans = plan_distribution(P1, txns, investors, pool_amount=Decimal("100"))

    assert [plan.investor_id for plan in plans] == [ALICE]
    assert plans[0].share_percentage == Decimal("1")


def test_investor_to_investor_transfer_leaves_capital_unchanged(invested, investors, make_transaction):
    """Only legs with exactly one equity side count towards contributed capital."""
    txns = invested + [
        make_transaction(amount="2000", from_account_id=ALICE, to_account_id=BOB, project_id=P1),
    ]

    plans = plan_distribution(P1, txns, investors, pool_amount=Decimal("3000"))

    assert [plan.principal for plan in plans] == [Decimal("10000"), Decimal("5000")]
    assert [round(plan.profit_share, 2) for plan in plans] == [Decimal("2000.00"), Decimal("1000.00")]


def test_plan_only_counts_the_project(invested, investors, make_transaction):
    txns = invested + [
        make_transaction(amount="90000", from_account_id=BOB, to_account_id=BANK, project_id=999),
    ]

    plans = plan_distribution(P1, txns, investors, pool_amount=Decimal("3000"))

    assert plans[1].principal == Decimal("5000")


def test_plan_without_capital_fails(investors):
    with pytest.raises(NoCapitalError):
        plan_distribution(P1, [], investors, pool_amount=Decimal("100"))


@pytest.mark.parametrize("pool", [Decimal("-1"), Decimal("NaN")])
def test_plan_rejects_invalid_pool(invested, investors, pool):
    with pytest.raises(ValidationError):
        plan_distribution(P1, invested, investors, pool_amount=pool)


def test_plan_defaults_pool_to_available(invested, investors):
    plans = plan_distribution(P1, invested, investors, available=Decimal("1500"))

    assert round(sum(plan.profit_share for plan in plans), 2) == Decimal("1500.00")


def test_project_financials(invested, investors, make_transaction):
    """Equity categories are distributions, not operating figures."""
    categories = [
        Category(id=1, name="Sales", category_type=TransactionType.INCOME, created_at=None),
        Category(id=2, name="Materials", category_type=TransactionType.EXPENSE, created_at=None),
        Category(id=3, name="Owner Equity", category_type=TransactionType.EXPENSE, created_at=None),
    ]
    txns = invested + [
        make_transaction(transaction_type=TransactionType.INCOME, amount="8000", account_id=BANK, project_id=P1, category_id=1),
        make_transaction(transaction_type=TransactionType.EXPENSE, amount="3000", account_id=BANK, project_id=P1, category_id=2),
        make_transaction(transaction_type=TransactionType.EXPENSE, amount="1000", account_id=CLEARING, project_id=P1, category_id=3),
        make_transaction(transaction_type=TransactionType.EXPENSE, amount="777", account_id=BANK, project_id=999, category_id=2),
    ]

    financials = get_project_financials(P1, txns, categories, investors, ("Owner Equity",))

    assert financials.income == Decimal("8000")
    assert financials.expense == Decimal("3000")
    assert financials.net_operating == Decimal("5000")
    assert financials.distributed == Decimal("1000")
    assert financials.available == Decimal("4000")
    assert financials.invested_capital == Decimal("15000")


def test_legs_sum_exactly_to_pool(invested, investors, make_account, make_transaction):
    """Three equal investors splitting 100 still sum to 100.00."""
    carol = 3
    txns = invested[:1] + [
        make_transaction(amount="10000", from_account_id=BOB, to_account_id=BANK, project_id=P1),
        make_transaction(amount="10000", from_account_id=carol, to_account_id=BANK, project_id=P1),
    ]
    plans = plan_distribution(P1, txns, investors + [make_account(carol, "Carol")], pool_amount=Decimal("100"))

    legs = build_distribution_legs(plans, P1, "Q1", CLEARING, 7, date(2024, 3, 31), "dist-cycle-x")

    expenses = [leg for leg in legs if leg.transaction_type == TransactionType.EXPENSE]
    assert [leg.amount for leg in expenses] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert sum(leg.amount for leg in expenses) == Decimal("100.00")


def test_legs_shape(invested, investors):
    plans = plan_distribution(P1, invested, investors, pool_amount=Decimal("3000"))

    legs = build_distribution_legs(plans, P1, "Q1", CLEARING, 7, date(2024, 3, 31), "dist-cycle-x")

    assert len(legs) == 4
    expense, transfer = legs[0], legs[1]
    assert expense.transaction_type == TransactionType.EXPENSE
    assert expense.account_id == CLEARING
    assert expense.category_id == 7
    assert expense.description == "Profit Distribution: Q1"
    assert expense.purpose == Purpose.PROFIT_DISTRIBUTION
    assert expense.leg_role == LegRole.DIST_EXPENSE
    assert transfer.transaction_type == TransactionType.TRANSFER
    assert (transfer.from_account_id, transfer.to_account_id) == (CLEARING, ALICE)
    assert transfer.description == "Profit Share: Q1"
    assert transfer.purpose == Purpose.PROFIT_SHARE
    assert transfer.leg_role == LegRole.DIST_TRANSFER
    assert {leg.batch_id for leg in legs} == {"dist-cycle-x"}
    assert expense.unique_id == f"prof-exp-dist-cycle-x-{ALICE}"


def test_zero_shares_are_skipped(invested, investors):
    plans = plan_distribution(P1, invested, investors, pool_amount=Decimal("0"))

    assert build_distribution_legs(plans, P1, "Q1", CLEARING, 7, date(2024, 3, 31), "b") == []


def test_commit_writes_one_batch(temp_db, distribution_service, account_service, category_service, portfolio):
    plans = distribution_service.plan(portfolio.tower_a, pool_amount=Decimal("3000"))

    batch_id = distribution_service.commit(portfolio.tower_a, plans, cycle_name="Q1", on_date=date(2024, 3, 31))

    legs = temp_db.list_transactions(batch_id=batch_id)
    assert len(legs) == 4
    transfers = {
        t.to_account_id: t.amount for t in legs if t.transaction_type == TransactionType.TRANSFER
    }
    assert transfers == {portfolio.alice: Decimal("2000.00"), portfolio.bob: Decimal("1000.00")}

    clearing = account_service.resolve_clearing_account()
    assert clearing is not None and clearing.is_permanent
    assert all(t.account_id == clearing.id for t in legs)
    category_names = [c.name for c in category_service.list_categories()]
    assert category_names == ["Owner Equity"]


def test_commit_with_existing_batch_id_is_noop(temp_db, distribution_service, portfolio):
    """A retried commit with the same batch ID writes nothing new."""
    plans = distribution_service.plan(portfolio.tower_a, pool_amount=Decimal("3000"))

    first = distribution_service.commit(portfolio.tower_a, plans, batch_id="dist-cycle-retry")
    second = distribution_service.commit(portfolio.tower_a, plans, batch_id="dist-cycle-retry")

    assert first == second == "dist-cycle-retry"
    assert len(temp_db.list_transactions(batch_id="dist-cycle-retry")) == 4


def test_clearing_account_is_created_once(distribution_service, account_service, portfolio):
    for _ in range(2):
        plans = distribution_service.plan(portfolio.tower_a, pool_amount=Decimal("300"))
        distribution_service.commit(portfolio.tower_a, plans)

    clearing = [acc for acc in account_service.list_accounts() if acc.system_role == "clearing"]
    assert len(clearing) == 1


def test_financials_and_default_pool(temp_db, distribution_service, category_service, portfolio):
    """The default pool is the project's available profit."""
    from equitrack.domain.entities import NewTransaction

    sales = category_service.create_category("Sales", TransactionType.INCOME)
    temp_db.append_transaction(
        NewTransaction(
            unique_id="sale-1", transaction_type=TransactionType.INCOME, amount=Decimal("4500"),
            date=date(2024, 2, 1), description="Unit sale", account_id=portfolio.bank,
            project_id=portfolio.tower_a, category_id=sales,
        )
    )

    assert distribution_service.financials(portfolio.tower_a).available == Decimal("4500")
    plans = distribution_service.plan(portfolio.tower_a)
    distribution_service.commit(portfolio.tower_a, plans)

    financials = distribution_service.financials(portfolio.tower_a)
    assert financials.distributed == Decimal("4500")
    assert financials.available == Decimal("0")
