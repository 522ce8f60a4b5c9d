"""Tests for balance aggregation and the equity tree."""

from decimal import Decimal

from equitrack.domain.balances import aggregate_balances, build_equity_tree, transaction_impacts
from equitrack.domain.entities import (
    Project,
    Purpose,
    ROOT_INVESTORS_ID,
    TransactionType,
)

ALICE, BOB, BANK, CLEARING = 1, 2, 10, 11
P1, P2 = 100, 200


def _projects():
    return [Project(id=P1, name="Tower A", created_at=None), Project(id=P2, name="Tower B", created_at=None)]


def _investors(make_account):
    return [make_account(ALICE, "Alice"), make_account(BOB, "Bob")]


def test_investments_credit_investor_per_project(make_account, make_transaction):
    """Investor -> bank transfers are investments."""
    txns = [
        make_transaction(amount="10000", from_account_id=ALICE, to_account_id=BANK, project_id=P1),
        make_transaction(amount="5000", from_account_id=BOB, to_account_id=BANK, project_id=P1),
    ]

    snapshot = aggregate_balances(txns, _investors(make_account), _projects())

    assert snapshot.investor_project_balances[P1] == {ALICE: Decimal("10000"), BOB: Decimal("5000")}
    assert snapshot.project_balances[P1] == Decimal("15000")
    assert snapshot.project_balances[P2] == Decimal("0")
    assert snapshot.investor_total_balances == {ALICE: Decimal("10000"), BOB: Decimal("5000")}


def test_withdrawal_and_profit_share_into_investor(make_account, make_transaction):
    """Bank -> investor is a withdrawal unless the description mentions profit."""
    txns = [
        make_transaction(amount="1000", from_account_id=ALICE, to_account_id=BANK, project_id=P1),
        make_transaction(
            amount="300", from_account_id=BANK, to_account_id=ALICE, project_id=P1,
            description="Owner Withdrawal",
        ),
        make_transaction(
            amount="200", from_account_id=CLEARING, to_account_id=ALICE, project_id=P1,
            description="PROFIT share: Cycle 2024",
        ),
    ]

    snapshot = aggregate_balances(txns, _investors(make_account), _projects())

    assert snapshot.investor_total_balances[ALICE] == Decimal("900")


def test_explicit_purpose_wins_over_description(make_account, make_transaction):
    """Tagged rows are classified by purpose, not description text."""
    txn = make_transaction(
        amount="250", from_account_id=CLEARING, to_account_id=ALICE, project_id=P1,
        description="Monthly transfer", purpose=Purpose.PROFIT_SHARE,
    )

    impacts = transaction_impacts(txn, {ALICE, BOB})

    assert len(impacts) == 1
    assert impacts[0].amount == Decimal("250")


def test_equity_to_equity_transfer_creates_two_impacts(make_account, make_transaction):
    """An internal equity move debits the source and credits the destination."""
    txn = make_transaction(amount="400", from_account_id=ALICE, to_account_id=BOB, project_id=P1)

    snapshot = aggregate_balances([txn], _investors(make_account), _projects())

    assert snapshot.investor_project_balances[P1] == {ALICE: Decimal("-400"), BOB: Decimal("400")}
    assert snapshot.project_balances[P1] == Decimal("0")


def test_income_into_equity_account_is_deposit(make_account, make_transaction):
    """INCOME booked into an equity account credits the investor."""
    txn = make_transaction(
        transaction_type=TransactionType.INCOME, amount="75", account_id=BOB, project_id=P2
    )

    snapshot = aggregate_balances([txn], _investors(make_account), _projects())

    assert snapshot.investor_project_balances[P2] == {BOB: Decimal("75")}


def test_unassigned_transaction_only_updates_totals(make_account, make_transaction):
    """Transactions without a project count towards investor totals only."""
    txn = make_transaction(amount="500", from_account_id=ALICE, to_account_id=BANK)

    snapshot = aggregate_balances([txn], _investors(make_account), _projects())

    assert snapshot.investor_total_balances[ALICE] == Decimal("500")
    assert snapshot.project_balances == {P1: Decimal("0"), P2: Decimal("0")}
    assert snapshot.investor_project_balances == {}


def test_non_equity_transactions_are_ignored(make_account, make_transaction):
    """Expenses and income into bank accounts have no equity impact."""
    txns = [
        make_transaction(transaction_type=TransactionType.EXPENSE, amount="90", account_id=BANK, project_id=P1),
        make_transaction(transaction_type=TransactionType.INCOME, amount="90", account_id=BANK, project_id=P1),
    ]

    snapshot = aggregate_balances(txns, _investors(make_account), _projects())

    assert snapshot.project_balances[P1] == Decimal("0")


def test_aggregation_is_order_independent_and_idempotent(make_account, make_transaction):
    """Re-running on the same log, in any order, yields the same snapshot."""
    txns = [
        make_transaction(amount="10000", from_account_id=ALICE, to_account_id=BANK, project_id=P1),
        make_transaction(amount="300", from_account_id=BANK, to_account_id=ALICE, project_id=P1),
        make_transaction(amount="400", from_account_id=ALICE, to_account_id=BOB, project_id=P2),
    ]
    investors = _investors(make_account)

    first = aggregate_balances(txns, investors, _projects())
    second = aggregate_balances(txns, investors, _projects())
    reversed_order = aggregate_balances(list(reversed(txns)), investors, _projects())

    assert first == second == reversed_order


def test_equity_tree_structure(make_account, make_transaction):
    """The tree has the All Investors root followed by active projects."""
    txns = [
        make_transaction(amount="10000", from_account_id=ALICE, to_account_id=BANK, project_id=P1),
        make_transaction(amount="5000", from_account_id=BOB, to_account_id=BANK, project_id=P1),
    ]
    investors = _investors(make_account)
    snapshot = aggregate_balances(txns, investors, _projects())

    tree = build_equity_tree(snapshot, investors, _projects())

    root, *projects = tree
    assert root.id == ROOT_INVESTORS_ID
    assert root.amount == Decimal("15000")
    assert [child.name for child in root.children] == ["Alice", "Bob"]
    # Tower B has no activity and is left out
    assert [node.name for node in projects] == ["Tower A"]
    assert [(child.name, child.amount) for child in projects[0].children] == [
        ("Alice", Decimal("10000")),
        ("Bob", Decimal("5000")),
    ]


def test_balance_service_snapshot(temp_db, portfolio):
    """BalanceService aggregates the stored log."""
    from equitrack.domain.balances import BalanceService

    snapshot = BalanceService(temp_db).get_snapshot()

    assert snapshot.investor_project_balances[portfolio.tower_a] == {
        portfolio.alice: Decimal("10000"),
        portfolio.bob: Decimal("5000"),
    }
    tree = BalanceService(temp_db).get_equity_tree()
    assert tree[0].amount == Decimal("15000")
