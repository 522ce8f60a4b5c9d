"""Tests for the investor report."""

from datetime import date
from decimal import Decimal

import pytest

from equitrack.domain.entities import AccountType, TransactionType, TransferType
from equitrack.domain.reports import ReportService, build_investor_report

ALICE, BOB, CAROL, BANK, CLEARING = 1, 2, 3, 10, 11
P1, P2 = 100, 200


@pytest.fixture
def accounts(make_account):
    return [
        make_account(ALICE, "Alice"),
        make_account(BOB, "Bob"),
        make_account(CAROL, "Carol"),
        make_account(BANK, "Main Bank", AccountType.BANK),
        make_account(CLEARING, "Internal Clearing", AccountType.BANK),
    ]


@pytest.fixture
def log(make_transaction):
    return [
        make_transaction(amount="6000", from_account_id=ALICE, to_account_id=BANK, project_id=P1),
        make_transaction(amount="2000", from_account_id=BOB, to_account_id=BANK, project_id=P1),
        make_transaction(
            amount="600", from_account_id=CLEARING, to_account_id=ALICE, project_id=P1,
            description="Profit Share: Q1", on_date=date(2024, 3, 31),
        ),
        make_transaction(
            amount="400", from_account_id=CLEARING, to_account_id=BOB, project_id=P1,
            description="PM Fee Equity", on_date=date(2024, 3, 31),
        ),
        make_transaction(
            amount="1000", from_account_id=BANK, to_account_id=ALICE, project_id=P1,
            description="Owner Withdrawal", on_date=date(2024, 6, 1),
        ),
        make_transaction(
            transaction_type=TransactionType.INCOME, amount="50", account_id=BOB, project_id=P2,
            on_date=date(2024, 7, 1),
        ),
    ]


def test_report_positions(log, accounts):
    report = build_investor_report(log, accounts)

    rows = {row.investor_name: row for row in report.rows}
    assert set(rows) == {"Alice", "Bob"}

    alice = rows["Alice"]
    assert alice.equity_invested == Decimal("6000")
    assert alice.profit_distributed == Decimal("600")
    assert alice.withdrawals == Decimal("1000")
    assert alice.net_balance == Decimal("5600")

    bob = rows["Bob"]
    # PM fee deposits from clearing count as invested capital
    assert bob.equity_invested == Decimal("2400")
    assert bob.profit_distributed == Decimal("50")

    assert report.total_equity_raised == Decimal("8400")
    assert report.total_profit_distributed == Decimal("650")
    assert sum(row.ownership_percentage for row in report.rows) == Decimal("100")
    assert [row.investor_name for row in report.rows] == ["Alice", "Bob"]


def test_report_project_filter(log, accounts):
    report = build_investor_report(log, accounts, project_id=P2)

    assert [(row.investor_name, row.profit_distributed) for row in report.rows] == [("Bob", Decimal("50"))]
    assert report.rows[0].ownership_percentage == Decimal("0")


def test_report_as_of_ignores_later_transactions(log, accounts):
    report = build_investor_report(log, accounts, as_of=date(2024, 4, 1))

    alice = next(row for row in report.rows if row.investor_name == "Alice")
    assert alice.withdrawals == Decimal("0")


def test_report_investor_filter_keeps_global_totals(log, accounts):
    report = build_investor_report(log, accounts, investor_id=BOB)

    assert [row.account_id for row in report.rows] == [BOB]
    assert report.total_equity_raised == Decimal("8400")


def test_divestment_counts_as_withdrawal(accounts, make_transaction):
    txns = [
        make_transaction(amount="1000", from_account_id=ALICE, to_account_id=BANK, project_id=P1),
        make_transaction(
            amount="1000", from_account_id=CLEARING, to_account_id=ALICE, project_id=P1,
            description="Equity Move out",
        ),
    ]

    report = build_investor_report(txns, accounts, project_id=P1)

    assert report.rows[0].withdrawals == Decimal("1000")
    assert report.rows[0].profit_distributed == Decimal("0")


def test_report_service_after_distribution(temp_db, distribution_service, transfer_service, portfolio, settings):
    plans = distribution_service.plan(portfolio.tower_a, pool_amount=Decimal("3000"))
    distribution_service.commit(portfolio.tower_a, plans)
    rows = transfer_service.plan(portfolio.tower_a)
    transfer_service.commit(rows, TransferType.PROJECT, portfolio.tower_a, dest_project_id=portfolio.tower_b)

    report = ReportService(temp_db, settings).investor_report()

    alice = next(row for row in report.rows if row.account_id == portfolio.alice)
    assert alice.profit_distributed == Decimal("2000.00")
    assert report.total_profit_distributed == Decimal("3000.00")
