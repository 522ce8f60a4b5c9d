"""Tests for parsing and resolution utilities."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from equitrack.domain.entities import AccountType, LegRole
from equitrack.domain.errors import NotFoundError, ValidationError
from equitrack.utils import (
    parse_amount,
    parse_date,
    require_positive_amount,
    resolve_account,
    resolve_project,
)
from equitrack.utils.ids import leg_unique_id, new_batch_id


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1500", Decimal("1500")),
            ("$1,500.00", Decimal("1500.00")),
            ("Rs 1,500", Decimal("1500")),
            ("(250.50)", Decimal("-250.50")),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)


class TestRequirePositiveAmount:
    """Tests for require_positive_amount."""

    def test_accepts_strings_and_ints(self):
        assert require_positive_amount("12.5") == Decimal("12.5")
        assert require_positive_amount(3) == Decimal("3")

    @pytest.mark.parametrize("value", [None, "0", "-1", "NaN", "Infinity", "ten"])
    def test_rejects(self, value):
        with pytest.raises(ValidationError):
            require_positive_amount(value)


class TestParseDate:
    """Tests for parse_date."""

    def test_absolute_dates(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)
        assert parse_date("January 15, 2024") == date(2024, 1, 15)

    def test_relative_dates(self):
        today = date.today()

        assert parse_date("today") == today
        assert parse_date(" Yesterday ") == today - timedelta(days=1)
        assert parse_date("end of last year") == date(today.year - 1, 12, 31)

        end_of_last_month = parse_date("end of last month")
        assert end_of_last_month < today.replace(day=1)
        assert (end_of_last_month + timedelta(days=1)).day == 1

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_date("not a date")


class TestIds:
    """Tests for batch and leg identifiers."""

    def test_new_batch_id_is_unique(self):
        first = new_batch_id("dist-cycle")

        assert first.startswith("dist-cycle-")
        assert first != new_batch_id("dist-cycle")

    def test_leg_unique_id(self):
        assert leg_unique_id(LegRole.DIVEST, "eq-move-abc", 4) == "divest-eq-move-abc-4"
        assert leg_unique_id(LegRole.DIST_TRANSFER, "dist-cycle-abc", 2) == "prof-inc-dist-cycle-abc-2"


class TestResolvers:
    """Tests for name/ID resolution."""

    def test_resolve_account(self, account_service):
        bank = account_service.create_account("Main Bank", AccountType.BANK)

        assert resolve_account(account_service, "Main Bank") == bank
        assert resolve_account(account_service, str(bank)) == bank
        assert resolve_account(account_service, bank) == bank

    def test_resolve_account_missing(self, account_service):
        with pytest.raises(NotFoundError):
            resolve_account(account_service, "Nope")
        with pytest.raises(NotFoundError):
            resolve_account(account_service, 42)

    def test_resolve_project(self, project_service):
        tower = project_service.create_project("Tower A")

        assert resolve_project(project_service, "Tower A") == tower
        with pytest.raises(NotFoundError):
            resolve_project(project_service, "99")
