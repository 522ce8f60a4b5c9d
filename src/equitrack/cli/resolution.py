"""CLI helpers for resolving names and parsing option values.

Each helper echoes the error and exits instead of raising, which keeps error
messaging and exit behavior consistent across commands.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import click

from equitrack.domain.account import AccountService
from equitrack.domain.project import ProjectService
from equitrack.utils.amount_parser import parse_amount
from equitrack.utils.date_parser import parse_date
from equitrack.utils.resolvers import resolve_account, resolve_project


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(account_service, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_project_or_exit(
    ctx: click.Context, project_service: ProjectService, project: str | int
) -> int:
    """Resolve project name or ID, or exit with a CLI error."""
    try:
        return resolve_project(project_service, project)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, amount: str, label: str = "amount") -> Decimal:
    """Parse an amount option, or exit with a CLI error."""
    try:
        return parse_amount(amount)
    except ValueError as exc:
        click.echo(f"Error: Invalid {label}: {exc}", err=True)
        ctx.exit(1)


def parse_date_or_today(ctx: click.Context, value: str | None) -> date:
    """Parse a date option (defaulting to today), or exit with a CLI error."""
    if value is None:
        return date.today()
    try:
        return parse_date(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid date format: {exc}", err=True)
        ctx.exit(1)


def format_amount(amount: Decimal) -> str:
    """Format an amount with thousands separators and two decimals."""
    return f"{amount:,.2f}"
