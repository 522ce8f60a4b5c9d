"""Commands recording single equity entries."""

import click
from equitrack.cli.resolution import (
    format_amount,
    parse_amount_or_exit,
    parse_date_or_today,
    resolve_account_or_exit,
    resolve_project_or_exit,
)
from equitrack.domain.account import AccountService
from equitrack.domain.project import ProjectService
from equitrack.domain.transaction import TransactionService


def _entry_options(func):
    func = click.option("--description", help="Transaction description")(func)
    func = click.option(
        "--date", "date_str", help="Transaction date (YYYY-MM-DD or 'today', 'yesterday')"
    )(func)
    func = click.option("--bank", required=True, help="Bank account name or ID")(func)
    func = click.argument("amount")(func)
    func = click.argument("project")(func)
    func = click.argument("investor")(func)
    return func


def _resolve_entry(ctx, investor: str, project: str, bank: str, amount: str, date_str: str | None):
    db = ctx.obj["db"]
    account_service = AccountService(db, ctx.obj["settings"])
    investor_id = resolve_account_or_exit(ctx, account_service, investor)
    bank_id = resolve_account_or_exit(ctx, account_service, bank)
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)
    value = parse_amount_or_exit(ctx, amount)
    on_date = parse_date_or_today(ctx, date_str)
    return investor_id, project_id, bank_id, value, on_date


@click.command("invest")
@_entry_options
@click.pass_context
def invest(ctx, investor: str, project: str, amount: str, bank: str, date_str: str | None, description: str | None):
    """Record an investment from INVESTOR into PROJECT.

    Examples:
        equitrack invest "Alice Capital" "Tower A" 10000 --bank "Main Bank"
    """
    investor_id, project_id, bank_id, value, on_date = _resolve_entry(
        ctx, investor, project, bank, amount, date_str
    )
    try:
        txn_id = TransactionService(ctx.obj["db"]).record_investment(
            investor_id, project_id, bank_id, value, on_date, description
        )
        click.echo(f"Recorded investment of {format_amount(value)} (ID: {txn_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@click.command("withdraw")
@_entry_options
@click.pass_context
def withdraw(ctx, investor: str, project: str, amount: str, bank: str, date_str: str | None, description: str | None):
    """Record capital returned from PROJECT to INVESTOR.

    Examples:
        equitrack withdraw "Alice Capital" "Tower A" 2500 --bank "Main Bank"
    """
    investor_id, project_id, bank_id, value, on_date = _resolve_entry(
        ctx, investor, project, bank, amount, date_str
    )
    try:
        txn_id = TransactionService(ctx.obj["db"]).record_withdrawal(
            investor_id, project_id, bank_id, value, on_date, description
        )
        click.echo(f"Recorded withdrawal of {format_amount(value)} (ID: {txn_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@click.command("profit")
@click.argument("investor")
@click.argument("amount")
@click.option("--project", help="Project name or ID")
@click.option("--date", "date_str", help="Transaction date (YYYY-MM-DD or 'today', 'yesterday')")
@click.option("--description", help="Transaction description")
@click.pass_context
def profit(ctx, investor: str, amount: str, project: str | None, date_str: str | None, description: str | None):
    """Book profit directly as income into INVESTOR's equity account."""
    db = ctx.obj["db"]
    investor_id = resolve_account_or_exit(ctx, AccountService(db, ctx.obj["settings"]), investor)
    project_id = None
    if project is not None:
        project_id = resolve_project_or_exit(ctx, ProjectService(db), project)
    value = parse_amount_or_exit(ctx, amount)
    on_date = parse_date_or_today(ctx, date_str)

    try:
        txn_id = TransactionService(db).record_profit_income(
            investor_id, project_id, value, on_date, description
        )
        click.echo(f"Recorded profit of {format_amount(value)} (ID: {txn_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli: click.Group) -> None:
    """Register entry commands with main CLI."""
    cli.add_command(invest)
    cli.add_command(withdraw)
    cli.add_command(profit)
