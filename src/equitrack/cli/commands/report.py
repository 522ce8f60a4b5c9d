"""Report commands."""

import click
from equitrack.cli.resolution import (
    format_amount,
    resolve_account_or_exit,
    resolve_project_or_exit,
)
from equitrack.domain.account import AccountService
from equitrack.domain.project import ProjectService
from equitrack.domain.reports import ReportService
from equitrack.utils.date_parser import parse_date


@click.group()
def report_group():
    """Equity reports."""
    pass


@report_group.command("investors")
@click.option("--project", help="Only count transactions of this project (name or ID)")
@click.option("--investor", help="Only show this investor (name or ID)")
@click.option("--as-of", help="Ignore transactions after this date (YYYY-MM-DD or relative)")
@click.pass_context
def investors_report(ctx, project: str | None, investor: str | None, as_of: str | None):
    """Show invested capital, ownership, profit and withdrawals per investor.

    Examples:
        equitrack report investors
        equitrack report investors --project "Tower A" --as-of "end of last year"
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]

    project_id = resolve_project_or_exit(ctx, ProjectService(db), project) if project else None
    investor_id = (
        resolve_account_or_exit(ctx, AccountService(db, settings), investor) if investor else None
    )
    as_of_date = None
    if as_of:
        try:
            as_of_date = parse_date(as_of)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    report = ReportService(db, settings).investor_report(
        project_id=project_id, investor_id=investor_id, as_of=as_of_date
    )
    if not report.rows:
        click.echo("No investor activity found.")
        return

    click.echo(
        f"\n{'Investor':<24} {'Invested':>14} {'Share':>8} {'Profit':>14} {'Withdrawn':>14} {'Net Equity':>14}"
    )
    click.echo("-" * 94)
    for row in report.rows:
        click.echo(
            f"{row.investor_name[:24]:<24} {format_amount(row.equity_invested):>14} "
            f"{row.ownership_percentage:>7.2f}% {format_amount(row.profit_distributed):>14} "
            f"{format_amount(row.withdrawals):>14} {format_amount(row.net_balance):>14}"
        )
    click.echo("-" * 94)
    click.echo(f"Total equity raised:      {format_amount(report.total_equity_raised)}")
    click.echo(f"Total profit distributed: {format_amount(report.total_profit_distributed)}")


def register_commands(cli: click.Group) -> None:
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
