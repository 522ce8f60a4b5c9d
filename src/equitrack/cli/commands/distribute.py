"""Profit distribution commands."""

from decimal import Decimal

import click
from equitrack.cli.error_handling import handle_domain_error
from equitrack.cli.resolution import (
    format_amount,
    parse_amount_or_exit,
    parse_date_or_today,
    resolve_project_or_exit,
)
from equitrack.domain.distribution import DistributionService, default_cycle_name
from equitrack.domain.entities import DistributionPlan
from equitrack.domain.errors import DomainError
from equitrack.domain.project import ProjectService


@click.group()
def distribute_group():
    """Plan and commit profit distributions."""
    pass


def _plan_or_exit(ctx, project: str, pool: str | None):
    db = ctx.obj["db"]
    project_id = resolve_project_or_exit(ctx, ProjectService(db), project)
    pool_amount = parse_amount_or_exit(ctx, pool, "pool amount") if pool is not None else None
    service = DistributionService(db, ctx.obj["settings"])
    try:
        return service, project_id, service.plan(project_id, pool_amount=pool_amount)
    except DomainError as e:
        handle_domain_error(ctx, e)


def _echo_plan(db, plans: list[DistributionPlan]) -> None:
    names = {acc.id: acc.name for acc in db.list_accounts()}
    click.echo(f"\n{'Investor':<24} {'Capital':>14} {'Share':>8} {'Profit Share':>14} {'New Balance':>14}")
    click.echo("-" * 80)
    for plan in plans:
        share = f"{plan.share_percentage * 100:.2f}%"
        click.echo(
            f"{names.get(plan.investor_id, '?')[:24]:<24} {format_amount(plan.principal):>14} "
            f"{share:>8} {format_amount(plan.profit_share):>14} {format_amount(plan.new_equity_balance):>14}"
        )
    click.echo("-" * 80)
    total = sum((plan.profit_share for plan in plans), Decimal("0"))
    click.echo(f"{'TOTAL':<24} {'':>14} {'':>8} {format_amount(total):>14}")


@distribute_group.command("plan")
@click.argument("project")
@click.option("--pool", help="Amount to distribute (defaults to the project's available profit)")
@click.pass_context
def plan_distribution(ctx, project: str, pool: str | None):
    """Show how a profit pool would be split across PROJECT's investors.

    Nothing is written.

    Examples:
        equitrack distribute plan "Tower A"
        equitrack distribute plan "Tower A" --pool 3000
    """
    service, project_id, plans = _plan_or_exit(ctx, project, pool)
    financials = service.financials(project_id)

    click.echo(f"Income:       {format_amount(financials.income):>14}")
    click.echo(f"Expense:      {format_amount(financials.expense):>14}")
    click.echo(f"Net:          {format_amount(financials.net_operating):>14}")
    click.echo(f"Distributed:  {format_amount(financials.distributed):>14}")
    click.echo(f"Available:    {format_amount(financials.available):>14}")
    _echo_plan(ctx.obj["db"], plans)


@distribute_group.command("commit")
@click.argument("project")
@click.option("--pool", help="Amount to distribute (defaults to the project's available profit)")
@click.option("--cycle", help="Cycle name used in descriptions (defaults to 'Cycle <year>')")
@click.option("--date", "date_str", help="Transaction date (YYYY-MM-DD or 'today')")
@click.option("--batch-id", help="Retry key; a batch that already exists is not written again")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def commit_distribution(
    ctx, project: str, pool: str | None, cycle: str | None, date_str: str | None, batch_id: str | None, yes: bool
):
    """Distribute profit to PROJECT's investors as one linked batch.

    Examples:
        equitrack distribute commit "Tower A" --pool 3000 --cycle "Q1 2024"
    """
    service, project_id, plans = _plan_or_exit(ctx, project, pool)
    on_date = parse_date_or_today(ctx, date_str)
    cycle_name = cycle or default_cycle_name(on_date)

    _echo_plan(ctx.obj["db"], plans)
    if not yes and not click.confirm(f"Commit distribution '{cycle_name}'?"):
        click.echo("Distribution cancelled.")
        return

    try:
        committed = service.commit(
            project_id, plans, cycle_name=cycle_name, on_date=on_date, batch_id=batch_id
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Committed distribution '{cycle_name}' (batch: {committed})")


def register_commands(cli: click.Group) -> None:
    """Register distribution commands with main CLI."""
    cli.add_command(distribute_group, name="distribute")
