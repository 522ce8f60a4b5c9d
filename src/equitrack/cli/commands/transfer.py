"""Equity transfer commands."""

from decimal import Decimal

import click
from equitrack.cli.error_handling import handle_domain_error
from equitrack.cli.resolution import (
    format_amount,
    parse_amount_or_exit,
    parse_date_or_today,
    resolve_account_or_exit,
    resolve_project_or_exit,
)
from equitrack.domain.account import AccountService
from equitrack.domain.entities import TransferRow, TransferType
from equitrack.domain.errors import DomainError
from equitrack.domain.project import ProjectService
from equitrack.domain.transfer import TransferService, clamp_transfer_amount


@click.group()
def transfer_group():
    """Move investor equity between projects or pay it out."""
    pass


def _echo_rows(db, rows: list[TransferRow]) -> None:
    names = {acc.id: acc.name for acc in db.list_accounts()}
    click.echo(f"\n{'Investor':<24} {'Equity':>14} {'Transfer':>14}")
    click.echo("-" * 56)
    for row in rows:
        amount = format_amount(clamp_transfer_amount(row)) if row.selected else "excluded"
        click.echo(
            f"{names.get(row.investor_id, '?')[:24]:<24} {format_amount(row.current_equity):>14} {amount:>14}"
        )


@transfer_group.command("plan")
@click.argument("source")
@click.pass_context
def plan_transfer(ctx, source: str):
    """Show each investor's transferable equity in SOURCE project."""
    db = ctx.obj["db"]
    project_id = resolve_project_or_exit(ctx, ProjectService(db), source)
    try:
        rows = TransferService(db, ctx.obj["settings"]).plan(project_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    _echo_rows(db, rows)


@transfer_group.command("commit")
@click.argument("source")
@click.option("--to", "dest", help="Destination project (name or ID) for an equity move")
@click.option("--payout-account", help="Bank account (name or ID) paying the capital out")
@click.option(
    "--amount",
    "amounts",
    multiple=True,
    metavar="INVESTOR=AMOUNT",
    help="Transfer only part of an investor's equity (repeatable)",
)
@click.option("--exclude", multiple=True, metavar="INVESTOR", help="Leave an investor out (repeatable)")
@click.option("--date", "date_str", help="Transaction date (YYYY-MM-DD or 'today')")
@click.option("--batch-id", help="Retry key; a batch that already exists is not written again")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def commit_transfer(
    ctx,
    source: str,
    dest: str | None,
    payout_account: str | None,
    amounts: tuple[str, ...],
    exclude: tuple[str, ...],
    date_str: str | None,
    batch_id: str | None,
    yes: bool,
):
    """Move equity out of SOURCE project into another project or pay it out.

    Amounts above an investor's equity are capped at that equity.

    Examples:
        equitrack transfer commit "Tower A" --to "Tower B"
        equitrack transfer commit "Tower A" --payout-account "Main Bank" --amount "Alice Capital=500"
    """
    if (dest is None) == (payout_account is None):
        click.echo("Error: Specify exactly one of --to or --payout-account", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    project_service = ProjectService(db)
    account_service = AccountService(db, settings)
    service = TransferService(db, settings)

    source_id = resolve_project_or_exit(ctx, project_service, source)
    dest_id = resolve_project_or_exit(ctx, project_service, dest) if dest else None
    payout_id = resolve_account_or_exit(ctx, account_service, payout_account) if payout_account else None
    on_date = parse_date_or_today(ctx, date_str)

    try:
        rows = service.plan(source_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    rows_by_investor = {row.investor_id: row for row in rows}

    def _row_for(investor: str) -> TransferRow:
        investor_id = resolve_account_or_exit(ctx, account_service, investor)
        if investor_id not in rows_by_investor:
            click.echo(f"Error: Investor '{investor}' has no equity in the source project", err=True)
            ctx.exit(1)
        return rows_by_investor[investor_id]

    for pair in amounts:
        investor, sep, value = pair.rpartition("=")
        if not sep or not investor:
            click.echo(f"Error: Invalid --amount '{pair}', expected INVESTOR=AMOUNT", err=True)
            ctx.exit(1)
        _row_for(investor).transfer_amount = parse_amount_or_exit(ctx, value)
    for investor in exclude:
        _row_for(investor).selected = False

    transfer_type = TransferType.PROJECT if dest_id is not None else TransferType.PAYOUT
    _echo_rows(db, rows)
    total = sum((clamp_transfer_amount(row) for row in rows if row.selected), Decimal("0"))
    if not yes and not click.confirm(f"Commit {transfer_type.value.lower()} transfer of {format_amount(total)}?"):
        click.echo("Transfer cancelled.")
        return

    try:
        committed = service.commit(
            rows,
            transfer_type,
            source_id,
            dest_project_id=dest_id,
            payout_account_id=payout_id,
            on_date=on_date,
            batch_id=batch_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Committed {transfer_type.value.lower()} transfer (batch: {committed})")


def register_commands(cli: click.Group) -> None:
    """Register transfer commands with main CLI."""
    cli.add_command(transfer_group, name="transfer")
