"""Batch inspection, edit and delete commands."""

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
from equitrack.domain.batch import BatchService, find_batch_members
from equitrack.domain.entities import BatchEdit
from equitrack.domain.errors import DomainError
from equitrack.domain.project import ProjectService


@click.group()
def batch_group():
    """Inspect, edit and delete linked transaction batches."""
    pass


@batch_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_batch(ctx, transaction_id: int):
    """Show the batch a transaction belongs to."""
    db = ctx.obj["db"]
    try:
        batch = BatchService(db).resolve(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    names = {acc.id: acc.name for acc in db.list_accounts()}
    roles = {txn.id: role.value for role, txn in batch.legs.items()}
    click.echo(f"Batch: {batch.main.batch_id or '-'}")
    click.echo(f"Mode:  {batch.mode.value}")
    click.echo("-" * 90)
    for txn in batch.all_transactions:
        flow = names.get(txn.account_id, "?")
        if txn.from_account_id is not None or txn.to_account_id is not None:
            flow = f"{names.get(txn.from_account_id, '?')} -> {names.get(txn.to_account_id, '?')}"
        marker = "*" if txn.id == batch.main.id else " "
        click.echo(
            f"{marker}{txn.id:<5} {txn.transaction_type.value:<9} {format_amount(txn.amount):>14}  "
            f"{flow[:32]:<32} {roles.get(txn.id, ''):<14} {txn.description or ''}"
        )


@batch_group.command("edit")
@click.argument("transaction_id", type=int)
@click.option("--amount", help="New amount for every leg")
@click.option("--date", "date_str", help="New date for every leg")
@click.option("--description", help="New description")
@click.option("--project", help="New project (the source project of an equity move)")
@click.option("--to-project", help="New destination project of an equity move")
@click.option("--investor", help="New investor account")
@click.option("--bank", help="New bank account of an investment or withdrawal")
@click.pass_context
def edit_batch(
    ctx,
    transaction_id: int,
    amount: str | None,
    date_str: str | None,
    description: str | None,
    project: str | None,
    to_project: str | None,
    investor: str | None,
    bank: str | None,
):
    """Edit a transaction and all of its linked legs together.

    Examples:
        equitrack batch edit 12 --amount 1500
        equitrack batch edit 12 --to-project "Tower C"
    """
    db = ctx.obj["db"]
    account_service = AccountService(db, ctx.obj["settings"])
    project_service = ProjectService(db)

    edit = BatchEdit(
        amount=parse_amount_or_exit(ctx, amount) if amount is not None else None,
        date=parse_date_or_today(ctx, date_str) if date_str is not None else None,
        description=description,
        project_id=resolve_project_or_exit(ctx, project_service, project) if project else None,
        target_project_id=(
            resolve_project_or_exit(ctx, project_service, to_project) if to_project else None
        ),
        investor_id=resolve_account_or_exit(ctx, account_service, investor) if investor else None,
        bank_account_id=resolve_account_or_exit(ctx, account_service, bank) if bank else None,
    )
    if edit == BatchEdit():
        click.echo("Error: Nothing to change", err=True)
        ctx.exit(1)

    try:
        updated = BatchService(db).edit(transaction_id, edit)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated {len(updated)} transaction(s)")


@batch_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_batch(ctx, transaction_id: int, yes: bool):
    """Delete a transaction together with every transaction in its batch."""
    db = ctx.obj["db"]
    try:
        main, siblings = find_batch_members(transaction_id, db.list_transactions())
    except DomainError as e:
        handle_domain_error(ctx, e)

    count = len(siblings) + 1
    if not yes and not click.confirm(f"Delete {count} linked transaction(s) of batch {main.batch_id or '-'}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        deleted = BatchService(db).delete(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {len(deleted)} transaction(s)")


def register_commands(cli: click.Group) -> None:
    """Register batch commands with main CLI."""
    cli.add_command(batch_group, name="batch")
