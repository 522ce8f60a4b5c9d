"""Transaction management commands."""

import click
from equitrack.cli.resolution import (
    format_amount,
    resolve_account_or_exit,
    resolve_project_or_exit,
)
from equitrack.domain.account import AccountService
from equitrack.domain.project import ProjectService
from equitrack.domain.transaction import TransactionService


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--project", help="Project name or ID")
@click.option("--account", help="Account name or ID")
@click.option("--verbose", "-v", is_flag=True, help="Show all columns including unique_id, purpose and batch")
@click.pass_context
def list_transactions(ctx, project: str | None, account: str | None, verbose: bool):
    """View transactions in log order with optional filters."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db, ctx.obj["settings"])

    project_id = None
    if project:
        project_id = resolve_project_or_exit(ctx, ProjectService(db), project)
    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    transactions = service.list_transactions(project_id=project_id, account_id=account_id)
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}
    projects = {p.id: p.name for p in db.list_projects()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Type':<9} {'Amount':>14}  {'Flow':<36} {'Project':<16} {'Description':<20}"
    )
    click.echo("-" * 110)

    for txn in transactions:
        if txn.from_account_id is not None or txn.to_account_id is not None:
            flow = f"{accounts.get(txn.from_account_id, '?')} -> {accounts.get(txn.to_account_id, '?')}"
        else:
            flow = accounts.get(txn.account_id, "Unknown")
        project_name = projects.get(txn.project_id, "-")
        description = (txn.description or "")[:20]

        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {txn.transaction_type.value:<9} "
            f"{format_amount(txn.amount):>14}  {flow[:36]:<36} {project_name[:16]:<16} {description:<20}"
        )
        if verbose:
            purpose = txn.purpose.value if txn.purpose else "-"
            role = txn.leg_role.value if txn.leg_role else "-"
            click.echo(f"       Unique ID: {txn.unique_id}")
            click.echo(f"       Purpose: {purpose} | Leg: {role} | Batch: {txn.batch_id or '-'}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a single transaction.

    Transactions that belong to a batch must be deleted with 'batch delete'.

    Examples:
        equitrack transaction delete 1
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    txn = transaction_service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        transaction_service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
