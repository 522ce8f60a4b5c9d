"""Ledger view commands."""

import click
from equitrack.cli.resolution import (
    format_amount,
    resolve_account_or_exit,
    resolve_project_or_exit,
)
from equitrack.domain.account import AccountService
from equitrack.domain.balances import BalanceService
from equitrack.domain.entities import EquityTreeNode, LedgerScope
from equitrack.domain.ledger import LedgerService
from equitrack.domain.project import ProjectService


@click.group()
def ledger_group():
    """View equity ledgers and balances."""
    pass


@ledger_group.command("view")
@click.option("--project", help="Show the ledger of one project (name or ID)")
@click.option("--investor", help="Show the ledger of one investor (name or ID)")
@click.option("--within", help="Restrict an investor ledger to one project (name or ID)")
@click.pass_context
def view_ledger(ctx, project: str | None, investor: str | None, within: str | None):
    """Show an equity ledger with a running balance.

    Without options, all investors' equity transactions are shown. Amounts
    and balances are rounded to the configured rounding unit.

    Examples:
        equitrack ledger view
        equitrack ledger view --project "Tower A"
        equitrack ledger view --investor "Alice Capital" --within "Tower A"
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    project_service = ProjectService(db)

    if project and investor:
        click.echo("Error: --project and --investor cannot be combined; use --within", err=True)
        ctx.exit(1)
    if within and not investor:
        click.echo("Error: --within requires --investor", err=True)
        ctx.exit(1)

    if investor:
        investor_id = resolve_account_or_exit(ctx, AccountService(db, settings), investor)
        parent_id = resolve_project_or_exit(ctx, project_service, within) if within else None
        scope = LedgerScope.investor(investor_id, parent_project_id=parent_id)
    elif project:
        scope = LedgerScope.project(resolve_project_or_exit(ctx, project_service, project))
    else:
        scope = LedgerScope.all_investors()

    rows = LedgerService(db, settings).get_ledger(scope)
    if not rows:
        click.echo("No equity transactions found.")
        return

    click.echo(f"\n{'Date':<12} {'Type':<16} {'Project':<16} {'Deposit':>12} {'Withdrawal':>12} {'Balance':>14}  Info")
    click.echo("-" * 110)
    for row in rows:
        deposit = format_amount(row.amount) if row.is_deposit else ""
        withdrawal = format_amount(row.amount) if row.is_withdrawal else ""
        click.echo(
            f"{str(row.transaction.date):<12} {row.payment_type:<16} {row.project_name[:16]:<16} "
            f"{deposit:>12} {withdrawal:>12} {format_amount(row.balance):>14}  {row.info}"
        )
    click.echo("-" * 110)
    click.echo(f"Closing balance: {format_amount(rows[-1].balance)}")


def _echo_node(node: EquityTreeNode, indent: int) -> None:
    label = f"{'    ' * indent}{node.name}"
    click.echo(f"{label:<44} {format_amount(node.amount):>16}")
    for child in node.children:
        _echo_node(child, indent + 1)


@ledger_group.command("tree")
@click.pass_context
def equity_tree(ctx):
    """Show equity balances per investor and per project."""
    tree = BalanceService(ctx.obj["db"]).get_equity_tree()
    click.echo("")
    for node in tree:
        _echo_node(node, 0)


def register_commands(cli: click.Group) -> None:
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
