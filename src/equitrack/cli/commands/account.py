"""Account management commands."""

import click
from equitrack.domain.account import AccountService
from equitrack.domain.entities import AccountType


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(["equity", "bank", "other"], case_sensitive=False),
    default="bank",
    show_default=True,
    help="Account type; equity accounts hold one investor's capital",
)
@click.option("--permanent", is_flag=True, help="Mark the account as a permanent system account")
@click.pass_context
def create_account(ctx, name: str, account_type: str, permanent: bool):
    """Create a new account.

    Examples:
        equitrack account create "Alice Capital" --type equity
        equitrack account create "Main Bank"
    """
    db = ctx.obj["db"]
    service = AccountService(db, ctx.obj["settings"])

    try:
        account_id = service.create_account(
            name=name, account_type=AccountType(account_type.upper()), is_permanent=permanent
        )
        click.echo(f"Created {account_type.lower()} account '{name}' (ID: {account_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@account_group.command("list")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(["equity", "bank", "other"], case_sensitive=False),
    help="Only list accounts of this type",
)
@click.pass_context
def list_accounts(ctx, account_type: str | None):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db, ctx.obj["settings"])

    accounts = service.list_accounts()
    if account_type is not None:
        accounts = [acc for acc in accounts if acc.account_type.value == account_type.upper()]
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        role = f" [{acc.system_role}]" if acc.system_role else ""
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type.value:6s}{role}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
