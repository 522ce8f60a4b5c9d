"""Main CLI entry point."""

import click
from equitrack.config import load_settings
from equitrack.database.factories import create_sqlite_database
from equitrack.logging_setup import setup_logging

# Import and register all commands at module level
from equitrack.cli.commands import (
    account,
    project,
    entry,
    transaction,
    ledger,
    distribute,
    transfer,
    batch,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides EQUITRACK_DB_PATH environment variable)",
    envvar="EQUITRACK_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Equitrack - Investor equity ledger.

    Record investments and withdrawals per project, view reconciled equity
    ledgers, and run profit distributions and equity transfers as linked
    batches.
    """
    ctx.ensure_object(dict)
    setup_logging(verbose=verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = load_settings()
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

        db = create_sqlite_database(database_path=db_path, settings=settings)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
project.register_commands(cli)
entry.register_commands(cli)
transaction.register_commands(cli)
ledger.register_commands(cli)
distribute.register_commands(cli)
transfer.register_commands(cli)
batch.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
