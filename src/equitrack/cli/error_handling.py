"""CLI error handling helpers."""

import click

from equitrack.domain.errors import AmbiguousBatchError, DomainError, StoreWriteError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Echo a domain error to stderr and exit with status 1.

    Write failures and unrecognised batches get a hint on the following line.
    """
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, StoreWriteError):
        click.echo("No transactions were written.", err=True)
    elif isinstance(error, AmbiguousBatchError):
        click.echo("Inspect the batch with 'equitrack transaction list -v'.", err=True)
    ctx.exit(1)
