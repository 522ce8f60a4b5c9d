"""Project management commands."""

import click
from equitrack.cli.resolution import format_amount
from equitrack.domain.balances import BalanceService
from equitrack.domain.project import ProjectService


@click.group()
def project_group():
    """Manage projects."""
    pass


@project_group.command("create")
@click.argument("name", metavar="PROJECT_NAME")
@click.pass_context
def create_project(ctx, name: str):
    """Create a new project.

    Examples:
        equitrack project create "Tower A"
    """
    service = ProjectService(ctx.obj["db"])

    try:
        project_id = service.create_project(name=name)
        click.echo(f"Created project '{name}' (ID: {project_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@project_group.command("list")
@click.pass_context
def list_projects(ctx):
    """List all projects with their equity balance."""
    db = ctx.obj["db"]
    projects = ProjectService(db).list_projects()
    if not projects:
        click.echo("No projects found.")
        return

    balances = BalanceService(db).get_snapshot().project_balances
    click.echo("\nProjects:")
    click.echo("-" * 60)
    for project in projects:
        balance = format_amount(balances.get(project.id, 0))
        click.echo(f"ID: {project.id:3d} | {project.name:24s} | Equity: {balance:>14s}")


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
