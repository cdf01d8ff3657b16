"""Party directory commands."""

import click

from bankrecon.cli.error_handling import handle_domain_error
from bankrecon.domain.directory import DirectoryService
from bankrecon.domain.errors import DomainError


@click.group()
def directory_group():
    """Manage the directory of known party names."""
    pass


@directory_group.command("add")
@click.argument("name", metavar="PARTY_NAME")
@click.pass_context
def add_party(ctx, name: str):
    """Add a party name to the directory.

    Examples:
        bankrecon directory add "Sri Balaji Pharmacy"
    """
    service = DirectoryService(ctx.obj["context"])
    try:
        entry_id = service.add_party(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added party '{name.strip()}' (ID: {entry_id})")


@directory_group.command("list")
@click.pass_context
def list_parties(ctx):
    """List directory entries in directory order."""
    entries = ctx.obj["db"].list_directory_entries()
    if not entries:
        click.echo("No parties found.")
        return

    click.echo("\nParties:")
    click.echo("-" * 60)
    for entry in entries:
        click.echo(f"ID: {entry.id:4d} | {entry.name}")


@directory_group.command("remove")
@click.argument("entry_id", type=int)
@click.pass_context
def remove_party(ctx, entry_id: int):
    """Remove a party from the directory."""
    service = DirectoryService(ctx.obj["context"])
    try:
        service.remove_party(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed party {entry_id}")


@directory_group.command("match")
@click.argument("narration")
@click.option("--max-results", type=int, help="Maximum number of names (defaults to BANKRECON_MAX_SUGGESTIONS)")
@click.pass_context
def match(ctx, narration: str, max_results: int | None):
    """Rank directory names against a narration."""
    service = DirectoryService(ctx.obj["context"])
    try:
        names = service.match(narration, max_results)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not names:
        click.echo("No matching parties.")
        return
    for rank, name in enumerate(names, start=1):
        click.echo(f"{rank}. {name}")


def register_commands(cli):
    """Register directory commands with main CLI."""
    cli.add_command(directory_group, name="directory")
