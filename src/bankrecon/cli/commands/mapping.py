"""Learned name mapping administration commands."""

import click

from bankrecon.cli.error_handling import handle_domain_error
from bankrecon.domain.errors import DomainError
from bankrecon.domain.extraction import extract_candidates, resolve_narration
from bankrecon.domain.mapping import MappingService


@click.group()
def mapping_group():
    """Manage learned narration-to-party mappings."""
    pass


@mapping_group.command("list")
@click.option(
    "--sort",
    "order_by",
    type=click.Choice(list(MappingService.SORT_KEYS)),
    default="created",
    show_default=True,
    help="Sort order",
)
@click.pass_context
def list_mappings(ctx, order_by: str):
    """List learned mappings."""
    service = MappingService(ctx.obj["context"])
    mappings = service.list_mappings(order_by=order_by)
    if not mappings:
        click.echo("No mappings found.")
        return

    click.echo("\nMappings:")
    click.echo("-" * 100)
    for m in mappings:
        click.echo(
            f"ID: {m.id:4d} | {m.original_pattern[:40]:40s} -> {m.corrected_name[:30]:30s} "
            f"| confidence {m.confidence:2d}"
        )


@mapping_group.command("resolve")
@click.argument("text")
@click.pass_context
def resolve(ctx, text: str):
    """Resolve a narration (or a bare name) through the mapping store.

    Examples:
        bankrecon mapping resolve "NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875"
    """
    service = MappingService(ctx.obj["context"])
    match = resolve_narration(text, service.resolve)
    if match is not None:
        click.echo(f"{match.corrected_name} (pattern '{match.candidate}', {match.method})")
        return

    corrected = service.resolve(text)
    if corrected:
        click.echo(corrected)
        return

    candidates = extract_candidates(text)
    click.echo("No mapping found.")
    if candidates:
        click.echo(f"  Candidates: {', '.join(candidates)}")


@mapping_group.command("update")
@click.argument("mapping_id", type=int)
@click.option("--pattern", help="New narration pattern")
@click.option("--name", help="New corrected party name")
@click.pass_context
def update_mapping(ctx, mapping_id: int, pattern: str | None, name: str | None):
    """Manually correct a mapping."""
    if pattern is None and name is None:
        click.echo("Error: Nothing to update. Use --pattern and/or --name", err=True)
        ctx.exit(1)

    service = MappingService(ctx.obj["context"])
    try:
        service.update_mapping(mapping_id, original_pattern=pattern, corrected_name=name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated mapping {mapping_id}")


@mapping_group.command("delete")
@click.argument("mapping_id", type=int)
@click.pass_context
def delete_mapping(ctx, mapping_id: int):
    """Delete a mapping."""
    service = MappingService(ctx.obj["context"])
    try:
        service.delete_mapping(mapping_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted mapping {mapping_id}")


def register_commands(cli):
    """Register mapping commands with main CLI."""
    cli.add_command(mapping_group, name="mapping")
