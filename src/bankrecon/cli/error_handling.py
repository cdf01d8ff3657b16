"""CLI error handling helpers."""

import click

from bankrecon.domain.errors import DomainError, DuplicateReferenceError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, DuplicateReferenceError):
        conflict = error.conflict
        click.echo(
            f"  Conflicting transaction: {conflict.transaction_id} | {conflict.date} | "
            f"{conflict.amount:,.2f} | {conflict.party_name or 'N/A'}",
            err=True,
        )
    elif getattr(error, "retryable", False):
        click.echo("  The record store could not be reached; try again.", err=True)
    ctx.exit(1)
