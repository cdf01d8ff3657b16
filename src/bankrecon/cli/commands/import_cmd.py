"""Statement CSV import command."""

import click

from bankrecon.domain.csv_import import CSVImportService
from bankrecon.domain.errors import DomainError


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.pass_context
def import_csv(ctx, csv_file: str):
    """Import transactions from a statement CSV file.

    The header must contain date, amount, type and narration. The optional
    columns id, bank_reference and party_name are used when present; rows that
    arrive with a party name teach the name mapping store.

    Examples:
        bankrecon import statement.csv
    """
    service = CSVImportService(ctx.obj["context"])

    try:
        result = service.import_csv(csv_file)
    except (DomainError, ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} transactions")
    click.echo(f"  Skipped: {result.skipped} duplicates")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
