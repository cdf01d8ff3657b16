"""Main CLI entry point."""

import click

from bankrecon.config import load_settings
from bankrecon.database.factories import create_sqlite_database
from bankrecon.domain.context import ReconContext
from bankrecon.logging_config import configure_logging

# Import and register all commands at module level
from bankrecon.cli.commands import (
    directory,
    import_cmd,
    mapping,
    suggest,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BANKRECON_DB_PATH environment variable)",
    envvar="BANKRECON_DB_PATH",
)
@click.option(
    "--log-level",
    help="Logging level such as INFO or DEBUG (overrides BANKRECON_LOG_LEVEL)",
    envvar="BANKRECON_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Bankrecon - Bank statement reconciliation.

    Import bank statements, get party name suggestions learned from earlier
    confirmations, and track each transaction until it is entered in the
    bookkeeping system.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = load_settings().with_overrides(db_path=db_path, log_level=log_level)
            configure_logging(settings.log_level)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

        db = create_sqlite_database(database_path=settings.resolved_db_path())
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings
        ctx.obj["context"] = ReconContext(db, settings=settings)


# Register all commands
import_cmd.register_commands(cli)
transaction.register_commands(cli)
suggest.register_commands(cli)
mapping.register_commands(cli)
directory.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
