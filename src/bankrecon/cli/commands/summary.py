"""Summary commands."""

import click

from bankrecon.cli.date_filters import period_options, resolve_cli_date_range
from bankrecon.domain.summary import PartySummaryService


@click.group()
def summary_group():
    """Totals per party and dashboard numbers."""
    pass


def _date_range(ctx, start_date, end_date, this_month, this_year, last_month, last_year):
    return resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-month": this_month,
            "this-year": this_year,
            "last-month": last_month,
            "last-year": last_year,
        },
    )


@summary_group.command("parties")
@period_options
@click.pass_context
def parties(ctx, start_date, end_date, this_month, this_year, last_month, last_year):
    """Show totals per party over completed transactions.

    Totals are credits minus debits, largest first.

    Examples:
        bankrecon summary parties
        bankrecon summary parties --last-month
    """
    start, end = _date_range(ctx, start_date, end_date, this_month, this_year, last_month, last_year)
    summaries = PartySummaryService(ctx.obj["context"]).list_parties(start_date=start, end_date=end)

    if not summaries:
        click.echo("No completed transactions with a party name.")
        return

    click.echo("\nParties:")
    click.echo("-" * 70)
    for s in summaries:
        click.echo(f"{s.name[:40]:40s} {s.total_amount:>16,.2f} {s.transaction_count:6d}")


@summary_group.command("stats")
@period_options
@click.pass_context
def stats(ctx, start_date, end_date, this_month, this_year, last_month, last_year):
    """Show dashboard statistics."""
    start, end = _date_range(ctx, start_date, end_date, this_month, this_year, last_month, last_year)
    result = PartySummaryService(ctx.obj["context"]).dashboard_stats(start_date=start, end_date=end)

    click.echo(f"Deposits:     {result.total_deposit_amount:,.2f}")
    click.echo(f"Debits:       {result.total_debits:,.2f}")
    click.echo(f"Net balance:  {result.net_balance:,.2f}")
    click.echo(f"Pending:      {result.pending_amount:,.2f} ({result.pending_count} transactions)")
    click.echo(f"Completed:    {result.completed_amount:,.2f} ({result.completed_count} transactions)")
    click.echo(f"This month:   {result.transactions_this_month} transactions")
    click.echo(f"This year:    {result.transactions_this_year} transactions")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
