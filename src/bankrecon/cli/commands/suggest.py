"""Party name suggestion command."""

import click

from bankrecon.cli.error_handling import handle_domain_error
from bankrecon.domain.entities import SuggestionStatus, TransactionState
from bankrecon.domain.errors import DomainError
from bankrecon.domain.reconciliation import ReconciliationService
from bankrecon.domain.suggestions import SuggestionService


@click.command("suggest")
@click.argument("transaction_ids", nargs=-1)
@click.option("--all", "include_named", is_flag=True, help="Include pending transactions that already have a party name")
@click.option("--apply", "apply_top", is_flag=True, help="Apply the top suggestion to each transaction")
@click.pass_context
def suggest(ctx, transaction_ids: tuple[str, ...], include_named: bool, apply_top: bool):
    """Suggest party names for pending transactions.

    With no TRANSACTION_IDS, every pending transaction without a party name
    is looked up. A lookup that fails is reported and the others continue.

    Examples:
        bankrecon suggest
        bankrecon suggest txn_1 txn_2 --apply
    """
    context = ctx.obj["context"]
    reconciliation = ReconciliationService(context)
    service = SuggestionService(context)

    try:
        if transaction_ids:
            transactions = [reconciliation.get_transaction(txn_id) for txn_id in transaction_ids]
        else:
            transactions = [
                txn
                for txn in reconciliation.list_transactions(state=TransactionState.PENDING)
                if include_named or not txn.party_name
            ]
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions to look up.")
        return

    applied = 0
    for txn, result in zip(transactions, service.suggest_many(transactions)):
        narration = txn.narration[:60]
        if result.status == SuggestionStatus.READY:
            click.echo(f"{txn.id} | {narration}")
            for rank, name in enumerate(result.suggestions, start=1):
                click.echo(f"    {rank}. {name} ({result.source})")
            if apply_top:
                try:
                    reconciliation.apply_suggestion(txn.id, result.suggestions[0])
                    applied += 1
                except DomainError as e:
                    click.echo(f"    Error: {e}", err=True)
        elif result.status == SuggestionStatus.FAILED:
            click.echo(f"{txn.id} | {narration}\n    no suggestion available (lookup failed)")
        else:
            click.echo(f"{txn.id} | {narration}\n    no suggestion")

    if apply_top:
        click.echo(f"\nApplied {applied} suggestion(s)")


def register_commands(cli):
    """Register suggest command with main CLI."""
    cli.add_command(suggest)
