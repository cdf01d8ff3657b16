"""Transaction reconciliation commands."""

import click

from bankrecon.cli.date_filters import period_options, resolve_cli_date_range
from bankrecon.cli.error_handling import handle_domain_error
from bankrecon.domain.csv_import import parse_kind
from bankrecon.domain.entities import (
    SuggestionStatus,
    Transaction,
    TransactionCandidate,
    TransactionKind,
    TransactionState,
)
from bankrecon.domain.errors import DomainError
from bankrecon.domain.ingestion import IngestionService
from bankrecon.domain.reconciliation import ReconciliationService, derive_flags, primary_state
from bankrecon.domain.suggestions import SuggestionService
from bankrecon.utils.amount_parser import parse_magnitude
from bankrecon.utils.date_parser import parse_date

STATE_CHOICES = [state.value for state in TransactionState]
KIND_CHOICES = [kind.value for kind in TransactionKind]


def format_flags(transaction: Transaction) -> str:
    flags = derive_flags(transaction)
    labels = [
        name
        for name, is_set in (
            ("pending", flags.pending),
            ("completed", flags.completed),
            ("hold", flags.hold),
            ("self-transfer", flags.self_transfer),
        )
        if is_set
    ]
    return ", ".join(labels)


def echo_transaction(transaction: Transaction) -> None:
    """Print every field of a transaction."""
    click.echo(f"\nTransaction ID: {transaction.id}")
    click.echo(f"  Date: {transaction.date}")
    click.echo(f"  Amount: {transaction.amount:,.2f} ({transaction.kind.value})")
    click.echo(f"  Narration: {transaction.narration}")
    if transaction.bank_reference:
        click.echo(f"  Bank reference: {transaction.bank_reference}")
    click.echo(f"  Party: {transaction.party_name or '-'}")
    click.echo(f"  External reference: {transaction.external_reference or '-'}")
    click.echo(f"  Added to bookkeeping: {'yes' if transaction.added_to_external_system else 'no'}")
    click.echo(f"  State: {format_flags(transaction)}")
    if transaction.notes:
        click.echo(f"  Notes: {transaction.notes}")


@click.group()
def transaction_group():
    """Reconcile transactions."""
    pass


@transaction_group.command("list")
@click.option("--state", type=click.Choice(STATE_CHOICES), help="Only transactions in this state")
@click.option("--type", "kind", type=click.Choice(KIND_CHOICES), help="Only credits or debits")
@click.option("--search", help="Text to look for in narration, party or references")
@period_options
@click.option("--oldest-first", is_flag=True, help="Sort by date ascending")
@click.option("--verbose", "-v", is_flag=True, help="Show every field of each transaction")
@click.pass_context
def list_transactions(
    ctx,
    state: str | None,
    kind: str | None,
    search: str | None,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    last_month: bool,
    last_year: bool,
    oldest_first: bool,
    verbose: bool,
):
    """View transactions with optional filters.

    Examples:
        bankrecon transaction list --state pending
        bankrecon transaction list --type credit --this-month
        bankrecon transaction list --search "medi surge" -v
    """
    start, end = resolve_cli_date_range(
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
    service = ReconciliationService(ctx.obj["context"])

    transactions = service.list_transactions(
        state=TransactionState(state) if state else None,
        kind=TransactionKind(kind) if kind else None,
        start_date=start,
        end_date=end,
        search=search,
        newest_first=not oldest_first,
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    if verbose:
        for txn in transactions:
            echo_transaction(txn)
        return

    click.echo("-" * 120)
    click.echo(
        f"{'ID':<38} {'Date':<12} {'Amount':>14} {'Type':<7} {'State':<14} {'Party':<30}"
    )
    click.echo("-" * 120)
    for txn in transactions:
        click.echo(
            f"{txn.id:<38} {str(txn.date):<12} {txn.amount:>14,.2f} {txn.kind.value:<7} "
            f"{primary_state(txn).value:<14} {(txn.party_name or '-')[:30]:<30}"
        )

    credits = sum(txn.amount for txn in transactions if txn.kind == TransactionKind.CREDIT)
    debits = sum(txn.amount for txn in transactions if txn.kind == TransactionKind.DEBIT)
    click.echo("-" * 120)
    click.echo(f"TOTAL  Credits: {credits:,.2f} | Debits: {debits:,.2f} | Count: {len(transactions)}")


@transaction_group.command("show")
@click.argument("transaction_id")
@click.pass_context
def show_transaction(ctx, transaction_id: str):
    """Show a transaction with its state and name suggestions."""
    context = ctx.obj["context"]
    service = ReconciliationService(context)
    try:
        transaction = service.get_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    echo_transaction(transaction)
    result = SuggestionService(context).suggest(transaction)
    if result.status == SuggestionStatus.READY:
        click.echo(f"  Suggestions ({result.source}): {', '.join(result.suggestions)}")


@transaction_group.command("add")
@click.option(
    "--date",
    "date_str",
    required=True,
    help="Transaction date (YYYY-MM-DD, DD/MM/YYYY or relative like 'today')",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 1500.00)")
@click.option("--type", "kind", required=True, help="credit or debit (cr/dr also accepted)")
@click.option("--narration", required=True, help="Narration as printed on the statement")
@click.option("--bank-reference", help="Bank's own reference for the transaction")
@click.option("--party", help="Party name, if already known")
@click.option("--id", "source_id", help="Transaction ID (auto-generated if not provided)")
@click.pass_context
def add_transaction(
    ctx,
    date_str: str,
    amount: str,
    kind: str,
    narration: str,
    bank_reference: str | None,
    party: str | None,
    source_id: str | None,
):
    """Add a single statement record manually.

    The record goes through the same checks as an import: a record that is
    already stored is skipped, and a party name teaches the mapping store.

    Examples:
        bankrecon transaction add --date 2025-11-04 --amount 1500.00 --type credit \\
            --narration "NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875"
    """
    try:
        txn_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_magnitude(amount)
        txn_kind = parse_kind(kind)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    candidate = TransactionCandidate(
        date=txn_date,
        amount=txn_amount,
        kind=txn_kind,
        narration=narration,
        bank_reference=bank_reference,
        id=source_id,
        party_name=party,
    )
    result = IngestionService(ctx.obj["context"]).ingest([candidate])

    if result.errors:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)
    if not result.transaction_ids:
        click.echo("Error: Transaction already exists; nothing added", err=True)
        ctx.exit(1)

    transaction = ReconciliationService(ctx.obj["context"]).get_transaction(result.transaction_ids[0])
    click.echo(f"Added transaction {transaction.id}")
    echo_transaction(transaction)


@transaction_group.command("confirm")
@click.argument("transaction_id")
@click.option("--reference", help="External (bookkeeping) reference; defaults to the stored one")
@click.pass_context
def confirm_transaction(ctx, transaction_id: str, reference: str | None):
    """Mark a transaction as entered in the bookkeeping system.

    Examples:
        bankrecon transaction confirm txn_1 --reference INV-204
    """
    service = ReconciliationService(ctx.obj["context"])
    try:
        transaction = service.confirm(transaction_id, reference)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Confirmed transaction {transaction.id} as {transaction.party_name} "
        f"(reference {transaction.external_reference})"
    )


@transaction_group.command("cancel")
@click.argument("transaction_id")
@click.pass_context
def cancel_transaction(ctx, transaction_id: str):
    """Return a completed transaction to pending."""
    service = ReconciliationService(ctx.obj["context"])
    try:
        transaction = service.cancel(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Cancelled confirmation of transaction {transaction.id} ({format_flags(transaction)})")


def _flag_command(name: str, method: str, message: str, help_text: str):
    @click.pass_context
    def command(ctx, transaction_id: str):
        service = ReconciliationService(ctx.obj["context"])
        try:
            transaction = getattr(service, method)(transaction_id)
        except DomainError as e:
            handle_domain_error(ctx, e)
        click.echo(f"{message} {transaction.id} ({format_flags(transaction)})")

    command.__doc__ = help_text
    return transaction_group.command(name)(click.argument("transaction_id")(command))


_flag_command("hold", "set_hold", "Put on hold:", "Put a transaction on hold.")
_flag_command("unhold", "unhold", "Released hold on", "Release a transaction from hold.")
_flag_command(
    "self-transfer", "set_self_transfer", "Marked as self transfer:", "Mark a transaction as a self transfer."
)
_flag_command(
    "unset-self-transfer",
    "unset_self_transfer",
    "Cleared self transfer on",
    "Clear the self-transfer mark of a transaction.",
)


@transaction_group.command("party")
@click.argument("transaction_id")
@click.argument("name")
@click.pass_context
def set_party(ctx, transaction_id: str, name: str):
    """Set the party name of a transaction and learn from its narration.

    Use an empty NAME to clear the party name.

    Examples:
        bankrecon transaction party txn_1 "Mercure Medi Surge Pvt Ltd"
        bankrecon transaction party txn_1 ""
    """
    service = ReconciliationService(ctx.obj["context"])
    try:
        transaction, report = service.edit_party_name(transaction_id, name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if transaction.party_name:
        click.echo(f"Set party of transaction {transaction.id} to '{transaction.party_name}'")
    else:
        click.echo(f"Cleared party of transaction {transaction.id}")
    if report is not None:
        click.echo(f"  Learned {len(report.learned_patterns)} pattern(s)")
        if report.failed_patterns:
            click.echo(f"  Could not learn {len(report.failed_patterns)} pattern(s)", err=True)


@transaction_group.command("apply-suggestion")
@click.argument("transaction_id")
@click.argument("name", required=False)
@click.pass_context
def apply_suggestion(ctx, transaction_id: str, name: str | None):
    """Accept a suggested party name.

    Without NAME the top suggestion is used.
    """
    context = ctx.obj["context"]
    service = ReconciliationService(context)
    try:
        if name is None:
            result = SuggestionService(context).suggest(service.get_transaction(transaction_id))
            if result.status != SuggestionStatus.READY:
                click.echo(f"Error: No suggestion available for transaction {transaction_id}", err=True)
                ctx.exit(1)
            name = result.suggestions[0]
        transaction, report = service.apply_suggestion(transaction_id, name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Set party of transaction {transaction.id} to '{transaction.party_name}'")
    if report is not None:
        click.echo(f"  Learned {len(report.learned_patterns)} pattern(s)")


@transaction_group.command("reference")
@click.argument("transaction_id")
@click.argument("reference")
@click.pass_context
def set_reference(ctx, transaction_id: str, reference: str):
    """Set the external reference without changing the state flags."""
    service = ReconciliationService(ctx.obj["context"])
    try:
        transaction = service.edit_external_reference(transaction_id, reference)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Set reference of transaction {transaction.id} to '{transaction.external_reference}'")


@transaction_group.command("added")
@click.argument("transaction_id")
@click.option("--unchecked", is_flag=True, help="Untick instead (clears the external reference)")
@click.pass_context
def set_added(ctx, transaction_id: str, unchecked: bool):
    """Tick the "added to bookkeeping" box of a transaction."""
    service = ReconciliationService(ctx.obj["context"])
    try:
        transaction = service.set_added_to_external_system(transaction_id, not unchecked)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction.id} ({format_flags(transaction)})")


@transaction_group.command("notes")
@click.argument("transaction_id")
@click.argument("notes")
@click.pass_context
def set_notes(ctx, transaction_id: str, notes: str):
    """Replace the notes of a transaction (empty string clears them)."""
    service = ReconciliationService(ctx.obj["context"])
    try:
        transaction = service.update_notes(transaction_id, notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated notes of transaction {transaction.id}")


@transaction_group.command("check-reference")
@click.argument("reference")
@click.option("--exclude", "exclude_id", help="Transaction ID to ignore")
@click.pass_context
def check_reference(ctx, reference: str, exclude_id: str | None):
    """Check whether an external reference is already used."""
    service = ReconciliationService(ctx.obj["context"])
    conflict = service.check_duplicate_reference(reference, exclude_id=exclude_id)
    if conflict is None:
        click.echo(f"Reference '{reference.strip()}' is not used by any transaction")
        return
    click.echo(
        f"Reference '{reference.strip()}' is used by transaction {conflict.transaction_id} "
        f"({conflict.date}, {conflict.amount:,.2f}, {conflict.party_name or 'N/A'})"
    )
    ctx.exit(1)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
