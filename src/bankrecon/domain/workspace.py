"""Local working copy of transactions for an interactive session."""

import threading
from dataclasses import replace
from typing import Any, Optional

from bankrecon.domain.context import ReconContext
from bankrecon.domain.entities import SuggestionResult, Transaction
from bankrecon.domain.errors import NotFoundError, ValidationError, transaction_not_found
from bankrecon.domain.reconciliation import ReconciliationService
from bankrecon.domain.sessions import Debouncer, EditSession, EditSessionRegistry
from bankrecon.domain.suggestions import SuggestionService
from bankrecon.logging_config import get_logger

logger = get_logger(__name__)

DEBOUNCED_FIELDS = ("external_reference", "notes")


class TransactionWorkspace:
    """Hold a local copy of all transactions and route edits to the store.

    Free-text fields are written through a debouncer. Refreshes never
    overwrite a transaction that has an open edit session; they are queued
    and applied by re-reading that transaction once the last session closes.
    """

    def __init__(
        self,
        context: ReconContext,
        reconciliation: Optional[ReconciliationService] = None,
        suggestions: Optional[SuggestionService] = None,
        timer_factory: Any = None,
    ):
        """Initialize workspace.

        Args:
            context: Shared service context
            reconciliation: State machine (created if omitted)
            suggestions: Suggestion pipeline (created if omitted)
            timer_factory: Optional ``threading.Timer`` replacement for the debouncer
        """
        self.context = context
        self.db = context.db
        self.reconciliation = reconciliation or ReconciliationService(context)
        self.suggestions = suggestions or SuggestionService(context)
        self.sessions = EditSessionRegistry(on_release=self.reload)
        debouncer_args = {"delay": context.settings.debounce_seconds}
        if timer_factory is not None:
            debouncer_args["timer_factory"] = timer_factory
        self.debouncer = Debouncer(self._persist, **debouncer_args)
        self._lock = threading.RLock()
        self._transactions: dict[str, Transaction] = {}

    @property
    def transactions(self) -> list[Transaction]:
        with self._lock:
            return list(self._transactions.values())

    def get(self, transaction_id: str) -> Transaction:
        with self._lock:
            transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def refresh(self) -> list[str]:
        """Re-read every transaction from the store.

        Returns:
            IDs whose refresh was queued behind an open edit session
        """
        queued = []
        fresh = self.db.list_transactions()
        with self._lock:
            for transaction in fresh:
                if self.sessions.is_open(transaction.id):
                    self.sessions.queue_refresh(transaction.id)
                    queued.append(transaction.id)
                    continue
                self._transactions[transaction.id] = transaction
        if queued:
            logger.debug("Queued refresh for %d transaction(s) under edit", len(queued))
        return queued

    def reload(self, transaction_id: str) -> Transaction:
        """Replace the local copy of one transaction with the stored record."""
        transaction = self.reconciliation.get_transaction(transaction_id)
        with self._lock:
            self._transactions[transaction_id] = transaction
        return transaction

    # Edit sessions

    def begin_edit(self, transaction_id: str, field: str) -> EditSession:
        self.get(transaction_id)
        return self.sessions.open(transaction_id, field)

    def type_text(self, session: EditSession, value: str) -> Transaction:
        """Record a keystroke-level change; the store write is debounced."""
        if session.field not in DEBOUNCED_FIELDS:
            raise ValidationError(
                f"Field '{session.field}' is not a free-text field. Use: {', '.join(DEBOUNCED_FIELDS)}"
            )
        with self._lock:
            local = replace(self.get(session.transaction_id), **{session.field: value})
            self._transactions[session.transaction_id] = local
        self.debouncer.submit(session.transaction_id, session.field, value)
        return local

    def commit(self, session: EditSession) -> None:
        """Write any buffered value for the session's field and close it."""
        try:
            self.debouncer.flush(session.transaction_id, session.field)
        finally:
            released = self.sessions.commit(session)
            self._reload_after_close(session.transaction_id, released)

    def abandon(self, session: EditSession) -> None:
        """Discard buffered input for the session's field and close it."""
        self.debouncer.cancel(session.transaction_id, session.field)
        released = self.sessions.abandon(session)
        self._reload_after_close(session.transaction_id, released)

    def _reload_after_close(self, transaction_id: str, released: bool) -> None:
        # A released queued refresh has already re-read the record
        if not released and not self.sessions.is_open(transaction_id):
            self.reload(transaction_id)

    def _persist(self, transaction_id: str, field: str, value: Any) -> None:
        if field == "external_reference":
            updated = self.reconciliation.edit_external_reference(transaction_id, value)
        elif field == "notes":
            updated = self.reconciliation.update_notes(transaction_id, value)
        else:
            raise ValidationError(f"Field '{field}' cannot be written through the debouncer")
        self._store_local(updated)

    def _store_local(self, transaction: Transaction) -> None:
        # Keep the user's in-progress text; the queued refresh re-reads it later
        with self._lock:
            if not self.sessions.is_open(transaction.id):
                self._transactions[transaction.id] = transaction

    # State transitions

    def set_party_name(self, transaction_id: str, name: Optional[str]) -> Transaction:
        updated, report = self.reconciliation.edit_party_name(transaction_id, name)
        if report is not None and report.learned_patterns:
            # New mappings can change any pending suggestion
            self.suggestions.clear()
        else:
            self.suggestions.clear(transaction_id)
        self._store_local(updated)
        return updated

    def apply_suggestion(self, transaction_id: str, suggested_name: str) -> Transaction:
        updated, _ = self.reconciliation.apply_suggestion(transaction_id, suggested_name)
        self.suggestions.clear()
        self._store_local(updated)
        return updated

    def confirm(self, transaction_id: str, reference: Optional[str] = None) -> Transaction:
        self.debouncer.flush(transaction_id)
        updated = self.reconciliation.confirm(transaction_id, reference)
        self.suggestions.clear(transaction_id)
        self._store_local(updated)
        return updated

    def cancel(self, transaction_id: str) -> Transaction:
        updated = self.reconciliation.cancel(transaction_id)
        self.suggestions.clear(transaction_id)
        self._store_local(updated)
        return updated

    def toggle_hold(self, transaction_id: str) -> Transaction:
        if self.get(transaction_id).hold:
            updated = self.reconciliation.unhold(transaction_id)
        else:
            updated = self.reconciliation.set_hold(transaction_id)
        self._store_local(updated)
        return updated

    def toggle_self_transfer(self, transaction_id: str) -> Transaction:
        if self.get(transaction_id).self_transfer:
            updated = self.reconciliation.unset_self_transfer(transaction_id)
        else:
            updated = self.reconciliation.set_self_transfer(transaction_id)
        self._store_local(updated)
        return updated

    def set_added_to_external_system(self, transaction_id: str, checked: bool) -> Transaction:
        self.debouncer.flush(transaction_id, "external_reference")
        updated = self.reconciliation.set_added_to_external_system(transaction_id, checked)
        self.suggestions.clear(transaction_id)
        self._store_local(updated)
        return updated

    # Suggestions

    def suggestions_for(self, transaction_id: str, refresh: bool = False) -> SuggestionResult:
        return self.suggestions.suggest(self.get(transaction_id), refresh=refresh)

    def close(self) -> None:
        """Write everything still buffered."""
        self.debouncer.flush()
