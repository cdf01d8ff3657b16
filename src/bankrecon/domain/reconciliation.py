"""Reconciliation state machine and duplicate-reference guard."""

from dataclasses import replace
from datetime import date, datetime, UTC
from typing import Any, Optional

from bankrecon.domain.context import ReconContext
from bankrecon.domain.entities import (
    DuplicateConflict,
    LearningReport,
    ReconciliationFlags,
    Transaction,
    TransactionKind,
    TransactionState,
)
from bankrecon.domain.errors import (
    DuplicateReferenceError,
    NotFoundError,
    ValidationError,
    transaction_not_found,
)
from bankrecon.domain.learning import LearningService
from bankrecon.logging_config import get_logger

logger = get_logger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def is_completed(transaction: Transaction) -> bool:
    """Completed iff added, referenced, named, not held and not a self transfer."""
    return (
        transaction.added_to_external_system
        and not _blank(transaction.external_reference)
        and not _blank(transaction.party_name)
        and not transaction.hold
        and not transaction.self_transfer
    )


def derive_flags(transaction: Transaction) -> ReconciliationFlags:
    """Compute the four derived-state flags. Never stored."""
    completed = is_completed(transaction)
    return ReconciliationFlags(
        pending=not (completed or transaction.hold or transaction.self_transfer),
        completed=completed,
        hold=transaction.hold,
        self_transfer=transaction.self_transfer,
    )


def matches_state(transaction: Transaction, state: TransactionState) -> bool:
    flags = derive_flags(transaction)
    return {
        TransactionState.PENDING: flags.pending,
        TransactionState.COMPLETED: flags.completed,
        TransactionState.HOLD: flags.hold,
        TransactionState.SELF_TRANSFER: flags.self_transfer,
    }[TransactionState(state)]


def primary_state(transaction: Transaction) -> TransactionState:
    """Single label for display; hold and self transfer may both be set."""
    flags = derive_flags(transaction)
    if flags.completed:
        return TransactionState.COMPLETED
    if flags.hold:
        return TransactionState.HOLD
    if flags.self_transfer:
        return TransactionState.SELF_TRANSFER
    return TransactionState.PENDING


class ReconciliationService:
    """Service for moving transactions between reconciliation states.

    Every transition reads the authoritative record from the store, writes
    only the fields it changes, and passes the record's original date back to
    the store so no write path can alter it.
    """

    def __init__(self, context: ReconContext, learning_service: Optional[LearningService] = None):
        """Initialize reconciliation service.

        Args:
            context: Shared service context
            learning_service: Learning engine invoked on party name edits
        """
        self.context = context
        self.db = context.db
        self.learning_service = learning_service or LearningService(context)

    def get_transaction(self, transaction_id: str) -> Transaction:
        """Get a transaction or raise.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def list_transactions(
        self,
        state: Optional[TransactionState] = None,
        kind: Optional[TransactionKind] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
        newest_first: bool = True,
    ) -> list[Transaction]:
        """List transactions with filters.

        Args:
            state: Optional derived state filter
            kind: Optional credit/debit filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            search: Case-insensitive text matched against narration, party
                name, bank reference and external reference
            newest_first: Sort by date descending (ascending when False)

        Returns:
            List of transaction entities
        """
        transactions = self.db.list_transactions(kind=kind)
        if state is not None:
            transactions = [t for t in transactions if matches_state(t, state)]
        if start_date is not None:
            transactions = [t for t in transactions if t.date >= start_date]
        if end_date is not None:
            transactions = [t for t in transactions if t.date <= end_date]
        if search:
            query = search.lower()
            transactions = [
                t
                for t in transactions
                if query in t.narration.lower()
                or query in t.party_name.lower()
                or query in (t.bank_reference or "").lower()
                or query in t.external_reference.lower()
            ]
        return sorted(transactions, key=lambda t: t.date, reverse=newest_first)

    def flags(self, transaction_id: str) -> ReconciliationFlags:
        return derive_flags(self.get_transaction(transaction_id))

    def check_duplicate_reference(
        self, reference: str, exclude_id: Optional[str] = None
    ) -> Optional[DuplicateConflict]:
        """Look up another transaction already using an external reference.

        Always queries the record store, never a local copy, because another
        session may have confirmed with the same reference since our last read.
        """
        reference = (reference or "").strip()
        if not reference:
            return None
        matches = self.db.find_transactions_by_external_reference(reference, exclude_id=exclude_id)
        if not matches:
            return None
        existing = matches[0]
        return DuplicateConflict(
            transaction_id=existing.id,
            date=existing.date,
            amount=existing.amount,
            party_name=existing.party_name,
        )

    def _guard_reference(self, reference: str, transaction_id: str) -> None:
        conflict = self.check_duplicate_reference(reference, exclude_id=transaction_id)
        if conflict is not None:
            logger.info(
                "Rejected reference '%s' for %s: used by %s",
                reference,
                transaction_id,
                conflict.transaction_id,
            )
            raise DuplicateReferenceError(reference.strip(), conflict)

    def _write(self, transaction: Transaction, **changes: Any) -> Transaction:
        """Persist changed fields and return the updated entity.

        Any write that leaves the transaction completed runs the duplicate
        guard first, whichever transition caused it.

        Raises:
            DuplicateReferenceError: If the resulting reference is used elsewhere
        """
        changes.pop("date", None)
        result = replace(transaction, **changes)
        if is_completed(result):
            self._guard_reference(result.external_reference, transaction.id)
        changes["updated_at"] = datetime.now(UTC)
        self.db.update_transaction(transaction.id, transaction.date, **changes)
        return self.get_transaction(transaction.id)

    def confirm(self, transaction_id: str, reference: Optional[str] = None) -> Transaction:
        """Mark a transaction as entered in the bookkeeping system.

        Args:
            transaction_id: Transaction ID
            reference: External reference; defaults to the stored one

        Returns:
            The completed transaction

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If party name or reference is blank, or the
                transaction is a self transfer
            DuplicateReferenceError: If the reference is used elsewhere
        """
        transaction = self.get_transaction(transaction_id)
        final_reference = (reference if reference is not None else transaction.external_reference).strip()
        if not final_reference:
            raise ValidationError(f"Transaction {transaction_id}: external reference is required to confirm")
        if _blank(transaction.party_name):
            raise ValidationError(f"Transaction {transaction_id}: party name is required to confirm")
        if transaction.self_transfer:
            raise ValidationError(
                f"Transaction {transaction_id} is marked as a self transfer; unset it before confirming"
            )
        return self._write(
            transaction,
            added_to_external_system=True,
            external_reference=final_reference,
            hold=False,
        )

    def cancel(self, transaction_id: str) -> Transaction:
        """Return a completed transaction to pending.

        Party name, hold and self-transfer flags are left untouched.
        """
        transaction = self.get_transaction(transaction_id)
        return self._write(transaction, added_to_external_system=False, external_reference="")

    def set_hold(self, transaction_id: str) -> Transaction:
        transaction = self.get_transaction(transaction_id)
        return self._write(transaction, hold=True)

    def unhold(self, transaction_id: str) -> Transaction:
        transaction = self.get_transaction(transaction_id)
        return self._write(transaction, hold=False)

    def set_self_transfer(self, transaction_id: str) -> Transaction:
        transaction = self.get_transaction(transaction_id)
        return self._write(transaction, self_transfer=True)

    def unset_self_transfer(self, transaction_id: str) -> Transaction:
        transaction = self.get_transaction(transaction_id)
        return self._write(transaction, self_transfer=False)

    def set_added_to_external_system(self, transaction_id: str, checked: bool) -> Transaction:
        """Tick or untick the "added to bookkeeping" box.

        Unticking clears the external reference. Ticking a transaction that
        thereby becomes completed clears its hold flag and runs the duplicate
        guard.
        """
        transaction = self.get_transaction(transaction_id)
        if not checked:
            return self._write(transaction, added_to_external_system=False, external_reference="")

        changes: dict[str, Any] = {"added_to_external_system": True}
        if transaction.hold and is_completed(replace(transaction, hold=False, **changes)):
            changes["hold"] = False
        return self._write(transaction, **changes)

    def edit_external_reference(self, transaction_id: str, reference: Optional[str]) -> Transaction:
        """Set the external reference without touching any flag.

        When the edit would leave the transaction completed, the duplicate
        guard runs first.
        """
        transaction = self.get_transaction(transaction_id)
        value = (reference or "").strip()
        return self._write(transaction, external_reference=value)

    def edit_party_name(
        self, transaction_id: str, name: Optional[str], learn: bool = True
    ) -> tuple[Transaction, Optional[LearningReport]]:
        """Assign or clear the party name, then learn from the narration.

        The save happens first; learning failures never undo it.

        Returns:
            (updated transaction, learning report or None when nothing was learned)
        """
        transaction = self.get_transaction(transaction_id)
        new_name = (name or "").strip()
        if new_name == transaction.party_name:
            return transaction, None

        updated = self._write(transaction, party_name=new_name)
        if not new_name or not learn:
            return updated, None
        return updated, self.learning_service.learn(transaction, new_name)

    def apply_suggestion(
        self, transaction_id: str, suggested_name: str
    ) -> tuple[Transaction, Optional[LearningReport]]:
        """Accept a suggested name; same as an edit, learning from the old name too."""
        if _blank(suggested_name):
            raise ValidationError("Suggested name cannot be empty")
        return self.edit_party_name(transaction_id, suggested_name)

    def update_notes(self, transaction_id: str, notes: Optional[str]) -> Transaction:
        """Replace the notes. Notes are not state, so ``updated_at`` is left alone."""
        transaction = self.get_transaction(transaction_id)
        self.db.update_transaction(transaction.id, transaction.date, notes=notes or None)
        return self.get_transaction(transaction.id)


