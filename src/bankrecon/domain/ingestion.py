"""Ingestion of new transactions from a statement source."""

import uuid
from decimal import Decimal
from typing import Iterable, Optional

from bankrecon.domain.context import ReconContext
from bankrecon.domain.entities import (
    IngestionResult,
    Transaction,
    TransactionCandidate,
    TransactionKind,
)
from bankrecon.domain.errors import DomainError, ValidationError
from bankrecon.domain.learning import LearningService
from bankrecon.logging_config import get_logger

logger = get_logger(__name__)

NARRATION_KEY_LENGTH = 50


def generate_transaction_id() -> str:
    return f"txn_{uuid.uuid4().hex}"


def composite_key(record: TransactionCandidate | Transaction) -> tuple[str, str, str, str]:
    """Dedup key for records without a source id.

    (date, amount, first 50 characters of narration, bank reference)
    """
    amount = Decimal(record.amount).copy_abs().normalize()
    return (
        record.date.isoformat(),
        f"{amount:f}",
        (record.narration or "").strip()[:NARRATION_KEY_LENGTH],
        (record.bank_reference or "").strip(),
    )


def dedup_key(record: TransactionCandidate | Transaction) -> tuple:
    record_id = (record.id or "").strip()
    if record_id:
        return ("id", record_id)
    return ("key",) + composite_key(record)


def dedup_batch(candidates: Iterable[TransactionCandidate]) -> tuple[list[TransactionCandidate], int]:
    """Drop repeated records within one batch. First occurrence wins.

    Records are keyed by trimmed id when present, otherwise by composite key.

    Returns:
        (unique candidates in input order, number dropped)
    """
    seen = set()
    unique = []
    dropped = 0
    for candidate in candidates:
        key = dedup_key(candidate)
        if key in seen:
            dropped += 1
            continue
        seen.add(key)
        unique.append(candidate)
    if dropped:
        logger.info("Dropped %d duplicate record(s) from batch", dropped)
    return unique, dropped


def validate_candidate(candidate: TransactionCandidate) -> None:
    """Check a candidate has what a transaction needs.

    Raises:
        ValidationError: If date, amount, kind or narration is unusable
    """
    if candidate.date is None:
        raise ValidationError("Date is required")
    if candidate.amount is None or Decimal(candidate.amount) == 0:
        raise ValidationError("Amount must be non-zero")
    try:
        TransactionKind(candidate.kind)
    except ValueError:
        raise ValidationError(f"Unknown transaction type '{candidate.kind}'. Use credit or debit")
    if not candidate.narration or not candidate.narration.strip():
        raise ValidationError("Narration is required")


class IngestionService:
    """Service for adding statement records to the record store."""

    def __init__(self, context: ReconContext, learning_service: Optional[LearningService] = None):
        """Initialize ingestion service.

        Args:
            context: Shared service context
            learning_service: Learning engine for records that carry a party name
        """
        self.context = context
        self.db = context.db
        self.learning_service = learning_service or LearningService(context)

    def ingest(self, candidates: Iterable[TransactionCandidate]) -> IngestionResult:
        """Create transactions for new records.

        Duplicates within the batch, and records already in the store (same id,
        or same composite key for records without an id), are skipped. Records
        that arrive with a party name train the mapping store.

        Args:
            candidates: Records from the ingestion source

        Returns:
            IngestionResult with counts, per-record errors and new ids
        """
        unique, skipped = dedup_batch(candidates)
        existing_keys = {composite_key(txn) for txn in self.db.list_transactions()}

        imported_ids = []
        errors = []
        for position, candidate in enumerate(unique, start=1):
            try:
                validate_candidate(candidate)
            except ValidationError as e:
                errors.append(f"Record {position}: {e}")
                continue

            source_id = (candidate.id or "").strip()
            if source_id and self.db.transaction_exists(source_id):
                skipped += 1
                continue
            key = composite_key(candidate)
            if not source_id and key in existing_keys:
                skipped += 1
                continue

            party_name = (candidate.party_name or "").strip()
            try:
                transaction_id = self.db.create_transaction(
                    transaction_id=source_id or generate_transaction_id(),
                    date=candidate.date,
                    amount=Decimal(candidate.amount).copy_abs(),
                    kind=TransactionKind(candidate.kind),
                    narration=candidate.narration.strip(),
                    bank_reference=(candidate.bank_reference or "").strip() or None,
                    party_name=party_name,
                )
            except DomainError as e:
                errors.append(f"Record {position}: {e}")
                continue

            existing_keys.add(key)
            imported_ids.append(transaction_id)
            if party_name:
                self.learning_service.train_from_narration(candidate.narration, party_name)

        logger.info(
            "Ingested %d transaction(s), skipped %d duplicate(s), %d error(s)",
            len(imported_ids),
            skipped,
            len(errors),
        )
        return IngestionResult(
            imported=len(imported_ids),
            skipped=skipped,
            errors=tuple(errors),
            transaction_ids=tuple(imported_ids),
        )
