"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the record store schema can change
without touching the reconciliation and learning services.
"""

from datetime import UTC, datetime
from decimal import Decimal

from bankrecon.domain import entities as domain
from bankrecon.database.models import (
    Transaction as ORMTransaction,
    NameMapping as ORMNameMapping,
    Party as ORMParty,
)


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        amount=Decimal(orm_transaction.amount),
        kind=domain.TransactionKind(orm_transaction.kind),
        narration=orm_transaction.narration or "",
        bank_reference=orm_transaction.bank_reference,
        party_name=orm_transaction.party_name or "",
        external_reference=orm_transaction.external_reference or "",
        added_to_external_system=bool(orm_transaction.added_to_external_system),
        hold=bool(orm_transaction.hold),
        self_transfer=bool(orm_transaction.self_transfer),
        notes=orm_transaction.notes,
        created_at=_aware(orm_transaction.created_at),
        updated_at=_aware(orm_transaction.updated_at),
    )


def mapping_to_domain(orm_mapping: ORMNameMapping) -> domain.NameMapping:
    """Convert SQLAlchemy NameMapping model to domain NameMapping entity."""
    return domain.NameMapping(
        id=orm_mapping.id,
        original_pattern=orm_mapping.original_pattern,
        corrected_name=orm_mapping.corrected_name,
        confidence=orm_mapping.confidence,
        last_used_at=_aware(orm_mapping.last_used_at),
        created_at=_aware(orm_mapping.created_at),
    )


def party_to_domain(orm_party: ORMParty) -> domain.DirectoryEntry:
    """Convert SQLAlchemy Party model to domain DirectoryEntry entity."""
    return domain.DirectoryEntry(
        id=orm_party.id,
        name=orm_party.name,
        created_at=_aware(orm_party.created_at),
    )
