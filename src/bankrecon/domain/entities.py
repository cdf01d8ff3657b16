"""Domain model entities for bankrecon.

These are pure data classes representing business concepts, independent of
database schema. Entities are frozen: every change produces a new value via
``dataclasses.replace`` so no two views share a mutable record.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionKind(str, Enum):
    """Direction of a bank-ledger line."""

    CREDIT = "credit"
    DEBIT = "debit"


class TransactionState(str, Enum):
    """Derived reconciliation state used for filtering and display."""

    PENDING = "pending"
    COMPLETED = "completed"
    HOLD = "hold"
    SELF_TRANSFER = "self-transfer"


class SuggestionStatus(str, Enum):
    """Outcome of a suggestion lookup for one transaction."""

    READY = "ready"
    NONE = "none"
    IN_PROGRESS = "in-progress"
    FAILED = "failed"


@dataclass(frozen=True)
class Transaction:
    """One bank-ledger line."""

    id: str
    date: date
    amount: Decimal
    kind: TransactionKind
    narration: str
    bank_reference: Optional[str]
    party_name: str
    external_reference: str
    added_to_external_system: bool
    hold: bool
    self_transfer: bool
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NameMapping:
    """Learned narration pattern to party name correspondence."""

    id: int
    original_pattern: str
    corrected_name: str
    confidence: int
    last_used_at: datetime
    created_at: datetime


@dataclass(frozen=True)
class DirectoryEntry:
    """Known party/supplier name from the authoritative directory."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class TransactionCandidate:
    """Raw transaction produced by an ingestion source."""

    date: date
    amount: Decimal
    kind: TransactionKind
    narration: str
    bank_reference: Optional[str] = None
    id: Optional[str] = None
    party_name: Optional[str] = None


@dataclass(frozen=True)
class ReconciliationFlags:
    """The four derived-state flags of a transaction."""

    pending: bool
    completed: bool
    hold: bool
    self_transfer: bool


@dataclass(frozen=True)
class DuplicateConflict:
    """Summary of the transaction that already holds an external reference."""

    transaction_id: str
    date: date
    amount: Decimal
    party_name: str


@dataclass(frozen=True)
class SuggestionResult:
    """Ranked party name suggestions for one transaction."""

    transaction_id: str
    status: SuggestionStatus
    suggestions: tuple[str, ...] = ()
    source: Optional[str] = None
    matched_pattern: Optional[str] = None


@dataclass(frozen=True)
class LearningReport:
    """Result of one learning pass."""

    confirmed_name: str
    learned_patterns: tuple[str, ...] = ()
    failed_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class IngestionResult:
    """Counts and messages from an ingestion batch."""

    imported: int = 0
    skipped: int = 0
    errors: tuple[str, ...] = ()
    transaction_ids: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PartySummary:
    """Totals for one party over completed transactions."""

    name: str
    total_amount: Decimal
    transaction_count: int


@dataclass(frozen=True)
class DashboardStats:
    """Headline reconciliation numbers."""

    total_deposit_amount: Decimal
    pending_amount: Decimal
    pending_count: int
    completed_amount: Decimal
    completed_count: int
    total_debits: Decimal
    net_balance: Decimal
    transactions_this_month: int
    transactions_this_year: int
