"""Abstract record store interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from bankrecon.domain.entities import (
    DirectoryEntry,
    NameMapping,
    Transaction,
    TransactionKind,
)

# Fields a caller may change on an existing transaction. Everything else
# (id, date, amount, kind, narration, bank_reference, created_at) is fixed
# at ingestion.
MUTABLE_TRANSACTION_FIELDS = frozenset(
    {
        "party_name",
        "external_reference",
        "added_to_external_system",
        "hold",
        "self_transfer",
        "notes",
        "updated_at",
    }
)


class Database(ABC):
    """Abstract record store for transactions, mappings and the party directory."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_id: str,
        date: date,
        amount: Decimal,
        kind: TransactionKind,
        narration: str,
        bank_reference: Optional[str] = None,
        party_name: str = "",
        notes: Optional[str] = None,
    ) -> str:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def transaction_exists(self, transaction_id: str) -> bool:
        """Check if a transaction with the given ID exists."""
        pass

    @abstractmethod
    def list_transactions(self, kind: Optional[TransactionKind] = None) -> list[Transaction]:
        """List all transactions, optionally filtered by kind, in ingestion order."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: str, original_date: date, **fields: Any) -> None:
        """Write mutable fields of a transaction (last write wins per field).

        Args:
            transaction_id: Transaction ID
            original_date: The date the caller read; the write is refused if it
                differs from the stored date
            **fields: Values for fields in MUTABLE_TRANSACTION_FIELDS
        """
        pass

    @abstractmethod
    def find_transactions_by_external_reference(
        self, reference: str, exclude_id: Optional[str] = None
    ) -> list[Transaction]:
        """Find transactions whose trimmed external reference equals ``reference``."""
        pass

    # Mapping operations
    @abstractmethod
    def list_mappings(self) -> list[NameMapping]:
        """List all mappings in creation order."""
        pass

    @abstractmethod
    def get_mapping(self, mapping_id: int) -> Optional[NameMapping]:
        """Get mapping by ID."""
        pass

    @abstractmethod
    def get_mapping_by_pattern(self, original_pattern: str) -> Optional[NameMapping]:
        """Get mapping by normalized pattern."""
        pass

    @abstractmethod
    def upsert_mapping(
        self,
        original_pattern: str,
        corrected_name: str,
        confidence: int,
        last_used_at: datetime,
    ) -> NameMapping:
        """Insert or update the mapping keyed by its normalized pattern."""
        pass

    @abstractmethod
    def update_mapping(
        self,
        mapping_id: int,
        original_pattern: Optional[str] = None,
        corrected_name: Optional[str] = None,
        last_used_at: Optional[datetime] = None,
    ) -> None:
        """Update mapping fields."""
        pass

    @abstractmethod
    def delete_mapping(self, mapping_id: int) -> None:
        """Delete a mapping."""
        pass

    # Directory operations
    @abstractmethod
    def add_directory_entry(self, name: str) -> int:
        """Add a party name to the directory. Returns entry ID."""
        pass

    @abstractmethod
    def list_directory_entries(self) -> list[DirectoryEntry]:
        """List directory entries in insertion order."""
        pass

    @abstractmethod
    def remove_directory_entry(self, entry_id: int) -> None:
        """Remove a directory entry."""
        pass

    def list_directory_names(self) -> list[str]:
        """Return directory names in directory order."""
        return [entry.name for entry in self.list_directory_entries()]
