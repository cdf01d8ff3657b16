"""Shared domain error messages and error types."""

from bankrecon.domain.entities import DuplicateConflict


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Missing or invalid input for an operation; no state was changed."""


class NotFoundError(DomainError):
    """Requested transaction or mapping does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DuplicateReferenceError(ConflictError):
    """External reference is already used by another transaction."""

    def __init__(self, reference: str, conflict: DuplicateConflict):
        self.reference = reference
        self.conflict = conflict
        super().__init__(duplicate_reference(reference, conflict))


class LookupFailure(DomainError):
    """A suggestion lookup for one transaction failed."""

    def __init__(self, transaction_id: str, cause: Exception):
        self.transaction_id = transaction_id
        self.cause = cause
        super().__init__(f"Suggestion lookup failed for transaction {transaction_id}: {cause}")


class LearningFailure(DomainError):
    """A single mapping upsert failed during a learning pass."""

    def __init__(self, pattern: str, cause: Exception):
        self.pattern = pattern
        self.cause = cause
        super().__init__(f"Could not learn pattern '{pattern}': {cause}")


class PersistenceFailure(DomainError):
    """The record store could not be read or written. Safe to retry."""

    retryable = True


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def mapping_not_found(mapping_id: int) -> str:
    """Return message for missing mapping."""
    return f"Mapping {mapping_id} not found"


def duplicate_reference(reference: str, conflict: DuplicateConflict) -> str:
    """Return message describing a duplicate external reference."""
    party = conflict.party_name or "N/A"
    return (
        f"External reference '{reference}' is already used by transaction "
        f"{conflict.transaction_id} (date {conflict.date.isoformat()}, "
        f"amount {conflict.amount:,.2f}, party {party})"
    )


def date_is_immutable(transaction_id: str) -> str:
    """Return message for a blocked date change."""
    return f"Transaction {transaction_id}: date cannot be changed after ingestion"
