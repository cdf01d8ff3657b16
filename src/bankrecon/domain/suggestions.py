"""Suggestion pipeline: directory matches, then learned mappings."""

import threading
from typing import Iterable, Optional

from bankrecon.domain.context import ReconContext
from bankrecon.domain.directory import DirectoryService
from bankrecon.domain.entities import SuggestionResult, SuggestionStatus, Transaction
from bankrecon.domain.errors import LookupFailure
from bankrecon.domain.extraction import resolve_narration
from bankrecon.domain.mapping import MappingService
from bankrecon.domain.reconciliation import is_completed
from bankrecon.logging_config import get_logger

logger = get_logger(__name__)

SOURCE_DIRECTORY = "directory"
SOURCE_MAPPING = "mapping"


class SuggestionService:
    """Compute and cache party name suggestions per transaction.

    At most one lookup runs per transaction at a time; a second request for a
    transaction whose lookup is still running gets an IN_PROGRESS result. A
    failed lookup is cached as FAILED and only recomputed on explicit request.
    """

    def __init__(
        self,
        context: ReconContext,
        mapping_service: Optional[MappingService] = None,
        directory_service: Optional[DirectoryService] = None,
    ):
        """Initialize suggestion service.

        Args:
            context: Shared service context
            mapping_service: Mapping resolver (created if omitted)
            directory_service: Directory matcher (created if omitted)
        """
        self.context = context
        self.mapping_service = mapping_service or MappingService(context)
        self.directory_service = directory_service or DirectoryService(context)
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()
        self._results: dict[str, SuggestionResult] = {}

    def is_in_flight(self, transaction_id: str) -> bool:
        with self._lock:
            return transaction_id in self._in_flight

    def cached(self, transaction_id: str) -> Optional[SuggestionResult]:
        with self._lock:
            return self._results.get(transaction_id)

    def clear(self, transaction_id: Optional[str] = None) -> None:
        """Forget cached results for one transaction, or for all of them."""
        with self._lock:
            if transaction_id is None:
                self._results.clear()
            else:
                self._results.pop(transaction_id, None)

    def suggest(self, transaction: Transaction, refresh: bool = False) -> SuggestionResult:
        """Return suggestions for a transaction.

        Args:
            transaction: Transaction to look up
            refresh: Recompute even when a cached result exists

        Returns:
            SuggestionResult; never raises for lookup errors
        """
        with self._lock:
            if transaction.id in self._in_flight:
                return SuggestionResult(transaction.id, SuggestionStatus.IN_PROGRESS)
            if not refresh and transaction.id in self._results:
                return self._results[transaction.id]
            self._in_flight.add(transaction.id)

        try:
            result = self._compute(transaction)
        except Exception as exc:
            failure = LookupFailure(transaction.id, exc)
            logger.warning("%s", failure)
            result = SuggestionResult(transaction.id, SuggestionStatus.FAILED)
        finally:
            with self._lock:
                self._in_flight.discard(transaction.id)

        with self._lock:
            self._results[transaction.id] = result
        return result

    def suggest_many(
        self, transactions: Iterable[Transaction], refresh: bool = False
    ) -> list[SuggestionResult]:
        """Suggest for each transaction; one failure never affects the others."""
        return [self.suggest(transaction, refresh=refresh) for transaction in transactions]

    def _compute(self, transaction: Transaction) -> SuggestionResult:
        if is_completed(transaction):
            return SuggestionResult(transaction.id, SuggestionStatus.NONE)

        current = transaction.party_name.strip()
        if current:
            corrected = self.mapping_service.resolve(current)
            if corrected and corrected.strip().lower() != current.lower():
                return SuggestionResult(
                    transaction.id,
                    SuggestionStatus.READY,
                    suggestions=(corrected.strip(),),
                    source=SOURCE_MAPPING,
                    matched_pattern=current.lower(),
                )
            return SuggestionResult(transaction.id, SuggestionStatus.NONE)

        limit = self.context.settings.max_suggestions
        suggestions = list(self.directory_service.match(transaction.narration, limit))
        source = SOURCE_DIRECTORY if suggestions else None
        matched_pattern = None

        match = resolve_narration(transaction.narration, self.mapping_service.resolve)
        if match is not None:
            name = match.corrected_name.strip()
            if name.lower() not in {s.lower() for s in suggestions}:
                suggestions.append(name)
            source = source or SOURCE_MAPPING
            matched_pattern = match.candidate

        if not suggestions:
            return SuggestionResult(transaction.id, SuggestionStatus.NONE)
        return SuggestionResult(
            transaction.id,
            SuggestionStatus.READY,
            suggestions=tuple(suggestions[:limit]),
            source=source,
            matched_pattern=matched_pattern,
        )
