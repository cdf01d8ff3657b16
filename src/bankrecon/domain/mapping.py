"""Learned name mapping store and fuzzy resolver."""

import math
from datetime import datetime, UTC
from typing import Optional

from bankrecon.domain.context import ReconContext
from bankrecon.domain.entities import NameMapping
from bankrecon.domain.errors import NotFoundError, ValidationError, mapping_not_found
from bankrecon.utils.text import normalize_pattern, significant_words

MAX_CONFIDENCE = 10
MIN_CONFIDENCE = 1

MIN_SHARED_WORDS = 2
CONTAINMENT_OVERLAP_RATIO = 0.5
TOKEN_OVERLAP_RATIO = 0.75
LENGTH_RATIO = 0.5


def fuzzy_matches(candidate: str, pattern: str) -> bool:
    """Decide whether a normalized candidate fuzzily matches a learned pattern.

    Only words longer than three characters count. A match needs either
    containment with at least half of the significant words shared, or a
    three-quarter word overlap between two multi-word phrases of comparable
    length. Both branches need two shared words, so a single generic word
    never matches on its own.
    """
    candidate_words = significant_words(candidate)
    pattern_words = significant_words(pattern)
    shared = [word for word in candidate_words if word in pattern_words]

    if candidate in pattern or pattern in candidate:
        total = max(len(candidate_words), len(pattern_words))
        if total and len(shared) / total >= CONTAINMENT_OVERLAP_RATIO and len(shared) >= MIN_SHARED_WORDS:
            return True

    if len(candidate_words) >= 2 and len(pattern_words) >= 2:
        shorter = min(len(candidate_words), len(pattern_words))
        if len(shared) >= math.ceil(shorter * TOKEN_OVERLAP_RATIO) and len(shared) >= MIN_SHARED_WORDS:
            length_ratio = min(len(candidate), len(pattern)) / max(len(candidate), len(pattern))
            if length_ratio >= LENGTH_RATIO:
                return True

    return False


class MappingService:
    """Service for resolving and maintaining learned name mappings."""

    SORT_KEYS = ("created", "confidence", "last_used", "pattern")

    def __init__(self, context: ReconContext):
        """Initialize mapping service.

        Args:
            context: Shared service context
        """
        self.context = context
        self.db = context.db

    def resolve(self, candidate: str) -> Optional[str]:
        """Resolve a candidate pattern to a corrected name.

        Exact normalized match first, then the first mapping (in store order)
        that fuzzily matches. Never mutates the store.

        Args:
            candidate: Raw or normalized candidate text

        Returns:
            Corrected name or None
        """
        normalized = normalize_pattern(candidate)
        if not normalized:
            return None

        mappings = self.context.get_mappings()
        for mapping in mappings:
            if mapping.original_pattern == normalized:
                return mapping.corrected_name

        for mapping in mappings:
            if fuzzy_matches(normalized, mapping.original_pattern):
                return mapping.corrected_name
        return None

    def apply(self, name: str) -> str:
        """Return the suggested name for ``name``, or ``name`` unchanged."""
        return self.resolve(name) or name

    def get_mapping(self, pattern: str) -> Optional[NameMapping]:
        """Get a mapping by its (normalized) pattern."""
        normalized = normalize_pattern(pattern)
        for mapping in self.context.get_mappings():
            if mapping.original_pattern == normalized:
                return mapping
        return None

    def has_mapping(self, pattern: str) -> bool:
        return self.get_mapping(pattern) is not None

    def list_mappings(self, order_by: str = "created") -> list[NameMapping]:
        """List mappings.

        Args:
            order_by: "created", "confidence" (highest first), "last_used"
                (most recent first) or "pattern"

        Raises:
            ValidationError: If order_by is unknown
        """
        mappings = list(self.context.get_mappings())
        if order_by == "created":
            return mappings
        if order_by == "confidence":
            return sorted(mappings, key=lambda m: m.confidence, reverse=True)
        if order_by == "last_used":
            return sorted(mappings, key=lambda m: m.last_used_at, reverse=True)
        if order_by == "pattern":
            return sorted(mappings, key=lambda m: m.original_pattern)
        raise ValidationError(
            f"Unknown sort order '{order_by}'. Supported: {', '.join(self.SORT_KEYS)}"
        )

    def upsert(self, pattern: str, corrected_name: str) -> Optional[NameMapping]:
        """Learn one pattern -> name correspondence.

        Existing patterns gain one confidence point (capped at 10) and a fresh
        last-used time; the corrected name is replaced only when it differs.
        New patterns start at confidence 1.

        Returns:
            The stored mapping, or None when the pattern is the name itself
        """
        normalized = normalize_pattern(pattern)
        corrected = (corrected_name or "").strip()
        if not normalized or not corrected:
            raise ValidationError("Both pattern and corrected name are required")
        if normalized == corrected.lower():
            return None

        now = datetime.now(UTC)
        existing = self.db.get_mapping_by_pattern(normalized)
        if existing is None:
            return self.db.upsert_mapping(normalized, corrected, MIN_CONFIDENCE, now)

        if existing.corrected_name.lower() == corrected.lower():
            corrected = existing.corrected_name
        confidence = min(max(existing.confidence, MIN_CONFIDENCE) + 1, MAX_CONFIDENCE)
        return self.db.upsert_mapping(normalized, corrected, confidence, now)

    def update_mapping(
        self,
        mapping_id: int,
        original_pattern: Optional[str] = None,
        corrected_name: Optional[str] = None,
    ) -> None:
        """Manually correct a mapping.

        Raises:
            NotFoundError: If the mapping doesn't exist
            ValidationError: If a provided value is blank
        """
        if self.db.get_mapping(mapping_id) is None:
            raise NotFoundError(mapping_not_found(mapping_id))
        if original_pattern is not None and not normalize_pattern(original_pattern):
            raise ValidationError("Pattern cannot be empty")
        if corrected_name is not None and not corrected_name.strip():
            raise ValidationError("Corrected name cannot be empty")

        self.db.update_mapping(
            mapping_id,
            original_pattern=original_pattern,
            corrected_name=corrected_name.strip() if corrected_name is not None else None,
            last_used_at=datetime.now(UTC),
        )
        self.context.invalidate_mappings()

    def delete_mapping(self, mapping_id: int) -> None:
        """Delete a mapping.

        Raises:
            NotFoundError: If the mapping doesn't exist
        """
        if self.db.get_mapping(mapping_id) is None:
            raise NotFoundError(mapping_not_found(mapping_id))
        self.db.delete_mapping(mapping_id)
        self.context.invalidate_mappings()
