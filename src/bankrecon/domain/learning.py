"""Learning engine: turn a confirmed party name into narration mappings."""

import re
from typing import Optional

from bankrecon.domain.context import ReconContext
from bankrecon.domain.entities import LearningReport, Transaction
from bankrecon.domain.errors import LearningFailure
from bankrecon.domain.extraction import (
    clean_description,
    extract_delimited,
    extract_template_names,
    extract_token_windows,
    is_plausible,
)
from bankrecon.domain.mapping import MappingService
from bankrecon.logging_config import get_logger
from bankrecon.utils.text import normalize_pattern, tokenize

logger = get_logger(__name__)

_SEPARATORS = re.compile(r"[\s\-:]+")


def _name_words(name: str) -> set[str]:
    return {token for token in tokenize(name) if len(token) > 3}


def shares_name_word(pattern: str, name_words: set[str]) -> bool:
    """True when the pattern contains at least one of the name's long words."""
    return bool(name_words & {token for token in tokenize(pattern) if len(token) > 3})


def find_name_in_narration(narration: str, name: str) -> Optional[str]:
    """Find the longest run of the name's words as written in the narration.

    "Mercure Medi Surge Pvt Ltd" against "...-MERCURE MEDI SURGE-..." yields
    "mercure medi surge".
    """
    words = [token for token in tokenize(name) if len(token) > 2]
    for size in range(len(words), 0, -1):
        for start in range(len(words) - size + 1):
            run = words[start:start + size]
            expression = r"\b" + r"[\s\-:]+".join(re.escape(word) for word in run) + r"\b"
            match = re.search(expression, narration, re.IGNORECASE)
            if match:
                found = normalize_pattern(_SEPARATORS.sub(" ", match.group(0)))
                if len(found) > 3:
                    return found
    return None


def edge_windows(cleaned: str) -> list[str]:
    """First and last 2-4 word phrases of a cleaned narration."""
    words = [word for word in cleaned.split() if len(word) > 2]
    phrases = []
    if len(words) < 2:
        return phrases
    for size in range(2, min(4, len(words)) + 1):
        phrases.append(" ".join(words[:size]))
    for size in range(2, min(4, len(words)) + 1):
        phrases.append(" ".join(words[-size:]))
    return [phrase for phrase in phrases if len(phrase) > 5]


def derive_patterns(narration: str, confirmed_name: str) -> list[str]:
    """Derive every pattern worth learning from a narration for a confirmed name.

    Six sources are combined: transfer templates, the name as it appears in the
    narration, colon-delimited text, 1-6 token windows, the cleaned narration
    and its leading/trailing word windows. A pattern is kept only when it shares
    a word longer than three characters with the confirmed name.
    """
    narration = (narration or "").strip()
    name_words = _name_words(confirmed_name)
    if not narration or not name_words:
        return []

    derived = list(extract_template_names(narration))
    found = find_name_in_narration(narration, confirmed_name)
    if found:
        derived.append(found)
    derived.extend(extract_delimited(narration))
    derived.extend(extract_token_windows(narration, min_size=1, max_size=6, max_length=100))

    cleaned = clean_description(narration)
    if len(cleaned) > 5:
        derived.append(cleaned)
        derived.extend(edge_windows(cleaned))

    identity = normalize_pattern(confirmed_name)
    patterns = []
    for pattern in derived:
        pattern = normalize_pattern(pattern)
        if pattern in patterns or pattern == identity or not is_plausible(pattern):
            continue
        if shares_name_word(pattern, name_words):
            patterns.append(pattern)
    return patterns


class LearningService:
    """Service that updates the mapping store when a user confirms a name."""

    def __init__(self, context: ReconContext, mapping_service: Optional[MappingService] = None):
        """Initialize learning service.

        Args:
            context: Shared service context
            mapping_service: Mapping service to write through (created if omitted)
        """
        self.context = context
        self.mapping_service = mapping_service or MappingService(context)

    def learn(
        self,
        transaction: Transaction,
        confirmed_name: str,
        previous_name: Optional[str] = None,
    ) -> LearningReport:
        """Learn mappings from a transaction whose party name was confirmed.

        Args:
            transaction: The transaction as it was before the edit
            confirmed_name: Name the user assigned or accepted
            previous_name: Name being replaced; defaults to the transaction's
                current party name

        Returns:
            LearningReport with learned and failed patterns. Individual
            upsert failures are logged and skipped.
        """
        confirmed = (confirmed_name or "").strip()
        if not confirmed:
            return LearningReport(confirmed_name="")
        if previous_name is None:
            previous_name = transaction.party_name

        patterns = derive_patterns(transaction.narration, confirmed)
        previous = normalize_pattern(previous_name)
        if previous and previous != confirmed.lower() and previous not in patterns:
            patterns.append(previous)

        report = self._upsert_all(patterns, confirmed)
        logger.info(
            "Learned %d pattern(s) for '%s' from transaction %s",
            len(report.learned_patterns),
            confirmed,
            transaction.id,
        )
        return report

    def train_from_narration(self, narration: str, party_name: Optional[str]) -> LearningReport:
        """Learn from a narration that arrived already carrying a party name."""
        confirmed = (party_name or "").strip()
        if not confirmed:
            return LearningReport(confirmed_name="")
        return self._upsert_all(derive_patterns(narration, confirmed), confirmed)

    def _upsert_all(self, patterns: list[str], confirmed: str) -> LearningReport:
        learned = []
        failed = []
        for pattern in patterns:
            try:
                if self.mapping_service.upsert(pattern, confirmed) is not None:
                    learned.append(pattern)
            except Exception as exc:  # one bad upsert must not stop the pass
                failure = LearningFailure(pattern, exc)
                logger.warning("%s", failure)
                failed.append(pattern)
        self.context.invalidate_mappings()
        return LearningReport(
            confirmed_name=confirmed,
            learned_patterns=tuple(learned),
            failed_patterns=tuple(failed),
        )
