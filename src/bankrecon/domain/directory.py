"""Directory matching: rank known party names against a narration."""

from typing import Sequence

from bankrecon.domain.context import ReconContext
from bankrecon.domain.errors import ValidationError
from bankrecon.utils.text import tokenize

DEFAULT_MAX_RESULTS = 3
MIN_MATCH_RATIO = 0.5
MIN_NARRATION_LENGTH = 5

# Words that say nothing about which party a name refers to
FILLER_WORDS = frozenset(
    {
        "pvt", "ltd", "limited", "private", "inc", "incorporated", "llp", "llc",
        "and", "the", "for", "from", "with", "co", "company",
    }
)


def party_tokens(name: str) -> list[str]:
    """Significant tokens of a directory name (longer than two characters, no filler)."""
    return [token for token in tokenize(name) if len(token) > 2 and token not in FILLER_WORDS]


def score_party_match(narration_tokens: set[str], name: str) -> float:
    """Share of a party's significant tokens that appear in the narration.

    Returns 0 when fewer than half of the tokens appear.
    """
    tokens = party_tokens(name)
    if not tokens:
        return 0.0
    matched = sum(1 for token in tokens if token in narration_tokens)
    ratio = matched / len(tokens)
    if ratio < MIN_MATCH_RATIO:
        return 0.0
    return ratio


def match_directory(
    narration: str, names: Sequence[str], max_results: int = DEFAULT_MAX_RESULTS
) -> list[str]:
    """Rank directory names by how well they appear in a narration.

    Args:
        narration: Bank narration text
        names: Directory names in directory order
        max_results: Maximum number of names to return

    Returns:
        Up to ``max_results`` names, best score first, ties in directory order
    """
    if max_results < 1:
        raise ValidationError("max_results must be at least 1")
    if not narration or len(narration.strip()) < MIN_NARRATION_LENGTH:
        return []

    narration_tokens = set(tokenize(narration))
    scored = []
    for position, name in enumerate(names):
        if not name or not name.strip():
            continue
        score = score_party_match(narration_tokens, name)
        if score > 0:
            scored.append((-score, position, name.strip()))

    scored.sort()
    return [name for _, _, name in scored[:max_results]]


class DirectoryService:
    """Service for the authoritative party directory."""

    def __init__(self, context: ReconContext):
        """Initialize directory service.

        Args:
            context: Shared service context
        """
        self.context = context
        self.db = context.db

    def list_names(self) -> list[str]:
        return list(self.context.get_directory())

    def add_party(self, name: str) -> int:
        """Add a name to the directory.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the name already exists (case-insensitive)
        """
        if not name or not name.strip():
            raise ValidationError("Party name cannot be empty")
        entry_id = self.db.add_directory_entry(name.strip())
        self.context.invalidate_directory()
        return entry_id

    def remove_party(self, entry_id: int) -> None:
        self.db.remove_directory_entry(entry_id)
        self.context.invalidate_directory()

    def match(self, narration: str, max_results: int | None = None) -> list[str]:
        """Match a narration against the cached directory."""
        if max_results is None:
            max_results = self.context.settings.max_suggestions
        return match_directory(narration, self.context.get_directory(), max_results)
