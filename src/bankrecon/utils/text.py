"""Text normalization helpers shared by extraction, matching and learning."""

import re

_WHITESPACE = re.compile(r"\s+")
_WORD_SPLIT = re.compile(r"[^a-z0-9]+")


def normalize_pattern(text: str | None) -> str:
    """Trim, lower-case and collapse internal whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.strip().lower())


def split_words(text: str | None) -> list[str]:
    """Split normalized text on whitespace."""
    normalized = normalize_pattern(text)
    if not normalized:
        return []
    return normalized.split(" ")


def significant_words(text: str | None, min_length: int = 4) -> list[str]:
    """Return whitespace-separated words with at least ``min_length`` characters."""
    return [word for word in split_words(text) if len(word) >= min_length]


def tokenize(text: str | None) -> list[str]:
    """Split text into lower-case alphanumeric tokens, dropping punctuation."""
    normalized = normalize_pattern(text)
    return [token for token in _WORD_SPLIT.split(normalized) if token]
