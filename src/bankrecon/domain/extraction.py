"""Narration pattern extraction.

Bank narrations carry the counterparty name between transfer codes, account
numbers and boilerplate. Each extraction method below is a pure function
``narration -> list of normalized candidates``. The methods are tried in
priority order; for plain extraction the first one that produces a plausible
candidate wins, while store resolution keeps going past methods whose
candidates miss.
"""

import re
from typing import Callable, Iterator, NamedTuple, Optional

from bankrecon.utils.text import normalize_pattern

MIN_CANDIDATE_LENGTH = 4
MAX_CANDIDATE_LENGTH = 100

# Bank and branch-location fragments that show up between colons in cheque
# deposit narrations ("...WBO HYD: COMPANY NAME :UNION BANK")
DELIMITER_DENYLIST = (
    "union bank",
    "state bank",
    "canara bank",
    "punjab national",
    "indian bank",
    "hyderabad",
    "wbo",
    "cts",
    "clg",
)

BOILERPLATE_WORDS = frozenset(
    {
        "neft", "imps", "rtgs", "upi", "ft", "chq", "cr", "dr", "dep", "hyderabad",
        "cts", "clg", "wbo", "hyd", "tpt", "srr", "ref", "txn", "utr", "trf",
    }
)

_NAME = r"([A-Z][A-Z0-9&.'\s]*?)"

TRANSFER_TEMPLATES = (
    # NEFT CR-SBIN0002776-MERCURE MEDI SURGE-SBINN52025110406690875
    # FT - CR - 50200114785646 - SREE LAKSHMI GAYATRI HOSPITALS PVT LTD
    re.compile(
        r"\b(?:NEFT|IMPS|RTGS|UPI|FT)(?:[\s\-]*(?:CR|DR)\b)?[\s\-/]+[A-Z]*\d[A-Z0-9]*[\s\-/]+"
        + _NAME
        + r"\s*(?:[\-/]|$)",
        re.IGNORECASE,
    ),
    # UPI-YASHIKA SURGICALS-KEERAM1@YBL
    re.compile(
        r"\bUPI[\s\-/]+(?:(?:CR|DR)[\s\-/]+)?(?:\d+[\s\-/]+)?" + _NAME + r"[\s\-/]+[\w.]+@[\w.]+",
        re.IGNORECASE,
    ),
    # CHQ 004512 ANIL TRADERS - 998877
    re.compile(
        r"\b(?:NEFT|IMPS|RTGS|UPI|FT|CHQ)(?:[\s\-]*(?:CR|DR|DEP|NO)\b)?[\s\-:.]+\d+[\s\-]+"
        + _NAME
        + r"(?:\s*-\s*\d+|\s*$)",
        re.IGNORECASE,
    ),
    # SRI RAJA RAJESHWARI ORTHO PLUS CR - 50200090155304 - SRI BALAJI PHARMACY
    re.compile(r"\b(?:CR|DR)\s*-\s*\d{6,}\s*-\s*" + _NAME + r"\s*(?:-|$)", re.IGNORECASE),
)

_DELIMITED = re.compile(r":\s*([A-Z][\w&.'\s]*?)\s*(?=:)", re.IGNORECASE)
_TOKEN_SPLIT = re.compile(r"[\s\-:/]+")
_CODE_TOKEN = re.compile(r"[A-Z]{1,4}N?\d+", re.IGNORECASE)
_LONG_DIGITS = re.compile(r"\d{6,}")
_MASKED = re.compile(r"X{4,}\d*", re.IGNORECASE)

BOILERPLATE_MARKERS = (
    re.compile(r"\bREF\s*NO\b[:.\-]?\s*[A-Z0-9]+", re.IGNORECASE),
    re.compile(r"\bTXN\s*ID\b[:.\-]?\s*[A-Z0-9]+", re.IGNORECASE),
    re.compile(r"\bUTR\b[:.\-]?\s*[A-Z0-9]+", re.IGNORECASE),
    re.compile(r"\bCHQ\s*NO\b[:.\-]?\s*[A-Z0-9]+", re.IGNORECASE),
    re.compile(r"\b[A-Z]{2,4}\d{6,}\b", re.IGNORECASE),
    re.compile(r"\b[A-Z]{2,4}N\d{10,}\b", re.IGNORECASE),
    re.compile(r"\b\d{10,}\b"),
    re.compile(r"X{6,}\d*", re.IGNORECASE),
    re.compile(r"@[A-Z0-9.]+", re.IGNORECASE),
)


class NarrationMatch(NamedTuple):
    """A store hit found while extracting from a narration."""

    corrected_name: str
    candidate: str
    method: str


def is_plausible(candidate: str) -> bool:
    """Check the 4-100 character bound for a normalized candidate."""
    return MIN_CANDIDATE_LENGTH <= len(candidate) <= MAX_CANDIDATE_LENGTH


def _unique(candidates: list[str]) -> list[str]:
    seen = set()
    result = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.add(candidate)
            result.append(candidate)
    return result


def _is_denylisted(candidate: str) -> bool:
    return any(re.search(rf"\b{re.escape(word)}\b", candidate) for word in DELIMITER_DENYLIST)


def extract_delimited(narration: str) -> list[str]:
    """Text enclosed between two colons, minus bank and location fragments."""
    candidates = []
    for match in _DELIMITED.finditer(narration or ""):
        candidate = normalize_pattern(match.group(1))
        if is_plausible(candidate) and not _is_denylisted(candidate):
            candidates.append(candidate)
    return _unique(candidates)


def extract_template_names(narration: str) -> list[str]:
    """Name segments captured by the transfer-code templates, in template order."""
    candidates = []
    for template in TRANSFER_TEMPLATES:
        match = template.search(narration or "")
        if match is None:
            continue
        candidate = normalize_pattern(match.group(1).strip(" .'"))
        if is_plausible(candidate) and candidate not in BOILERPLATE_WORDS:
            candidates.append(candidate)
    return _unique(candidates)


def is_noise_token(token: str) -> bool:
    """Tokens that never belong to a party name: numbers, codes, handles."""
    if len(token) <= 2 or token.isdigit():
        return True
    if _CODE_TOKEN.fullmatch(token) or _LONG_DIGITS.search(token) or _MASKED.fullmatch(token):
        return True
    if "@" in token:
        return True
    return token.lower() in BOILERPLATE_WORDS


def window_tokens(narration: str) -> list[str]:
    """Lower-cased narration tokens that survive the noise filter."""
    tokens = _TOKEN_SPLIT.split(narration or "")
    return [token.lower() for token in tokens if token and not is_noise_token(token)]


def extract_token_windows(
    narration: str,
    min_size: int = 2,
    max_size: int = 4,
    min_length: int = 6,
    max_length: int = 80,
) -> list[str]:
    """Contiguous windows of surviving tokens, shortest first at each position."""
    tokens = window_tokens(narration)
    candidates = []
    for start in range(len(tokens)):
        for size in range(min_size, max_size + 1):
            if start + size > len(tokens):
                break
            phrase = " ".join(tokens[start:start + size])
            if min_length <= len(phrase) < max_length and is_plausible(phrase):
                candidates.append(phrase)
    return _unique(candidates)


def clean_description(narration: str) -> str:
    """Strip reference markers, codes, digit runs and handles from a narration."""
    cleaned = narration or ""
    for marker in BOILERPLATE_MARKERS:
        cleaned = marker.sub(" ", cleaned)
    cleaned = re.sub(r"(?:\s*-\s*)+", " - ", cleaned)
    cleaned = normalize_pattern(cleaned)
    return cleaned.strip(" -:/")


def extract_cleaned_description(narration: str) -> list[str]:
    """The cleaned narration, when more than 5 characters remain."""
    cleaned = clean_description(narration)
    if len(cleaned) > 5 and is_plausible(cleaned):
        return [cleaned]
    return []


ExtractionMethod = Callable[[str], list[str]]

EXTRACTION_METHODS: tuple[tuple[str, ExtractionMethod], ...] = (
    ("delimiter", extract_delimited),
    ("template", extract_template_names),
    ("token-window", extract_token_windows),
    ("cleaned", extract_cleaned_description),
)


# A miss on these methods' candidates ends narration resolution
STOPPING_METHODS = frozenset({"delimiter"})


def iter_productive_methods(narration: str) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(method, candidates)`` lazily for methods that produce candidates."""
    for name, method in EXTRACTION_METHODS:
        candidates = method(narration)
        if candidates:
            yield name, candidates


def extract_candidates(narration: str) -> list[str]:
    """Candidates from the first extraction method that produces any."""
    for _, candidates in iter_productive_methods(narration):
        return candidates
    return []


def resolve_narration(
    narration: str, resolve: Callable[[str], Optional[str]]
) -> Optional[NarrationMatch]:
    """Interleave extraction with store lookup.

    Candidates of each productive method are checked one at a time and the
    first hit is returned. A miss falls through to the next method, except
    after the delimiter method: a colon-delimited name is authoritative, so
    its miss ends the search.
    """
    for method, candidates in iter_productive_methods(narration):
        for candidate in candidates:
            corrected = resolve(candidate)
            if corrected and corrected.strip():
                return NarrationMatch(corrected, candidate, method)
        if method in STOPPING_METHODS:
            return None
    return None
