"""Unicode-aware normalization for place search queries and suggestion labels.

Accents are removed by NFD decomposition followed by dropping combining marks,
so "São Paulo" and "Sao Paulo" search and compare the same way. The original
label is always what gets displayed; these helpers only build query strings
and comparison keys.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable

_WHITESPACE_RUN = re.compile(r"\s+")


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _is_kept(char: str) -> bool:
    # Unicode letters (L*), digits (N*), whitespace and hyphen survive.
    if char.isspace() or char == "-":
        return True
    return unicodedata.category(char)[0] in {"L", "N"}


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RUN.sub(" ", text).strip()


def normalize_for_query(text: str | None) -> str:
    """Build a search-engine-safe query: no accents, no punctuation, single spaces."""
    if not text:
        return ""
    cleaned = "".join(char if _is_kept(char) else " " for char in strip_accents(text))
    return _collapse_whitespace(cleaned)


def should_fetch_suggestions(raw_text: str | None, min_length: int = 3) -> bool:
    if not raw_text or len(raw_text.strip()) < min_length:
        return False
    return len(normalize_for_query(raw_text)) >= min_length


def suggestion_key(label: str) -> str:
    """Comparison key that ignores case, accents and punctuation."""
    lowered = strip_accents(label).lower()
    cleaned = "".join(char for char in lowered if _is_kept(char))
    return _collapse_whitespace(cleaned)


def deduplicate_labels(labels: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for label in labels:
        key = suggestion_key(label)
        if key in seen:
            continue
        seen.add(key)
        unique.append(label)
    return unique
