"""Text normalization shared by every keyword heuristic."""

from __future__ import annotations

import re
import unicodedata

_WORD_SPLIT_RE = re.compile(r"[^\w]+", re.UNICODE)


def normalize_text(text: str | None) -> str:
    """Lowercase *text* and strip diacritics (NFD, combining marks removed).

    Total and idempotent: ``normalize_text(normalize_text(x)) == normalize_text(x)``.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text).lower()
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # lower() can emit new decomposable sequences (e.g. "İ"), so settle them
    return "".join(
        ch for ch in unicodedata.normalize("NFD", stripped)
        if not unicodedata.combining(ch)
    )


def words(text: str) -> list[str]:
    """Split *text* into words, dropping punctuation and whitespace."""
    return [w for w in _WORD_SPLIT_RE.split(text) if w]


def word_count(text: str) -> int:
    return len(words(text))
