"""Text normalization used by the term matcher.

Words are compared in two forms: the lowercased word itself, and a
phone-style form keeping only letters, digits and ``+``.
"""

from __future__ import annotations

import re
from typing import FrozenSet

# Whitespace plus the separators people type inside phone numbers
_WORD_SPLIT_RE = re.compile(r"[\s\-.()]+")
_PHONE_STRIP_RE = re.compile(r"[^a-z0-9+]")
# A formatted number such as "1 (415) 555-5555" or "+1-323-555-5555"
_PHONE_RUN_RE = re.compile(r"\+?\(?\d[\d\s\-.()]*\d")
_PHONE_TERM_RE = re.compile(r"\+?\d+")

_ASCII_LOWER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def normalize_word(text: str) -> str:
    """Lowercase a word for plain prefix comparison.

    Only A-Z are folded, so the result never depends on locale casing rules.
    """
    return text.strip().translate(_ASCII_LOWER)


def phone_normalize(text: str) -> str:
    """Return the phone-style form of a word: letters, digits and ``+`` only."""
    return _PHONE_STRIP_RE.sub("", normalize_word(text))


def is_phone_term(text: str) -> bool:
    """True for a phone-style form made only of digits, optionally led by ``+``."""
    return _PHONE_TERM_RE.fullmatch(text) is not None


def split_into_words(text: str) -> FrozenSet[str]:
    """Split text into a set of normalized words.

    Splits on whitespace and on ``- . ( )``. Empty or whitespace-only input
    yields an empty set.
    """
    if not text:
        return frozenset()
    return frozenset(normalize_word(w) for w in _WORD_SPLIT_RE.split(text) if w)


def phone_runs(text: str) -> FrozenSet[str]:
    """Return the phone-normalized form of every formatted number in `text`.

    ``"Liza 1 (415) 555-5555"`` yields ``{"14155555555"}`` so that a query
    typed without separators still finds a number stored with them.
    """
    if not text:
        return frozenset()
    runs = (phone_normalize(m.group(0)) for m in _PHONE_RUN_RE.finditer(text))
    return frozenset(r for r in runs if r)
