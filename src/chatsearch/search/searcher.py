"""Generic multi-term prefix matcher.

A `Searcher` is parameterized by an indexing function producing the text
blob that represents everything searchable about an item (names, numbers,
titles). Every query term must match at least one indexed word:

* a term matches a word that starts with it (case-insensitive), or
* a term made only of digits, optionally led by ``+`` (formatting
  ignored), matches a word whose phone-normalized form contains it, so
  ``"323"`` and ``"+1-323"`` both find ``"+13235555555"``. Terms mixing
  letters and digits stay prefix-only.
"""

from __future__ import annotations

from typing import Callable, FrozenSet, Generic, Iterable, Iterator, Protocol, TypeVar

from .normalizer import is_phone_term, phone_normalize, phone_runs, split_into_words

T = TypeVar("T")


class Indexable(Protocol):
    """Minimal protocol for items that can describe their own searchable text."""

    def index_text(self) -> str: ...


def _term_matches_word(term: str, word: str) -> bool:
    if word.startswith(term):
        return True
    phone_term = phone_normalize(term)
    if not is_phone_term(phone_term):
        return False
    phone_word = phone_normalize(word)
    return bool(phone_word) and phone_term in phone_word


def _terms_match(terms: FrozenSet[str], words: FrozenSet[str]) -> bool:
    return all(any(_term_matches_word(t, w) for w in words) for t in terms)


def index_words(text: str) -> FrozenSet[str]:
    """Word set searched for an indexed text blob."""
    return split_into_words(text) | phone_runs(text)


class Searcher(Generic[T]):
    """Boolean matcher over items of type ``T``.

    Parameters
    ----------
    indexer:
        Callable returning the searchable text of an item.

    Items must not be ``None``; passing one is a caller bug and raises
    ``ValueError``. Matching is pure, so one instance may be shared across
    threads.
    """

    def __init__(self, indexer: Callable[[T], str]) -> None:
        self._indexer = indexer

    @staticmethod
    def for_indexable() -> "Searcher[Indexable]":
        """Build a searcher for items implementing `Indexable`."""
        return Searcher(lambda item: item.index_text())

    def matches(self, item: T, query: str) -> bool:
        """Return True if every term of `query` matches a word of `item`."""
        if item is None:
            raise ValueError("Searcher.matches() requires an item, got None")
        query = query.strip()
        if not query:
            return False
        terms = split_into_words(query)
        if not terms:
            return False
        return _terms_match(terms, index_words(self._indexer(item)))

    def filter(self, items: Iterable[T], query: str) -> Iterator[T]:
        """Yield the items matching `query`, preserving input order."""
        for item in items:
            if self.matches(item, query):
                yield item
