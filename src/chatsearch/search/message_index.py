"""Full-text message index built on Whoosh.

Message bodies are indexed with a lowercasing analyzer (no stemming, no stop
words). Queries AND all of their terms and match each term as a word prefix;
hits come back newest first with ``<b>`` emphasis around matched words.

The index lives in RAM unless a directory is given. `snapshot()` opens a
point-in-time view so one search sees a consistent set of messages even while
new ones are being indexed.
"""

from __future__ import annotations

import html
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional

from whoosh import highlight, sorting
from whoosh.analysis import StandardAnalyzer
from whoosh.fields import DATETIME, ID, TEXT, Schema
from whoosh.filedb.filestore import FileStorage, RamStorage
from whoosh.index import EmptyIndexError, Index, LockError
from whoosh.query import And, Prefix, Query
from whoosh.searching import Searcher as WhooshSearcher
from whoosh.writing import CLEAR

from chatsearch.exceptions import CollaboratorUnavailableError

from .base_search import BaseMessageIndex, IndexableMessage, MessageHit

logger = logging.getLogger(__name__)

DEFAULT_SNIPPET_CHARS = 200

_BACKEND_ERRORS = (OSError, LockError, EmptyIndexError)


class _BoldFormatter(highlight.Formatter):
    """Wraps matched words in ``<b>`` tags; all other text is HTML-escaped."""

    between = "…"

    def _text(self, text: str) -> str:
        return html.escape(text, quote=False)

    def format_token(self, text: str, token: Any, replace: bool = False) -> str:
        return "<b>%s</b>" % self._text(highlight.get_text(text, token, replace))


def _make_schema() -> Schema:
    return Schema(
        message_id=ID(stored=True, unique=True, sortable=True),
        conversation_id=ID(stored=True),
        body=TEXT(stored=True, analyzer=StandardAnalyzer(stoplist=None)),
        sent_at=DATETIME(stored=True, sortable=True),
    )


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    cut = text[:limit]
    last_space = cut.rfind(" ")
    if last_space > limit // 2:
        cut = cut[:last_space]
    return cut + "…"


class MessageIndexSnapshot:
    """Read-only, point-in-time view of a `WhooshMessageIndex`."""

    def __init__(self, index: "WhooshMessageIndex", searcher: WhooshSearcher) -> None:
        self._index = index
        self._searcher = searcher

    def search_messages(self, query: str, *, limit: Optional[int] = None) -> List[MessageHit]:
        return self._index._run_query(self._searcher, query, limit=limit)


class WhooshMessageIndex(BaseMessageIndex):
    """Message index stored in RAM or under `index_dir`.

    Parameters
    ----------
    index_dir: Path | None
        Directory for an on-disk index; created if missing. None keeps the
        index in memory.
    snippet_chars: int
        Upper bound for snippet length.
    """

    def __init__(
        self, index_dir: Optional[Path] = None, *, snippet_chars: int = DEFAULT_SNIPPET_CHARS
    ) -> None:
        self.index_dir = index_dir
        self.snippet_chars = snippet_chars
        self._schema = _make_schema()
        self._analyzer = self._schema["body"].analyzer
        try:
            if index_dir is None:
                self._storage = RamStorage()
            else:
                self._storage = FileStorage(str(index_dir)).create()
            if self._storage.index_exists():
                self._ix: Index = self._storage.open_index()
            else:
                self._ix = self._storage.create_index(self._schema)
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Cannot open message index: {exc}") from exc

    # ----- Writing -----

    def index_messages(self, messages: Iterable[IndexableMessage]) -> int:
        count = 0
        try:
            with self._ix.writer() as writer:
                for m in messages:
                    writer.update_document(
                        message_id=m.message_id,
                        conversation_id=m.conversation_id,
                        body=m.body or "",
                        sent_at=m.sent_at,
                    )
                    count += 1
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Cannot write message index: {exc}") from exc
        logger.debug("Indexed %d messages", count)
        return count

    def delete_messages(self, ids: Iterable[str]) -> None:
        try:
            with self._ix.writer() as writer:
                for message_id in ids:
                    writer.delete_by_term("message_id", message_id)
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Cannot write message index: {exc}") from exc

    def replace_all(self, messages: Iterable[IndexableMessage]) -> int:
        """Replace every indexed message with `messages` in a single commit.

        Readers keep seeing the previous contents until the commit. If
        `messages` raises, the writer is cancelled and the previous contents
        are left untouched.
        """
        count = 0
        try:
            writer = self._ix.writer()
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Cannot write message index: {exc}") from exc
        try:
            for m in messages:
                writer.add_document(
                    message_id=m.message_id,
                    conversation_id=m.conversation_id,
                    body=m.body or "",
                    sent_at=m.sent_at,
                )
                count += 1
        except _BACKEND_ERRORS as exc:
            writer.cancel()
            raise CollaboratorUnavailableError(f"Cannot write message index: {exc}") from exc
        except Exception:
            writer.cancel()
            raise
        try:
            writer.commit(mergetype=CLEAR)
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Cannot write message index: {exc}") from exc
        logger.debug("Replaced message index with %d messages", count)
        return count

    def clear(self) -> None:
        """Drop every indexed message."""
        try:
            self._ix.writer().commit(mergetype=CLEAR)
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Cannot reset message index: {exc}") from exc

    def doc_count(self) -> int:
        return self._ix.doc_count()

    # ----- Reading -----

    @contextmanager
    def snapshot(self) -> Iterator[MessageIndexSnapshot]:
        """Open a point-in-time view, closed on exit."""
        try:
            searcher = self._ix.searcher()
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Cannot read message index: {exc}") from exc
        try:
            yield MessageIndexSnapshot(self, searcher)
        finally:
            searcher.close()

    def search_messages(self, query: str, *, limit: Optional[int] = None) -> List[MessageHit]:
        with self.snapshot() as snap:
            return snap.search_messages(query, limit=limit)

    def _build_query(self, query: str) -> Optional[Query]:
        # Same tokenization as the indexed bodies; raw input never reaches a parser
        terms = list(dict.fromkeys(t.text for t in self._analyzer(query)))
        if not terms:
            return None
        return And([Prefix("body", t) for t in terms])

    def _run_query(
        self, searcher: WhooshSearcher, query: str, *, limit: Optional[int] = None
    ) -> List[MessageHit]:
        q = self._build_query(query)
        if q is None:
            return []
        newest_first = sorting.MultiFacet(
            [sorting.FieldFacet("sent_at", reverse=True), sorting.FieldFacet("message_id")]
        )
        try:
            results = searcher.search(q, limit=limit, sortedby=newest_first)
        except _BACKEND_ERRORS as exc:
            raise CollaboratorUnavailableError(f"Message search failed: {exc}") from exc
        results.fragmenter = highlight.ContextFragmenter(maxchars=self.snippet_chars, surround=40)
        results.formatter = _BoldFormatter()

        out: List[MessageHit] = []
        for hit in results:
            body = hit.get("body", "") or ""
            snippet = hit.highlights("body", top=2) or html.escape(
                _truncate(body, self.snippet_chars), quote=False
            )
            out.append(
                MessageHit(
                    message_id=hit["message_id"],
                    conversation_id=hit["conversation_id"],
                    snippet=snippet,
                )
            )
        return out
