"""Search entry point wiring storage, the message index and the searcher.

Each call to `SearchService.search` runs the conversation, contact and
message searches against one database read transaction and one message
index snapshot, both released on every exit path.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from chatsearch.config import Settings
from chatsearch.search.conversation_searcher import ConversationSearcher
from chatsearch.search.message_index import WhooshMessageIndex
from chatsearch.search.results import SearchResultSet
from chatsearch.storage.database import (
    get_engine,
    init_db,
    make_session_factory,
    read_scope,
)
from chatsearch.storage.repositories import (
    SqlContactDirectory,
    SqlConversationStore,
    iter_messages,
)

logger = logging.getLogger(__name__)


class SearchService:
    """Runs snapshot-consistent searches over stored conversations and messages."""

    def __init__(
        self,
        settings: Settings,
        session_factory: sessionmaker[Session],
        message_index: WhooshMessageIndex,
        *,
        searcher: Optional[ConversationSearcher] = None,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self.message_index = message_index
        self.searcher = searcher or ConversationSearcher()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchService":
        """Build the engine, create tables if needed and open the message index."""
        engine = get_engine(settings.database.url, echo=settings.database.echo)
        init_db(engine)
        index = WhooshMessageIndex(
            settings.search.index_dir, snippet_chars=settings.search.snippet_chars
        )
        return cls(settings, make_session_factory(engine), index)

    def search(self, query: str) -> SearchResultSet:
        """Search conversations, contacts and messages for `query`."""
        if not query.strip():
            return SearchResultSet.empty()

        with read_scope(self.session_factory) as session, self.message_index.snapshot() as snap:
            contacts = SqlContactDirectory(session)
            conversations = SqlConversationStore(session, contacts)
            results = self.searcher.search(query, contacts, conversations, snap)
        return results.truncated(self.settings.search.max_results_per_section)

    def rebuild_index(self) -> int:
        """Re-index every stored message from scratch; return the message count.

        The previous index stays searchable until the new one is committed,
        and is kept as is if reading the stored messages fails.
        """
        with read_scope(self.session_factory) as session:
            count = self.message_index.replace_all(iter_messages(session))
        logger.info("Rebuilt message index with %d messages", count)
        return count
