"""Term matching, result assembly and the full-text message index."""

from .base_search import (
    ContactRecord,
    ConversationKind,
    ConversationRecord,
    IndexableMessage,
    MessageHit,
)
from .conversation_searcher import ConversationSearcher
from .results import (
    ContactSearchResult,
    ConversationSearchResult,
    MessageSearchResult,
    SearchResultSet,
    SearchSection,
)
from .searcher import Indexable, Searcher

__all__ = [
    "ContactRecord",
    "ConversationKind",
    "ConversationRecord",
    "IndexableMessage",
    "MessageHit",
    "ConversationSearcher",
    "ContactSearchResult",
    "ConversationSearchResult",
    "MessageSearchResult",
    "SearchResultSet",
    "SearchSection",
    "Indexable",
    "Searcher",
]
