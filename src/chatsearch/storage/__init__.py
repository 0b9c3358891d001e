"""SQLAlchemy-backed storage for contacts, conversations and messages."""

from .database import get_engine, init_db, make_session_factory, read_scope, session_scope
from .repositories import SqlContactDirectory, SqlConversationStore, iter_messages

__all__ = [
    "get_engine",
    "init_db",
    "make_session_factory",
    "read_scope",
    "session_scope",
    "SqlContactDirectory",
    "SqlConversationStore",
    "iter_messages",
]
