"""Custom exception hierarchy for chatsearch.

These exceptions allow callers to discriminate error categories
and handle them appropriately while preserving the original context.
"""

from __future__ import annotations


class ChatSearchError(Exception):
    """Base class for all chatsearch exceptions."""


class ConfigError(ChatSearchError):
    """Raised when configuration loading or validation fails."""


class StorageError(ChatSearchError):
    """Raised when the storage layer encounters an error (DB, index files, etc.)."""


class CollaboratorUnavailableError(StorageError):
    """Raised when a contact directory, conversation store or message index cannot be read.

    Propagated to the caller as a failed search; no partial result set is built.
    """


class SearchError(ChatSearchError):
    """Raised for search indexing/query issues."""


class MalformedRecordError(SearchError):
    """Raised for a single unusable contact, conversation or message record.

    The conversation searcher skips the offending candidate and keeps going.
    """
