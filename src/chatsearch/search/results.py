"""Immutable search results and the section/row view used by presenters."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .base_search import ConversationRecord


@dataclass(frozen=True, slots=True)
class ConversationSearchResult:
    """An existing conversation matching the query."""

    conversation: ConversationRecord
    snippet: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ContactSearchResult:
    """A contact matching the query who has no existing conversation."""

    identifier: str
    display_name: str
    snippet: Optional[str] = None


@dataclass(frozen=True, slots=True)
class MessageSearchResult:
    """A message whose body matched the query."""

    conversation: ConversationRecord
    message_id: str
    snippet: Optional[str] = None


SearchResult = Union[ConversationSearchResult, ContactSearchResult, MessageSearchResult]


class SearchSection(enum.IntEnum):
    """Sections of a rendered result list, in display order."""

    NO_RESULTS = 0
    CONVERSATIONS = 1
    CONTACTS = 2
    MESSAGES = 3


_SECTION_TITLES = {
    SearchSection.CONVERSATIONS: "conversations",
    SearchSection.CONTACTS: "contacts",
    SearchSection.MESSAGES: "messages",
}


@dataclass(frozen=True, slots=True)
class SearchResultSet:
    """Snapshot of one search: the query text plus three ordered result lists.

    `conversations` never repeats a conversation, and `contacts` never holds a
    contact whose direct conversation is already listed. A message may belong
    to a conversation that is also listed in `conversations`.
    """

    query: str
    conversations: Tuple[ConversationSearchResult, ...] = ()
    contacts: Tuple[ContactSearchResult, ...] = ()
    messages: Tuple[MessageSearchResult, ...] = ()

    @staticmethod
    def empty() -> "SearchResultSet":
        """The canonical result set returned for an empty query."""
        return EMPTY_RESULT_SET

    @property
    def is_empty(self) -> bool:
        return not (self.conversations or self.contacts or self.messages)

    @property
    def count(self) -> int:
        return len(self.conversations) + len(self.contacts) + len(self.messages)

    def section(self, section: SearchSection) -> Tuple[SearchResult, ...]:
        if section is SearchSection.CONVERSATIONS:
            return self.conversations
        if section is SearchSection.CONTACTS:
            return self.contacts
        if section is SearchSection.MESSAGES:
            return self.messages
        return ()

    def row_count(self, section: SearchSection) -> int:
        """Rows to render for `section`; the no-results row shows only when empty."""
        if section is SearchSection.NO_RESULTS:
            return 1 if self.is_empty else 0
        return len(self.section(section))

    def section_title(self, section: SearchSection) -> Optional[str]:
        """Header key for a non-empty result section, else None."""
        if section is SearchSection.NO_RESULTS or not self.section(section):
            return None
        return _SECTION_TITLES[section]

    def result_at(self, section: SearchSection, row: int) -> SearchResult:
        """Return the result at `row` of `section`.

        Raises IndexError for the no-results section, a negative row or a row
        past the end of the section.
        """
        items = self.section(section)
        if row < 0 or row >= len(items):
            raise IndexError(f"No {section.name.lower()} result at row {row} (have {len(items)})")
        return items[row]

    def truncated(self, limit: Optional[int]) -> "SearchResultSet":
        """Copy with every section cut to at most `limit` entries."""
        if limit is None:
            return self
        return SearchResultSet(
            query=self.query,
            conversations=self.conversations[:limit],
            contacts=self.contacts[:limit],
            messages=self.messages[:limit],
        )


EMPTY_RESULT_SET = SearchResultSet(query="")
