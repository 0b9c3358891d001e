"""Records and collaborator contracts used by the conversation searcher.

The contact directory, conversation store and full-text message index are
external to the matching engine. They are described here as protocols /
abstract classes so tests and storage backends can plug in freely.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple


class ConversationKind(str, enum.Enum):
    DIRECT = "direct"
    GROUP = "group"


@dataclass(frozen=True, slots=True)
class ContactRecord:
    """A known contact: a phone-number-like identifier and its display name."""

    identifier: str
    display_name: str


@dataclass(frozen=True, slots=True)
class ConversationRecord:
    """An existing conversation (thread).

    Attributes
    ----------
    identifier: str
        Stable conversation id.
    kind: ConversationKind
        Direct (one other participant) or group.
    display_name: str
        Group title, or the resolved contact name for direct conversations.
    participant_identifiers: tuple[str, ...]
        Raw identifiers of the other participants.
    """

    identifier: str
    kind: ConversationKind
    display_name: str
    participant_identifiers: Tuple[str, ...] = ()

    @property
    def is_direct(self) -> bool:
        return self.kind is ConversationKind.DIRECT

    @property
    def contact_identifier(self) -> Optional[str]:
        """Identifier of the other participant of a direct conversation."""
        if self.is_direct and self.participant_identifiers:
            return self.participant_identifiers[0]
        return None


@dataclass(frozen=True, slots=True)
class MessageHit:
    """A message returned by the full-text index.

    `snippet` may embed ``<b>...</b>`` around matched terms and is opaque to
    the searcher.
    """

    message_id: str
    conversation_id: str
    snippet: str


@dataclass(frozen=True, slots=True)
class IndexableMessage:
    """Input row for building the message index."""

    message_id: str
    conversation_id: str
    body: str
    sent_at: datetime


class ContactDirectory(Protocol):
    """Enumerates known contacts and resolves display names."""

    def enumerate_contacts(self) -> Iterable[ContactRecord]:
        """Contacts in directory order (alphabetical)."""
        ...

    def display_name(self, identifier: str) -> str:
        """Display name for `identifier`, or ``""`` if unknown."""
        ...


class ConversationStore(Protocol):
    """Enumerates existing conversations, most recently active first."""

    def enumerate_conversations(self) -> Iterable[ConversationRecord]: ...


class MessageSearch(Protocol):
    """Anything that can answer a full-text message query."""

    def search_messages(self, query: str) -> Sequence[MessageHit]: ...


class BaseMessageIndex(ABC):
    """Abstract interface for full-text message index implementations."""

    @abstractmethod
    def index_messages(self, messages: Iterable[IndexableMessage]) -> int:
        """Index or reindex a batch of messages; return how many were written."""

    @abstractmethod
    def delete_messages(self, ids: Iterable[str]) -> None:
        """Remove messages from the index by their IDs."""

    @abstractmethod
    def replace_all(self, messages: Iterable[IndexableMessage]) -> int:
        """Swap the whole index for `messages` in one commit; return the count."""

    @abstractmethod
    def search_messages(self, query: str, *, limit: Optional[int] = None) -> List[MessageHit]:
        """Execute a search query and return hits in index order."""
        raise NotImplementedError
