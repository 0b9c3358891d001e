"""Composite search across conversations, contacts and messages.

Conversations and contacts are matched in memory with `Searcher`; message
bodies are left to the full-text index. The three lists are assembled into
one `SearchResultSet`, with contacts that already have a direct conversation
suppressed.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Set, Tuple, TypeVar

from chatsearch.exceptions import MalformedRecordError

from .base_search import (
    ContactDirectory,
    ContactRecord,
    ConversationRecord,
    ConversationStore,
    MessageSearch,
)
from .results import (
    ContactSearchResult,
    ConversationSearchResult,
    MessageSearchResult,
    SearchResultSet,
)
from .searcher import Searcher

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _skip_malformed(records: Iterable[R], what: str) -> Iterator[R]:
    """Iterate collaborator records, dropping any that fail to load.

    A collaborator signals a bad row by raising MalformedRecordError from its
    iterator. Iteration resumes with the next row, so collaborators wanting
    per-row skipping return an iterator that stays usable after raising
    (a plain generator does not).
    """
    it = iter(records)
    while True:
        try:
            yield next(it)
        except StopIteration:
            return
        except MalformedRecordError as exc:
            logger.warning("Skipping malformed %s record: %s", what, exc)


class ConversationSearcher:
    """Builds a `SearchResultSet` from the three search collaborators.

    Holds no per-search state; concurrent calls with different collaborators
    do not interfere.
    """

    def search(
        self,
        query: str,
        contact_directory: ContactDirectory,
        conversation_store: ConversationStore,
        message_index: MessageSearch,
    ) -> SearchResultSet:
        """Run the conversation, contact and message searches for `query`.

        An empty or whitespace-only query returns `SearchResultSet.empty()`
        without touching any collaborator. Collaborator outages propagate.
        """
        if not query.strip():
            return SearchResultSet.empty()

        conversations, known = self._match_conversations(
            query, contact_directory, conversation_store
        )
        # A contact with a matched direct conversation is listed under conversations only
        covered: Set[str] = {
            r.conversation.contact_identifier
            for r in conversations
            if r.conversation.contact_identifier is not None
        }
        contacts = self._match_contacts(query, contact_directory, covered)
        messages = self._match_messages(query, message_index, known)

        logger.debug(
            "Search %r: %d conversations, %d contacts, %d messages",
            query,
            len(conversations),
            len(contacts),
            len(messages),
        )
        return SearchResultSet(
            query=query,
            conversations=tuple(conversations),
            contacts=tuple(contacts),
            messages=tuple(messages),
        )

    # ----- Conversations -----

    def _conversation_index_text(
        self, conversation: ConversationRecord, contact_directory: ContactDirectory
    ) -> str:
        parts = [conversation.display_name or ""]
        for ident in conversation.participant_identifiers:
            if not ident:
                raise MalformedRecordError(
                    f"conversation {conversation.identifier!r} has an empty participant"
                )
            parts.append(contact_directory.display_name(ident))
            parts.append(ident)
        return " ".join(p for p in parts if p)

    def _match_conversations(
        self,
        query: str,
        contact_directory: ContactDirectory,
        conversation_store: ConversationStore,
    ) -> Tuple[List[ConversationSearchResult], Dict[str, ConversationRecord]]:
        searcher: Searcher[ConversationRecord] = Searcher(
            lambda c: self._conversation_index_text(c, contact_directory)
        )
        results: List[ConversationSearchResult] = []
        known: Dict[str, ConversationRecord] = {}
        for conversation in _skip_malformed(
            conversation_store.enumerate_conversations(), "conversation"
        ):
            if conversation.identifier in known:
                continue
            known[conversation.identifier] = conversation
            try:
                matched = searcher.matches(conversation, query)
            except MalformedRecordError as exc:
                logger.warning("Skipping conversation %s: %s", conversation.identifier, exc)
                continue
            if matched:
                results.append(
                    ConversationSearchResult(
                        conversation=conversation, snippet=conversation.display_name
                    )
                )
        return results, known

    # ----- Contacts -----

    def _match_contacts(
        self, query: str, contact_directory: ContactDirectory, covered: Set[str]
    ) -> List[ContactSearchResult]:
        searcher: Searcher[ContactRecord] = Searcher(
            lambda c: f"{c.display_name} {c.identifier}"
        )
        results: List[ContactSearchResult] = []
        seen: Set[str] = set()
        for contact in _skip_malformed(contact_directory.enumerate_contacts(), "contact"):
            if contact.identifier in covered or contact.identifier in seen:
                continue
            if searcher.matches(contact, query):
                seen.add(contact.identifier)
                results.append(
                    ContactSearchResult(
                        identifier=contact.identifier,
                        display_name=contact.display_name,
                        snippet=contact.identifier,
                    )
                )
        return results

    # ----- Messages -----

    def _match_messages(
        self,
        query: str,
        message_index: MessageSearch,
        known: Dict[str, ConversationRecord],
    ) -> List[MessageSearchResult]:
        results: List[MessageSearchResult] = []
        for hit in message_index.search_messages(query):
            conversation = known.get(hit.conversation_id)
            if conversation is None:
                logger.warning(
                    "Skipping message %s: unknown conversation %s",
                    hit.message_id,
                    hit.conversation_id,
                )
                continue
            results.append(
                MessageSearchResult(
                    conversation=conversation, message_id=hit.message_id, snippet=hit.snippet
                )
            )
        return results
