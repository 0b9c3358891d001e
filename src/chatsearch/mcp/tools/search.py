"""Conversation search tools for FastMCP.

Expose `SearchService.search` to presentation clients, serializing the
result set into plain JSON-friendly dicts.
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from fastmcp import FastMCP

from chatsearch.search.base_search import ConversationRecord
from chatsearch.search.results import SearchResultSet


def _serialize_conversation(conversation: ConversationRecord) -> Dict[str, Any]:
    return {
        "id": conversation.identifier,
        "kind": conversation.kind.value,
        "name": conversation.display_name,
        "participants": list(conversation.participant_identifiers),
    }


def serialize_result_set(results: SearchResultSet) -> Dict[str, Any]:
    return {
        "query": results.query,
        "is_empty": results.is_empty,
        "conversations": [
            {"conversation": _serialize_conversation(r.conversation), "snippet": r.snippet}
            for r in results.conversations
        ],
        "contacts": [
            {"identifier": r.identifier, "name": r.display_name, "snippet": r.snippet}
            for r in results.contacts
        ],
        "messages": [
            {
                "conversation": _serialize_conversation(r.conversation),
                "message_id": r.message_id,
                "snippet": r.snippet,
            }
            for r in results.messages
        ],
    }


def register_search_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register search tools on the given FastMCP instance.

    The `get_state` callable should return an object with attribute
    `service` providing `search(query)` and `rebuild_index()`.
    """

    def _service(state_obj: Any) -> Any:
        service = getattr(state_obj, "service", None)
        if service is None:
            raise RuntimeError("Search service is not initialized.")
        return service

    @mcp.tool
    def search_conversations(query: str) -> Dict[str, Any]:
        """Search conversations, contacts without a conversation, and messages.

        Parameters
        ----------
        query: str
            Free text. Every word must prefix-match a name, group title or
            phone number; message bodies are searched through the full-text
            index. An empty query returns an empty result.
        """
        return serialize_result_set(_service(get_state()).search(query))

    @mcp.tool
    def rebuild_message_index() -> Dict[str, Any]:
        """Re-index every stored message body."""
        count = _service(get_state()).rebuild_index()
        return {"ok": True, "indexed": count}
