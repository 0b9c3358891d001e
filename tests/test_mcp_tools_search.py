import json
from typing import Any, Dict, List, Union

import pytest
from fastmcp import Client, FastMCP

from chatsearch.mcp.tools.search import register_search_tools
from chatsearch.service import SearchService


class DummyState:
    def __init__(self, service: Any) -> None:
        self.service = service


def _extract_json_payload(result: Any) -> Union[Dict[str, Any], List[Any], str]:
    if isinstance(result, (dict, str)):
        return result
    # Newer FastMCP returns CallToolResult; older versions a list of content items
    content = getattr(result, "content", result)
    if isinstance(content, list) and content:
        for item in content:
            text = getattr(item, "text", None)
            if isinstance(text, str):
                try:
                    return json.loads(text)
                except json.JSONDecodeError:
                    return text
    raise AssertionError("Unable to extract JSON payload from tool result")


@pytest.mark.asyncio
async def test_search_conversations_tool(
    service: SearchService, with_messages: Dict[str, str]
) -> None:
    service.rebuild_index()
    mcp = FastMCP("test")
    register_search_tools(mcp, get_state=lambda: DummyState(service))

    client = Client(mcp)
    async with client:
        res = await client.call_tool("search_conversations", {"query": "Hello Alice"})

    payload = _extract_json_payload(res)
    assert isinstance(payload, dict)
    assert payload["query"] == "Hello Alice"
    assert payload["is_empty"] is False
    # "hello" names no conversation, so only the message matches
    assert payload["conversations"] == []
    assert payload["contacts"] == []
    assert len(payload["messages"]) == 1
    conversation = payload["messages"][0]["conversation"]
    assert conversation["id"] == with_messages["alice"]
    assert conversation["kind"] == "direct"
    assert conversation["name"] == "Alice"
    assert "<b>Alice</b>" in payload["messages"][0]["snippet"]


@pytest.mark.asyncio
async def test_search_conversations_tool_empty_query(service: SearchService) -> None:
    mcp = FastMCP("test")
    register_search_tools(mcp, get_state=lambda: DummyState(service))

    async with Client(mcp) as client:
        res = await client.call_tool("search_conversations", {"query": "   "})

    payload = _extract_json_payload(res)
    assert isinstance(payload, dict)
    assert payload["is_empty"] is True
    assert payload["query"] == ""


@pytest.mark.asyncio
async def test_rebuild_message_index_tool(
    service: SearchService, with_messages: Dict[str, str]
) -> None:
    mcp = FastMCP("test")
    register_search_tools(mcp, get_state=lambda: DummyState(service))

    async with Client(mcp) as client:
        res = await client.call_tool("rebuild_message_index", {})

    payload = _extract_json_payload(res)
    assert isinstance(payload, dict)
    assert payload == {"ok": True, "indexed": 4}


@pytest.mark.asyncio
async def test_health_tool() -> None:
    from chatsearch.mcp.server import mcp

    async with Client(mcp) as client:
        res = await client.call_tool("health", {})

    assert _extract_json_payload(res) == "ok"
