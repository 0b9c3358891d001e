"""chatsearch MCP server entrypoint using FastMCP.

Exposes conversation/contact/message search to presentation clients.
Run with:
  - chatsearch-mcp
  - or: python -m chatsearch.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP

from chatsearch.config import Settings, load_settings
from chatsearch.logger import configure_logging
from chatsearch.mcp.tools import register_search_tools
from chatsearch.service import SearchService

logger = logging.getLogger(__name__)


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.service: Optional[SearchService] = None

    def init_service(self) -> None:
        """Open storage and the message index from configuration."""
        self.service = SearchService.from_settings(self.settings)
        # A RAM index starts empty on every launch
        if self.settings.search.index_dir is None:
            self.service.rebuild_index()


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("chatsearch MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    configure_logging(settings.app.log_level)
    _state = AppState(settings)
    _state.init_service()
    register_search_tools(mcp, get_state=lambda: _state)
    logger.info("Starting %s (%s transport)", settings.app.name, settings.app.transport)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
