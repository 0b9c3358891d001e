"""Logging setup shared by the library and the MCP server.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed by the process entrypoint through :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send chatsearch logs to stderr at the given level.

    stdout is reserved for the MCP stdio transport.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("chatsearch")
    root.handlers[:] = [handler]
    root.setLevel(numeric)
    root.propagate = False
