"""waffles-mcp - run waffles.sh against remote hosts from MCP clients.

Environment variables:
    WMCP_WAFFLES_EXEC: default waffles.sh path
    WMCP_OUTPUT_TAIL: bytes of output kept for error reports
    WMCP_DEBUG: include debug info in responses
    WMCP_LOG_DEBUG: debug log to a temp file

Usage:
    uvx waffles-mcp
"""

__version__ = "0.1.0"

from .app import main

__all__ = ["__version__", "main"]
