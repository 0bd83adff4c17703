"""waffles-mcp server.

Exposes the waffles provisioner to MCP clients over stdio.

Environment variables:
    WMCP_WAFFLES_EXEC: default waffles.sh path
    WMCP_OUTPUT_TAIL: bytes of output kept for error reports (default 8192)
    WMCP_DEBUG: include debug info in responses (default false)
    WMCP_LOG_DEBUG: debug log to a temp file (default false)

Usage:
    uvx waffles-mcp
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from .config import get_config
from .handlers import ApplyHandler, ToolContext, ToolHandler, ValidateHandler
from .provisioner import ResourceProvisioner
from .response_formatter import format_error_response
from .tool_schema import SUPPORTED_TOOLS, TOOL_DESCRIPTIONS, create_tool_schema

__all__ = ["create_server"]

logger = logging.getLogger(__name__)


def _get_handler(name: str) -> ToolHandler | None:
    if name == "waffles_validate":
        return ValidateHandler()
    if name == "waffles_apply":
        return ApplyHandler()
    return None


def create_server(provisioner: ResourceProvisioner | None = None) -> Server:
    """Create the MCP Server instance.

    Args:
        provisioner: Provisioner to use (optional, built from config by default)
    """
    config = get_config()
    provisioner = provisioner or ResourceProvisioner(config)
    server = Server("waffles-mcp")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        tools = [
            Tool(
                name=name,
                description=TOOL_DESCRIPTIONS[name],
                inputSchema=create_tool_schema(name),
            )
            for name in SUPPORTED_TOOLS
        ]
        logger.debug(f"[MCP] list_tools called, returning {[t.name for t in tools]}")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Call a tool."""
        logger.debug(
            f"[MCP] call_tool request:\n"
            f"  Tool: {name}\n"
            f"  Arguments: {json.dumps(arguments, ensure_ascii=False, default=str)}"
        )

        handler = _get_handler(name)
        if handler is None:
            return format_error_response(f"Unknown tool '{name}'")

        ctx = ToolContext(config=config, provisioner=provisioner)

        try:
            return await handler.handle(arguments or {}, ctx)

        except asyncio.CancelledError:
            logger.info(f"Tool '{name}' cancelled")
            raise

        except Exception as e:
            logger.error(f"Tool '{name}' failed: type={type(e).__name__}, msg={e}")
            return format_error_response(str(e))

    return server
