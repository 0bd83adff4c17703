"""Provisioner tool handlers.

Handles waffles_validate and waffles_apply.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from mcp.types import TextContent

from .base import ToolContext, ToolHandler
from ..errors import WafflesError
from ..response_formatter import DebugInfo, ResponseData, get_formatter

__all__ = ["ApplyHandler", "CollectingOutput", "ValidateHandler"]

logger = logging.getLogger(__name__)


class CollectingOutput:
    """Output sink that keeps every line for the tool response."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def accept(self, line: str) -> None:
        logger.debug(f"[waffles] {line}")
        self.lines.append(line)


class ValidateHandler(ToolHandler):
    """waffles_validate handler."""

    @property
    def name(self) -> str:
        return "waffles_validate"

    async def handle(
        self,
        arguments: dict[str, Any],
        ctx: ToolContext,
    ) -> list[TextContent]:
        warnings, errors = ctx.provisioner.validate(arguments)
        logger.debug(f"Validation: {len(warnings)} warnings, {len(errors)} errors")
        text = get_formatter().format_validation(warnings, errors)
        return [TextContent(type="text", text=text)]


class ApplyHandler(ToolHandler):
    """waffles_apply handler."""

    @property
    def name(self) -> str:
        return "waffles_apply"

    async def handle(
        self,
        arguments: dict[str, Any],
        ctx: ToolContext,
    ) -> list[TextContent]:
        output = CollectingOutput()
        start = time.monotonic()
        data = ResponseData()

        try:
            await ctx.provisioner.apply(output, None, arguments)
        except WafflesError as e:
            logger.warning(f"waffles_apply failed: {type(e).__name__}: {e}")
            data.success = False
            data.error = str(e)

        data.output = output.lines
        data.debug_info = DebugInfo(
            duration_sec=time.monotonic() - start,
            line_count=len(output.lines),
            log_file=ctx.config.log_file,
        )
        text = get_formatter().format(data, debug=ctx.config.debug)
        return [TextContent(type="text", text=text)]
