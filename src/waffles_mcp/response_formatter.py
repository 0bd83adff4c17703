"""MCP response formatter.

Responses use XML-wrapped text, which is easy for LLM clients to read.

Format:
    - <output>: lines relayed from waffles
    - <error>: failure message (with the output tail for execution errors)
    - <warnings>/<errors>: validation results
    - <debug_info>: timing info (debug=True only)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp.types import TextContent


@dataclass
class DebugInfo:
    """Debug info for one tool call."""

    duration_sec: float = 0.0
    line_count: int = 0
    log_file: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "duration_sec": round(self.duration_sec, 3),
            "line_count": self.line_count,
        }
        if self.log_file:
            data["log_file"] = self.log_file
        return data


@dataclass
class ResponseData:
    """Response data."""

    # Relayed output lines
    output: list[str] = field(default_factory=list)

    # Debug info (optional)
    debug_info: DebugInfo | None = None

    success: bool = True

    error: str | None = None


class ResponseFormatter:
    """MCP response formatter.

    Example:
        >>> formatter = ResponseFormatter()
        >>> data = ResponseData(output=["Executing: ...", "done"])
        >>> text = formatter.format(data)
    """

    def format(
        self,
        data: ResponseData,
        *,
        debug: bool = False,
    ) -> str:
        """Format an apply response."""
        parts = ["<response>"]

        if not data.success:
            parts.append(f"  <error>{data.error or 'Unknown error'}</error>")
            if data.output:
                parts.append(self._format_lines("partial_output", data.output))
        else:
            parts.append(self._format_lines("output", data.output))

        if debug and data.debug_info:
            parts.append(self._format_debug_info(data.debug_info))

        parts.append("</response>")
        return "\n".join(parts)

    def format_validation(self, warnings: list[str], errors: list[str]) -> str:
        """Format a validate response."""
        parts = ["<response>"]
        parts.append(f"  <valid>{'false' if errors else 'true'}</valid>")
        if warnings:
            parts.append(self._format_items("warnings", "warning", warnings))
        if errors:
            parts.append(self._format_items("errors", "error", errors))
        parts.append("</response>")
        return "\n".join(parts)

    def _format_lines(self, tag: str, lines: list[str]) -> str:
        body = "\n".join(lines)
        return f"  <{tag}>\n{body}\n  </{tag}>"

    def _format_items(self, tag: str, item_tag: str, items: list[str]) -> str:
        lines = [f"  <{tag}>"]
        for item in items:
            lines.append(f"    <{item_tag}>{item}</{item_tag}>")
        lines.append(f"  </{tag}>")
        return "\n".join(lines)

    def _format_debug_info(self, debug_info: DebugInfo) -> str:
        lines = ["  <debug_info>"]
        for key, value in debug_info.to_dict().items():
            lines.append(f"    <{key}>{value}</{key}>")
        lines.append("  </debug_info>")
        return "\n".join(lines)


# Global instance
_formatter: ResponseFormatter | None = None


def get_formatter() -> ResponseFormatter:
    """Return the shared formatter instance."""
    global _formatter
    if _formatter is None:
        _formatter = ResponseFormatter()
    return _formatter


def format_error_response(error: str) -> list[TextContent]:
    """Format an error as <response><error>...</error></response>."""
    from mcp.types import TextContent

    response_data = ResponseData(success=False, error=error)
    return [TextContent(type="text", text=get_formatter().format(response_data))]
