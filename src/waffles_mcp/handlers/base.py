"""Tool handler base classes.

Defines the tool handler protocol and its context.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcp.types import TextContent

if TYPE_CHECKING:
    from ..config import Config
    from ..provisioner import ResourceProvisioner

__all__ = [
    "ToolContext",
    "ToolHandler",
]


@dataclass
class ToolContext:
    """Tool execution context.

    Bundles the dependencies handlers need so they are not passed around one
    by one.
    """

    config: "Config"
    provisioner: "ResourceProvisioner"


class ToolHandler(ABC):
    """Tool handler protocol."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def handle(
        self,
        arguments: dict[str, Any],
        ctx: ToolContext,
    ) -> list[TextContent]:
        """Handle a tool call.

        Args:
            arguments: Tool arguments
            ctx: Execution context

        Returns:
            List of TextContent
        """
        ...
