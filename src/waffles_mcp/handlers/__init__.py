"""Tool handlers.

Tool handler protocol and the provisioner handlers.
"""

from .base import ToolContext, ToolHandler
from .provision import ApplyHandler, CollectingOutput, ValidateHandler

__all__ = [
    "ToolContext",
    "ToolHandler",
    "ApplyHandler",
    "CollectingOutput",
    "ValidateHandler",
]
