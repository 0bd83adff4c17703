"""Tool schema definitions.

Tool descriptions, parameter schema and the schema factory.
"""

from __future__ import annotations

from typing import Any

from .schema import REQUIRED_KEYS

__all__ = [
    "SUPPORTED_TOOLS",
    "TOOL_DESCRIPTIONS",
    "create_tool_schema",
]

SUPPORTED_TOOLS = ("waffles_validate", "waffles_apply")

TOOL_DESCRIPTIONS = {
    "waffles_validate": """Validate a waffles provisioner configuration.

Checks that host, role and site_directory are set, that no unknown keys are
present and that every value has the right type. Nothing is executed.""",

    "waffles_apply": """Run waffles.sh against a remote host.

Applies the given role to the host using the local waffles site directory.
Returns the combined output of the run. On failure the error includes the
most recent output (8 KiB by default).""",
}

# Configuration properties shared by both tools
CONFIG_PROPERTIES: dict[str, dict[str, Any]] = {
    "host": {
        "type": "string",
        "description": "Remote host to configure.",
    },
    "role": {
        "type": "string",
        "description": "Waffles role to apply.",
    },
    "site_directory": {
        "type": "string",
        "description": "Local waffles site directory (passed as WAFFLES_SITE_DIR). '~' is expanded.",
    },
    "debug": {
        "type": "boolean",
        "default": False,
        "description": "Run waffles with debug output (-d).",
    },
    "private_key": {
        "type": "string",
        "description": "SSH private key path (-k). '~' is expanded.",
    },
    "remote_dir": {
        "type": "string",
        "description": "Directory on the remote host waffles is synced into (-z).",
    },
    "retry": {
        "type": "integer",
        "default": 0,
        "description": "Retries for the remote run (-c). 0 = waffles default.",
    },
    "sudo": {
        "type": "boolean",
        "default": False,
        "description": "Run remotely with sudo (-y).",
    },
    "user": {
        "type": "string",
        "description": "SSH user (-u).",
    },
    "waffles_exec": {
        "type": "string",
        "description": "Path of waffles.sh. Defaults to the server's configured path.",
    },
    "wait": {
        "type": "integer",
        "default": 0,
        "description": "Seconds to wait before connecting (-w).",
    },
}


def create_tool_schema(tool_name: str) -> dict[str, Any]:
    """Create the input schema for a tool.

    waffles_validate accepts anything so it can report unknown keys itself.
    """
    if tool_name not in SUPPORTED_TOOLS:
        raise ValueError(f"Unknown tool '{tool_name}'")

    if tool_name == "waffles_validate":
        return {
            "type": "object",
            "properties": dict(CONFIG_PROPERTIES),
        }

    return {
        "type": "object",
        "properties": dict(CONFIG_PROPERTIES),
        "required": list(REQUIRED_KEYS),
        "additionalProperties": False,
    }
