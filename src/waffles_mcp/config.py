"""waffles-mcp environment configuration.

Environment variables:
    WMCP_WAFFLES_EXEC: default waffles.sh path
        - used when a request does not set waffles_exec
        - default /etc/waffles/waffles.sh

    WMCP_OUTPUT_TAIL: bytes of output kept for error reports
        - default 8192
        - clamped to 1024..1048576, invalid values use the default

    WMCP_DEBUG: debug mode
        - true/1/yes = on (tool responses include timing info)
        - false/0/no = off (default)

    WMCP_LOG_DEBUG: log debug mode
        - true/1/yes = on (DEBUG log written to a temp file)
        - false/0/no = off (default, INFO log to stderr)
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .runtime.ring_buffer import MAX_BUFFER_SIZE
from .schema import DEFAULT_WAFFLES_EXEC

__all__ = ["Config", "load_config", "get_config", "reload_config"]

MIN_OUTPUT_TAIL = 1024
MAX_OUTPUT_TAIL = 1024 * 1024


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_output_tail(value: str | None) -> int:
    if not value:
        return MAX_BUFFER_SIZE
    try:
        size = int(value)
    except ValueError:
        return MAX_BUFFER_SIZE
    return max(MIN_OUTPUT_TAIL, min(size, MAX_OUTPUT_TAIL))


@dataclass
class Config:
    """waffles-mcp settings.

    Attributes:
        waffles_exec: default waffles.sh path
        output_tail: ring buffer capacity in bytes
        debug: include debug info in tool responses
        log_debug: write DEBUG logs to a temp file
        log_file: log file path (set when log_debug=True)
    """

    waffles_exec: str = DEFAULT_WAFFLES_EXEC
    output_tail: int = MAX_BUFFER_SIZE
    debug: bool = False
    log_debug: bool = False
    log_file: str | None = None

    def __repr__(self) -> str:
        return (
            f"Config(waffles_exec={self.waffles_exec}, "
            f"output_tail={self.output_tail}, "
            f"debug={self.debug}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file})"
        )


def _generate_log_file_path() -> str:
    """Build a timestamped log file path under the system temp dir."""
    log_dir = Path(tempfile.gettempdir()) / "waffles-mcp"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"wmcp_debug_{timestamp}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """Load configuration from the environment."""
    log_debug = _parse_bool(os.environ.get("WMCP_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return Config(
        waffles_exec=os.environ.get("WMCP_WAFFLES_EXEC") or DEFAULT_WAFFLES_EXEC,
        output_tail=_parse_output_tail(os.environ.get("WMCP_OUTPUT_TAIL")),
        debug=_parse_bool(os.environ.get("WMCP_DEBUG"), default=False),
        log_debug=log_debug,
        log_file=log_file,
    )


# Global config instance (lazy)
_config: Config | None = None


def get_config() -> Config:
    """Return the global config, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration (for tests)."""
    global _config
    _config = load_config()
    return _config
