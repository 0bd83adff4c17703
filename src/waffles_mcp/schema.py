"""Waffles provisioner configuration record.

Keys:
    host            (required) remote host to configure
    role            (required) waffles role to apply
    site_directory  (required) local waffles site directory
    debug           run waffles with debug output
    private_key     SSH private key path
    remote_dir      directory on the remote host to sync waffles into
    retry           number of retries for the remote run
    sudo            run remotely with sudo
    user            SSH user
    waffles_exec    path of waffles.sh (default /etc/waffles/waffles.sh)
    wait            seconds to wait before connecting

Decoding is weakly typed ("3" -> 3, "true" -> True, "" -> 0/False,
True -> "1") and rejects unknown keys.
Validation rejects exactly what decoding would, so a configuration that
passes ``validate_config`` always decodes.
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

__all__ = [
    "DEFAULT_WAFFLES_EXEC",
    "REQUIRED_KEYS",
    "OPTIONAL_KEYS",
    "WafflesConfig",
    "decode_config",
    "validate_config",
]

# Default location of the waffles script
DEFAULT_WAFFLES_EXEC = "/etc/waffles/waffles.sh"

REQUIRED_KEYS = ("host", "role", "site_directory")
OPTIONAL_KEYS = (
    "debug",
    "remote_dir",
    "private_key",
    "retry",
    "sudo",
    "user",
    "waffles_exec",
    "wait",
)


class WafflesConfig(BaseModel):
    """Decoded waffles configuration."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    host: str = Field(min_length=1)
    role: str = Field(min_length=1)
    site_directory: str = Field(min_length=1)
    debug: bool = False
    private_key: str = ""
    remote_dir: str = ""
    retry: int = 0
    sudo: bool = False
    user: str = ""
    waffles_exec: str = ""
    wait: int = 0

    @field_validator("retry", "wait", mode="before")
    @classmethod
    def _weak_int(cls, value: Any) -> Any:
        # "" -> 0, bool -> 0/1, float truncates
        if isinstance(value, str) and value == "":
            return 0
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        return value

    @field_validator("debug", "sudo", mode="before")
    @classmethod
    def _weak_bool(cls, value: Any) -> Any:
        # "" -> False, any number -> non-zero
        if isinstance(value, str) and value == "":
            return False
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value != 0
        return value

    @field_validator(
        "host", "role", "site_directory", "private_key", "remote_dir", "user",
        "waffles_exec", mode="before",
    )
    @classmethod
    def _weak_str(cls, value: Any) -> Any:
        # bool -> "1"/"0"; NUL can never reach an argv or environment
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, str) and "\x00" in value:
            raise ValueError("value must not contain NUL bytes")
        return value


def _format_errors(exc: ValidationError) -> list[str]:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "config"
        if err["type"] == "extra_forbidden":
            problems.append(f"{loc}: unknown configuration key")
        elif err["type"] == "missing":
            problems.append(f"{loc}: required field is not set")
        else:
            problems.append(f"{loc}: {err['msg']}")
    return problems


def _expand_home(path: str) -> str:
    return os.path.expanduser(path) if path else path


def decode_config(
    raw: Mapping[str, Any],
    overlay: Mapping[str, Any] | None = None,
    *,
    default_exec: str = DEFAULT_WAFFLES_EXEC,
) -> WafflesConfig:
    """Decode a raw configuration mapping.

    Args:
        raw: Configuration as supplied by the host
        overlay: Optional second layer (e.g. interpolated values); wins on collision
        default_exec: Program path used when waffles_exec is empty

    Returns:
        Decoded configuration with home directories expanded

    Raises:
        ConfigError: Missing/unknown keys or values that cannot be coerced
    """
    merged = dict(raw)
    if overlay:
        merged.update(overlay)

    try:
        config = WafflesConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(_format_errors(e)) from e

    # fill in the blanks
    updates: dict[str, Any] = {
        "site_directory": _expand_home(config.site_directory),
        "private_key": _expand_home(config.private_key),
    }
    if not config.waffles_exec:
        updates["waffles_exec"] = default_exec
    return config.model_copy(update=updates)


def validate_config(raw: Mapping[str, Any]) -> tuple[list[str], list[str]]:
    """Check a raw configuration without decoding it for use.

    Returns:
        (warnings, errors); warnings are currently always empty
    """
    warnings: list[str] = []
    errors: list[str] = []

    for key in REQUIRED_KEYS:
        value = raw.get(key)
        if value is None or value == "":
            errors.append(f"{key}: required field is not set")

    allowed = set(REQUIRED_KEYS) | set(OPTIONAL_KEYS)
    for key in raw:
        if key not in allowed:
            errors.append(f"{key}: unknown configuration key")

    # Type problems are only meaningful once the key set is right
    if not errors:
        try:
            WafflesConfig.model_validate(dict(raw))
        except ValidationError as e:
            errors.extend(_format_errors(e))

    return warnings, errors
