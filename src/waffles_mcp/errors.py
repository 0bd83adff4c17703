"""Waffles provisioner exceptions.

Taxonomy:
    ConfigError              - bad configuration, raised before anything runs
    PlatformUnsupportedError - host platform cannot run the shell script
    LaunchError              - the waffles executable could not be started
    ExecutionError           - the script ran and failed (carries the output tail)
"""

from __future__ import annotations

import signal

__all__ = [
    "WafflesError",
    "ConfigError",
    "PlatformUnsupportedError",
    "LaunchError",
    "ExecutionError",
    "describe_exit",
]


class WafflesError(Exception):
    """Base exception for the waffles provisioner."""
    pass


class ConfigError(WafflesError):
    """Configuration is missing required keys or has invalid values.

    Attributes:
        problems: One message per offending key
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid waffles configuration: " + "; ".join(self.problems))


class PlatformUnsupportedError(WafflesError):
    """Waffles is a POSIX shell script and cannot run on this platform."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        super().__init__(f"Waffles is not supported on {platform} at this time.")


class LaunchError(WafflesError):
    """The waffles executable could not be started.

    Attributes:
        command: Printable command line
        cause: Underlying OS error (ValueError for a NUL byte in argv or env)
    """

    def __init__(self, command: str, cause: OSError | ValueError) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"Error starting command '{command}': {cause}")


def describe_exit(returncode: int) -> str:
    """Describe a subprocess return code (negative means killed by signal)."""
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"signal: {name}"
    return f"exit status {returncode}"


class ExecutionError(WafflesError):
    """Waffles exited non-zero or was killed.

    Attributes:
        command: Printable command line
        returncode: Subprocess return code
        output: Most recent combined output, at most the tail capacity
    """

    def __init__(self, command: str, returncode: int, output: str) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Error running command '{command}': {describe_exit(returncode)}. "
            f"Output: {output}"
        )
