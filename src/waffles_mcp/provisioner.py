"""Waffles resource provisioner.

Entry point for the orchestration host: ``validate`` checks a configuration,
``apply`` runs waffles against the configured host and streams its output to
the host's output sink.

Example:
    provisioner = ResourceProvisioner()
    warnings, errors = provisioner.validate(raw)
    if not errors:
        await provisioner.apply(output, None, raw)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .command import build_invocation
from .config import Config, get_config
from .runtime import OutputSink, ProcessRunner, deliver_line
from .schema import decode_config, validate_config

__all__ = ["ResourceProvisioner"]

logger = logging.getLogger(__name__)


class ResourceProvisioner:
    """Runs waffles.sh for one resource per ``apply`` call.

    Stateless between calls; every call gets its own output tail and relay.
    """

    def __init__(
        self,
        config: Config | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self._config = config or get_config()
        self._runner = runner or ProcessRunner(buffer_size=self._config.output_tail)

    def validate(self, raw: Mapping[str, Any]) -> tuple[list[str], list[str]]:
        """Check required and allowed keys.

        Returns:
            (warnings, errors)
        """
        return validate_config(raw)

    async def apply(
        self,
        output: OutputSink,
        state: Any,
        raw: Mapping[str, Any],
    ) -> None:
        """Run waffles for one resource.

        Args:
            output: Host sink receiving each output line
            state: Current resource state (unused)
            raw: Raw configuration

        Raises:
            ConfigError: Configuration did not decode
            PlatformUnsupportedError: Host platform is Windows
            LaunchError: waffles.sh could not be started
            ExecutionError: waffles.sh failed
        """
        config = decode_config(raw, default_exec=self._config.waffles_exec)
        spec = build_invocation(config)
        self._runner.check_platform()

        # Output what we're about to run
        command = spec.command_line()
        logger.info(f"Executing: {command}")
        deliver_line(output, f"Executing: {command}")

        await self._runner.apply(spec, output)
        logger.info(f"waffles completed for host={config.host} role={config.role}")
