"""Process runner for the waffles script.

waffles-mcp runtime module v0.1.0

This module provides:
- A single subprocess run per call with combined stdout/stderr
- Live line-by-line relay of output to a host-supplied sink
- A bounded tail of recent output for error reporting
- Deterministic shutdown: the runner returns only after the relay drained

Key design points:
- stderr is redirected into stdout so interleaving is preserved
- Launch failures (missing program, NUL in an argument) raise LaunchError
- Every output chunk is written to the tail buffer and the relay pipe
- The pipe is closed unconditionally after the process ends (or fails to
  start), then the runner waits on the relay's completion event
- POSIX: start_new_session=True so host signals are not forwarded
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import anyio

from ..errors import ExecutionError, LaunchError, PlatformUnsupportedError
from .relay import FanOutWriter, OutputSink, PipeWriter, relay_output
from .ring_buffer import MAX_BUFFER_SIZE, RingBuffer

__all__ = [
    "InvocationSpec",
    "ProcessRunner",
]

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"

# Bytes read from the child per chunk
DEFAULT_READ_SIZE = 4096

# Chunks buffered in the relay pipe before the pump waits on the relay
DEFAULT_PIPE_DEPTH = 16


@dataclass(frozen=True)
class InvocationSpec:
    """Fully resolved description of one subprocess launch.

    Attributes:
        program: Executable path
        args: Ordered command line arguments (without the program)
        env: Variables overlaid on the inherited environment
    """

    program: str
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def command_line(self) -> str:
        """Printable command line, environment overlay first."""
        parts = [f"{key}={value}" for key, value in self.env.items()]
        parts.extend(shlex.quote(arg) for arg in self.argv)
        return " ".join(parts)

    def merged_env(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self.env)
        return env


@dataclass
class ProcessRunner:
    """Runs one invocation and relays its output.

    Example:
        runner = ProcessRunner()
        spec = InvocationSpec(
            program="/etc/waffles/waffles.sh",
            args=("-s", "web01", "-r", "memcached"),
            env={"WAFFLES_SITE_DIR": "/srv/waffles"},
        )
        await runner.apply(spec, output)
    """

    buffer_size: int = MAX_BUFFER_SIZE
    read_size: int = DEFAULT_READ_SIZE
    pipe_depth: int = DEFAULT_PIPE_DEPTH

    async def apply(self, spec: InvocationSpec, output: OutputSink) -> None:
        """Run the invocation to completion.

        Args:
            spec: Invocation to run
            output: Sink receiving each output line in order

        Raises:
            PlatformUnsupportedError: On Windows
            LaunchError: If the program could not be started
            ExecutionError: If the program exited non-zero or was killed
        """
        self.check_platform()

        command = spec.command_line()
        tail = RingBuffer(self.buffer_size)
        send_stream, receive_stream = anyio.create_memory_object_stream(self.pipe_depth)
        pipe = PipeWriter(send_stream)
        done = anyio.Event()

        async def _relay() -> int:
            async with receive_stream:
                return await relay_output(receive_stream, output, done)

        relay_task = asyncio.create_task(_relay(), name="waffles-relay")

        try:
            try:
                process = await self._start(spec)
            except (OSError, ValueError) as e:
                # ValueError: NUL byte in argv or env
                logger.warning(f"Failed to start {spec.program}: {e}")
                raise LaunchError(command, e) from e
            returncode = await self._pump(process, FanOutWriter(tail, pipe))
        finally:
            # Closing the write end lets the relay reach end-of-stream
            await pipe.aclose()
            await done.wait()
            await relay_task

        if returncode != 0:
            text = tail.snapshot().decode("utf-8", errors="replace")
            raise ExecutionError(command, returncode, text)

    @staticmethod
    def check_platform() -> None:
        """Refuse to run where waffles (a POSIX shell script) cannot."""
        if IS_WINDOWS:
            raise PlatformUnsupportedError("Windows")

    async def _start(self, spec: InvocationSpec) -> asyncio.subprocess.Process:
        """Start the process with combined stdout/stderr."""
        process = await asyncio.create_subprocess_exec(
            *spec.argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            **self._build_subprocess_kwargs(spec),
        )
        logger.debug(f"Started subprocess pid={process.pid} argv={spec.argv}")
        return process

    async def _pump(
        self,
        process: asyncio.subprocess.Process,
        writer: FanOutWriter,
    ) -> int:
        """Copy the process output into ``writer`` until EOF, then wait.

        Returns:
            Process return code
        """
        try:
            if process.stdout:
                while True:
                    chunk = await process.stdout.read(self.read_size)
                    if not chunk:
                        break
                    await writer.write(chunk)

            returncode = await process.wait()
        finally:
            if process.returncode is None:
                # Pump was interrupted; don't leave the child behind
                logger.debug(f"Killing subprocess pid={process.pid}")
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        logger.debug(
            f"Subprocess completed pid={process.pid} returncode={returncode}"
        )
        return returncode

    def _build_subprocess_kwargs(self, spec: InvocationSpec) -> dict[str, Any]:
        """Build subprocess kwargs.

        Args:
            spec: Invocation specification

        Returns:
            Dict of kwargs for asyncio.create_subprocess_exec
        """
        return {
            "env": spec.merged_env(),
            # POSIX: start_new_session (equivalent to setsid)
            "start_new_session": True,
        }
