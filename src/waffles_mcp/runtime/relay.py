"""Output relay: forwards subprocess output lines to the host's output sink.

The subprocess's combined output is fanned out to two places: a RingBuffer
(kept for error reporting) and an in-memory pipe. ``relay_output`` reads the
pipe's receive end, splits it into lines and hands each line to the sink,
then sets a completion event so the runner knows every line has been
delivered.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable
from typing import Protocol

import anyio
from anyio.streams.memory import MemoryObjectSendStream

from .line_splitter import iter_lines
from .ring_buffer import RingBuffer

__all__ = [
    "OutputSink",
    "PipeWriter",
    "FanOutWriter",
    "deliver_line",
    "relay_output",
]

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    """Host-supplied destination for output lines.

    Called sequentially, never concurrently, once per line.
    """

    def accept(self, line: str) -> None:
        ...


class PipeWriter:
    """Write end of the relay pipe."""

    def __init__(self, stream: MemoryObjectSendStream[bytes]) -> None:
        self._stream = stream

    async def write(self, data: bytes) -> int:
        await self._stream.send(data)
        return len(data)

    async def aclose(self) -> None:
        await self._stream.aclose()


class FanOutWriter:
    """Duplicate each write into the tail buffer and the relay pipe.

    The tail buffer is written first and never fails, so an error from the
    pipe is the only one that can propagate.
    """

    def __init__(self, tail: RingBuffer, pipe: PipeWriter) -> None:
        self._tail = tail
        self._pipe = pipe

    async def write(self, data: bytes) -> int:
        self._tail.write(data)
        return await self._pipe.write(data)


def deliver_line(output: OutputSink, line: str) -> bool:
    """Hand one line to ``output``, logging instead of raising on failure.

    Returns:
        True if the sink accepted the line
    """
    try:
        output.accept(line)
    except Exception as e:
        logger.warning(f"Output sink failed on {line!r}: {e}")
        return False
    return True


async def relay_output(
    source: AsyncIterable[bytes],
    output: OutputSink,
    done: anyio.Event,
) -> int:
    """Forward every line from ``source`` to ``output``.

    ``done`` is set exactly once when the source is exhausted, including when
    it produced nothing. A failing sink is logged and skipped; it never ends
    the relay early.

    Returns:
        Number of lines relayed
    """
    count = 0
    try:
        async for line in iter_lines(source):
            count += 1
            deliver_line(output, line)
    finally:
        done.set()
        logger.debug(f"Relay finished after {count} lines")
    return count
