"""Split a byte stream into text lines.

Chunks may break anywhere, including inside a line or inside a multi-byte
character: bytes are split on ``\\n`` first and each complete line is
decoded on its own, so the result does not depend on chunk boundaries.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

__all__ = ["LineSplitter", "iter_lines", "split_lines"]


class LineSplitter:
    """Incremental line splitter.

    ``feed`` returns the lines completed by a chunk; ``flush`` returns the
    trailing partial line (if non-empty) once the stream has ended.
    Line terminators (``\\n`` or ``\\r\\n``) are stripped.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding
        self._pending = bytearray()

    def _decode(self, raw: bytes | bytearray) -> str:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode(self._encoding, errors="replace")

    def feed(self, data: bytes) -> list[str]:
        if not data:
            return []
        self._pending.extend(data)
        if b"\n" not in data:
            return []

        parts = self._pending.split(b"\n")
        self._pending = bytearray(parts.pop())
        return [self._decode(part) for part in parts]

    def flush(self) -> list[str]:
        if not self._pending:
            return []
        line = self._decode(self._pending)
        self._pending = bytearray()
        return [line]

    @property
    def pending(self) -> bytes:
        """Buffered bytes not yet terminated by a newline."""
        return bytes(self._pending)


async def iter_lines(
    source: AsyncIterable[bytes],
    encoding: str = "utf-8",
) -> AsyncIterator[str]:
    """Yield lines from an async byte source until it is exhausted."""
    splitter = LineSplitter(encoding)
    async for chunk in source:
        for line in splitter.feed(chunk):
            yield line
    for line in splitter.flush():
        yield line


def split_lines(chunks: Iterable[bytes], encoding: str = "utf-8") -> Iterator[str]:
    """Synchronous counterpart of ``iter_lines``."""
    splitter = LineSplitter(encoding)
    for chunk in chunks:
        yield from splitter.feed(chunk)
    yield from splitter.flush()
