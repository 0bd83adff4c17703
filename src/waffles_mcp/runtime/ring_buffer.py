"""Fixed-capacity byte buffer that keeps only the most recent output.

Used to hold the tail of a subprocess's combined output so a failure can be
reported with context, without letting a chatty or runaway process grow
memory without bound.
"""

from __future__ import annotations

__all__ = ["RingBuffer", "MAX_BUFFER_SIZE"]

# 8 KiB of output tail is kept per invocation
MAX_BUFFER_SIZE = 8 * 1024


class RingBuffer:
    """Circular byte buffer retaining the last ``capacity`` bytes written.

    Writes always succeed; once full, the oldest bytes are overwritten.
    Not safe for concurrent writers: callers must serialize writes.

    Example:
        buf = RingBuffer(4)
        buf.write(b"abcdef")
        buf.snapshot()  # b"cdef"
    """

    def __init__(self, capacity: int = MAX_BUFFER_SIZE) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._data = bytearray(capacity)
        self._capacity = capacity
        self._written = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total_written(self) -> int:
        """Bytes ever written, including those already overwritten."""
        return self._written

    def __len__(self) -> int:
        return min(self._written, self._capacity)

    def write(self, data: bytes) -> int:
        """Write data, overwriting the oldest bytes when full.

        Returns:
            len(data); all input is always accepted
        """
        n = len(data)
        view = memoryview(data)
        if n > self._capacity:
            # Only the trailing capacity bytes can survive this write
            skipped = n - self._capacity
            view = view[skipped:]
            self._written += skipped

        pos = self._written % self._capacity
        first = min(len(view), self._capacity - pos)
        self._data[pos:pos + first] = view[:first]
        rest = len(view) - first
        if rest:
            self._data[:rest] = view[first:]
        self._written += len(view)
        return n

    def snapshot(self) -> bytes:
        """Return the retained bytes in write order."""
        if self._written < self._capacity:
            return bytes(self._data[:self._written])
        pos = self._written % self._capacity
        return bytes(self._data[pos:]) + bytes(self._data[:pos])

    def __repr__(self) -> str:
        return (
            f"RingBuffer(capacity={self._capacity}, "
            f"retained={len(self)}, total_written={self._written})"
        )
