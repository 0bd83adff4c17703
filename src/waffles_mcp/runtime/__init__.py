"""Runtime module for running waffles and streaming its output.

This module provides the subprocess pipeline: a bounded output tail, a line
splitter, the relay that feeds the host's output sink, and the runner that
ties them together.
"""

from __future__ import annotations

from .line_splitter import LineSplitter, iter_lines, split_lines
from .process_runner import InvocationSpec, ProcessRunner
from .relay import FanOutWriter, OutputSink, PipeWriter, deliver_line, relay_output
from .ring_buffer import MAX_BUFFER_SIZE, RingBuffer

__all__ = [
    "MAX_BUFFER_SIZE",
    "FanOutWriter",
    "InvocationSpec",
    "LineSplitter",
    "OutputSink",
    "PipeWriter",
    "ProcessRunner",
    "RingBuffer",
    "deliver_line",
    "iter_lines",
    "relay_output",
    "split_lines",
]
