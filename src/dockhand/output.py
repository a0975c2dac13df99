"""Classify the daemon's line-delimited JSON progress stream.

Build, push and pull responses are streams of JSON records, one per line::

    {"stream": "Step 1/4 : FROM alpine\\n"}
    {"status": "Pushing", "progressDetail": {...}, "progress": "[==>  ]", "id": "a1b2"}
    {"error": "manifest unknown", "errorDetail": {"message": "manifest unknown"}}

:func:`classify_line` turns one line into a :class:`ClassifiedLine` without
any I/O. :func:`emit` is the consuming loop that writes text to a sink and
raises :class:`~dockhand.errors.StreamError` on the first error line.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, TextIO

from dockhand.errors import StreamError

_RED = "\033[31m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class ClassifiedLine:
    text: str
    is_error: bool = False

    @property
    def skipped(self) -> bool:
        return not self.is_error and not self.text


SKIP = ClassifiedLine("")


def _has(record: dict[str, Any], key: str) -> bool:
    return record.get(key) is not None


def classify_line(line: str) -> ClassifiedLine:
    """Classify a single line of daemon output."""
    try:
        record = json.loads(line.strip())
    except ValueError:
        # The daemon sometimes interleaves plain diagnostic text
        return ClassifiedLine(line)
    if not isinstance(record, dict):
        return ClassifiedLine(line)

    # Progress ticks and aux metadata are summarised by other status lines
    if (_has(record, "progress") and _has(record, "status")) or _has(record, "aux"):
        return SKIP
    if _has(record, "error"):
        return ClassifiedLine(str(record["error"]), is_error=True)
    if _has(record, "stream"):
        return ClassifiedLine(str(record["stream"]))
    if _has(record, "status"):
        if _has(record, "id"):
            return ClassifiedLine(f"{record['id']}: {record['status']}\n")
        return ClassifiedLine(f"{record['status']}\n")
    return ClassifiedLine(line)


def classify(chunk: str) -> Iterator[ClassifiedLine]:
    """Classify every line of a chunk. Line endings are kept."""
    # Only "\n" ends a record; other Unicode line breaks may sit inside JSON strings
    *lines, last = chunk.split("\n")
    for line in lines:
        yield classify_line(f"{line}\n")
    if last:
        yield classify_line(last)


def decode_chunk(chunk: bytes | str) -> str:
    if isinstance(chunk, bytes):
        return chunk.decode("utf-8", errors="replace")
    return chunk


def emit(chunk: bytes | str, out: TextIO | None = None) -> None:
    """Write the classified lines of *chunk* to *out*.

    Skipped lines are suppressed. An error line is written in red and then
    raised as :class:`StreamError` carrying the daemon's text verbatim.
    """
    out = out if out is not None else sys.stdout
    for line in classify(decode_chunk(chunk)):
        if line.is_error:
            out.write(f"{_RED}{line.text}{_RESET}\n")
            out.flush()
            raise StreamError(line.text)
        if line.text:
            out.write(line.text)
    out.flush()


def emit_stream(chunks: Iterable[bytes | str], out: TextIO | None = None) -> None:
    """Consume a streamed response chunk by chunk through :func:`emit`."""
    for chunk in chunks:
        emit(chunk, out)
