"""
Record assembly over an async byte source.

A record boundary function decides where the first complete record in the
buffer ends. SSE streams use newline boundaries; JSON array streams use
element boundaries so that elements are found whether or not the server
puts them on their own lines. Boundary objects may keep scan state between
calls, so each stream gets its own.
"""

from __future__ import annotations

import codecs
from collections.abc import AsyncIterable, AsyncIterator, Callable

import httpx
import structlog

from ..exceptions import TransportError

logger = structlog.get_logger(__name__)

RECORD_DELIMITER = "\n"
JSON_STRUCTURAL = "[],"

# Returns (record_end, consumed_end) for the first complete record, or None
RecordBoundary = Callable[[str], tuple[int, int] | None]


def newline_boundary(buffer: str) -> tuple[int, int] | None:
    """The record is everything before the first newline."""
    newline_pos = buffer.find(RECORD_DELIMITER)
    if newline_pos == -1:
        return None
    return newline_pos, newline_pos + 1


def _skip_whitespace(buffer: str, index: int) -> int:
    while index < len(buffer) and buffer[index].isspace():
        index += 1
    return index


class JSONElementBoundary:
    """
    Finds the next array bracket, separator or complete object.

    Objects are delimited by brace depth, ignoring braces inside strings.
    An object still open at a newline is cut there when the next non-blank
    line starts a new element (`{` or `]`) at or left of the object's own
    column, so one truncated element cannot swallow the ones after it.
    Nested pretty-printed objects sit further right and are not cut. Any
    other leading text falls back to newline framing.

    The scan resumes where the previous call stopped; the buffer may only
    grow between calls that return None. One instance serves one stream.
    """

    def __init__(self) -> None:
        self._column = 0
        self._reset()

    def _reset(self) -> None:
        self._start: int | None = None
        self._start_column = 0
        self._scan = 0
        self._depth = 0
        self._in_string = False
        self._escaped = False

    def _column_at(self, buffer: str, index: int) -> int:
        newline_pos = buffer.rfind(RECORD_DELIMITER, 0, index)
        if newline_pos == -1:
            return self._column + index
        return index - newline_pos - 1

    def _emit(self, buffer: str, record_end: int, consumed_end: int) -> tuple[int, int]:
        self._column = self._column_at(buffer, consumed_end)
        self._reset()
        return record_end, consumed_end

    def _starts_new_element(self, buffer: str, newline_pos: int) -> bool | None:
        """None while the next non-blank line has not arrived yet."""
        index = _skip_whitespace(buffer, newline_pos + 1)
        if index == len(buffer):
            return None
        return (
            buffer[index] in "{]"
            and self._column_at(buffer, index) <= self._start_column
        )

    def __call__(self, buffer: str) -> tuple[int, int] | None:
        if self._start is None:
            start = _skip_whitespace(buffer, 0)
            if start == len(buffer):
                return None
            if buffer[start] in JSON_STRUCTURAL:
                return self._emit(buffer, start + 1, start + 1)
            if buffer[start] != "{":
                bounds = newline_boundary(buffer)
                return self._emit(buffer, *bounds) if bounds else None
            self._start = start
            self._start_column = self._column_at(buffer, start)
            self._scan = start

        for pos in range(self._scan, len(buffer)):
            char = buffer[pos]
            if char == RECORD_DELIMITER:
                # Raw newlines are never part of a valid JSON string
                self._in_string = self._escaped = False
                new_element = self._starts_new_element(buffer, pos)
                if new_element is None:
                    self._scan = pos
                    return None
                if new_element:
                    return self._emit(buffer, pos, pos + 1)
            elif self._in_string:
                if self._escaped:
                    self._escaped = False
                elif char == "\\":
                    self._escaped = True
                elif char == '"':
                    self._in_string = False
            elif char == '"':
                self._in_string = True
            elif char in "{[":
                self._depth += 1
            elif char in "}]":
                self._depth -= 1
                if self._depth == 0:
                    return self._emit(buffer, pos + 1, pos + 1)
        self._scan = len(buffer)
        return None


class RecordAssembler:
    """
    Accumulates raw byte chunks and hands out one complete record per call.

    The buffer is private to one stream. Records are stripped of surrounding
    whitespace. Whatever follows a record stays buffered for the next call,
    so a record split across any number of chunks comes out whole.
    """

    def __init__(
        self,
        source: AsyncIterable[bytes],
        provider: str = "unknown",
        boundary: RecordBoundary = newline_boundary,
    ):
        self._source: AsyncIterator[bytes] = aiter(source)
        self._provider = provider
        self._boundary = boundary
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._exhausted = False
        self.chunks_received = 0

    @property
    def buffered_size(self) -> int:
        """Length of the pending, undelimited text."""
        return len(self._buffer)

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _extract(self) -> str | None:
        bounds = self._boundary(self._buffer)
        if bounds is None:
            return None
        record_end, consumed_end = bounds
        record = self._buffer[:record_end].strip()
        self._buffer = self._buffer[consumed_end:]
        return record

    async def next_record(self) -> str | None:
        """
        Return the next record, or None once the source is drained.

        Pulls chunks from the source only while no complete record is
        buffered. On exhaustion any non-blank remainder is flushed as a
        final record.

        Raises:
            TransportError: If the source fails. The assembler is finished
                afterwards and returns None on later calls.
        """
        while True:
            record = self._extract()
            if record is not None:
                return record

            if self._exhausted:
                return None

            try:
                chunk = await anext(self._source)
            except StopAsyncIteration:
                self._exhausted = True
                self._buffer += self._decoder.decode(b"", final=True)
                remaining = self._buffer.strip()
                self._buffer = ""
                if remaining:
                    logger.debug(
                        "Flushing trailing record",
                        provider=self._provider,
                        size=len(remaining),
                    )
                    return remaining
                return None
            except (httpx.HTTPError, httpx.StreamError, OSError) as e:
                self._exhausted = True
                self._buffer = ""
                raise TransportError(
                    f"Request error: {e!s}", cause=e, provider=self._provider
                ) from e
            except Exception as e:
                self._exhausted = True
                self._buffer = ""
                raise TransportError(
                    f"Source error: {e!s}", cause=e, provider=self._provider
                ) from e

            self.chunks_received += 1
            self._buffer += self._decoder.decode(chunk)

    async def aclose(self) -> None:
        """Release the source without reading further."""
        self._exhausted = True
        self._buffer = ""
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()
