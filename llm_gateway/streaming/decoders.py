"""
Per-provider record decoders.

Each decoder turns one assembled record into an event, into nothing
(framing noise), or raises DecodeError. Decoders never touch the
assembler buffer, so a bad record cannot affect the ones after it.
"""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from ..exceptions import DecodeError
from .assembler import JSONElementBoundary, RecordBoundary, newline_boundary

DATA_PREFIX = "data: "
EVENT_PREFIX = "event: "
DONE_SENTINEL = "[DONE]"

# "data: " with an empty payload, after the assembler strips the record
EMPTY_DATA_RECORD = "data:"

ARRAY_OPEN = "["
ARRAY_CLOSE = "]"
ELEMENT_SEPARATOR = ","


class RecordDecoder[E](Protocol):
    """Decodes one record into an event, or None for framing noise."""

    provider: str
    completed: bool
    record_boundary: RecordBoundary

    def decode(self, record: str) -> E | None:
        """
        Raises:
            DecodeError: If the record carries a payload that does not
                match the provider schema.
        """
        ...


def _validate(
    adapter: TypeAdapter[Any], payload: str, record: str, provider: str
) -> Any:
    try:
        return adapter.validate_json(payload)
    except ValidationError as e:
        raise DecodeError(
            f"JSON error: {e!s}", record=record, cause=e, provider=provider
        ) from e


class TaggedSSEDecoder[E]:
    """
    SSE records whose `data:` payload is a tagged union.

    `event:` lines and anything unrecognized are ignored. Dispatch on the
    `type` discriminator is left to the adapter, so an unknown tag is a
    validation failure for that record only.
    """

    def __init__(self, adapter: TypeAdapter[E], provider: str):
        self.adapter = adapter
        self.provider = provider
        self.completed = False
        self.record_boundary = newline_boundary

    def decode(self, record: str) -> E | None:
        if not record:
            return None
        if record.startswith(DATA_PREFIX):
            return _validate(
                self.adapter, record[len(DATA_PREFIX):], record, self.provider
            )
        if record.startswith(EVENT_PREFIX):
            return None
        # Unknown framing lines are tolerated
        return None


class SentinelSSEDecoder[E]:
    """
    SSE records with a plain payload schema and a `[DONE]` terminator.

    The sentinel produces no event and flips `completed`; callers treat it
    as the logical end of the stream.
    """

    def __init__(
        self,
        adapter: TypeAdapter[E],
        provider: str,
        sentinel: str = DONE_SENTINEL,
    ):
        self.adapter = adapter
        self.provider = provider
        self.sentinel = sentinel
        self.completed = False
        self.record_boundary = newline_boundary

    def decode(self, record: str) -> E | None:
        if record == EMPTY_DATA_RECORD:
            raise DecodeError(
                "Empty data payload", record=record, provider=self.provider
            )
        if not record.startswith(DATA_PREFIX):
            return None

        payload = record[len(DATA_PREFIX):]
        if payload == self.sentinel:
            self.completed = True
            return None
        return _validate(self.adapter, payload, record, self.provider)


class JSONArrayDecoder[E]:
    """
    Elements of a top-level JSON array, framed by JSONElementBoundary.

    Brackets and separators are positional framing: a record that is only
    `[`, `]` or `,` is dropped, a bracket fused onto an element is peeled
    off, and one trailing comma is removed before validation.
    """

    def __init__(self, adapter: TypeAdapter[E], provider: str):
        self.adapter = adapter
        self.provider = provider
        self.completed = False
        self.record_boundary = JSONElementBoundary()

    @staticmethod
    def normalize(record: str) -> str:
        element = record.strip()
        if element.startswith(ARRAY_OPEN):
            element = element[len(ARRAY_OPEN):].strip()
        if element.endswith(ELEMENT_SEPARATOR):
            element = element[:-len(ELEMENT_SEPARATOR)].strip()
        if element.endswith(ARRAY_CLOSE):
            element = element[:-len(ARRAY_CLOSE)].strip()
        return element

    def decode(self, record: str) -> E | None:
        element = self.normalize(record)
        if not element:
            return None
        return _validate(self.adapter, element, record, self.provider)
