"""
Incremental decoding of streamed provider responses.

This package contains:
- Record assembly from arbitrarily chunked bytes
- SSE and JSON-array record decoders
- The EventStream façade consumed by provider clients
"""

from .assembler import RecordAssembler
from .decoders import (
    JSONArrayDecoder,
    RecordDecoder,
    SentinelSSEDecoder,
    TaggedSSEDecoder,
)
from .stream import EventStream

__all__ = [
    "EventStream",
    "JSONArrayDecoder",
    "RecordAssembler",
    "RecordDecoder",
    "SentinelSSEDecoder",
    "TaggedSSEDecoder",
]
