"""
Tests for the EventStream façade: framing invariance, flush, sentinel
handling, decode-error isolation, transport failure and abandonment.
"""

import httpx
import pytest

from llm_gateway.exceptions import DecodeError, StreamError, TransportError
from llm_gateway.providers.anthropic import types as anthropic
from llm_gateway.providers.google.types import response_adapter
from llm_gateway.providers.openai.types import chunk_adapter
from llm_gateway.streaming import (
    EventStream,
    JSONArrayDecoder,
    SentinelSSEDecoder,
    TaggedSSEDecoder,
)
from llm_gateway.streaming.assembler import newline_boundary

ANTHROPIC_BODY = (
    "event: message_start\n"
    'data: {"type":"message_start","message":{"id":"msg_1","type":"message",'
    '"role":"assistant","content":[],"model":"claude-sonnet-4-20250514",'
    '"stop_reason":null,"stop_sequence":null,"usage":{"input_tokens":9,"output_tokens":1}}}\n'
    "\n"
    "event: content_block_start\n"
    'data: {"type":"content_block_start","index":0,"content_block":{"type":"text","text":""}}\n'
    "\n"
    "event: ping\n"
    'data: {"type":"ping"}\n'
    "\n"
    "event: content_block_delta\n"
    'data: {"type":"content_block_delta","index":0,"delta":{"type":"text_delta","text":"Héllo ✓"}}\n'
    "\n"
    "event: content_block_delta\n"
    "data: {broken\n"
    "\n"
    "event: content_block_stop\n"
    'data: {"type":"content_block_stop","index":0}\n'
    "\n"
    "event: message_delta\n"
    'data: {"type":"message_delta","delta":{"stop_reason":"end_turn","stop_sequence":null},'
    '"usage":{"output_tokens":5}}\n'
    "\n"
    "event: message_stop\n"
    'data: {"type":"message_stop"}\n'
    "\n"
).encode()

OPENAI_BODY = (
    'data: {"id":"c1","object":"chat.completion.chunk","created":1,"model":"gpt-4o",'
    '"choices":[{"index":0,"delta":{"role":"assistant","content":"Hi"},"finish_reason":null}]}\n'
    "\n"
    'data: {"id":"c1","object":"chat.completion.chunk","created":1,"model":"gpt-4o",'
    '"choices":[{"index":0,"delta":{"content":" there"},"finish_reason":"stop"}]}\n'
    "\n"
    "data: [DONE]\n"
    "\n"
).encode()

GOOGLE_BODY = (
    "[{\n"
    '"candidates":[{"content":{"role":"model","parts":[{"text":"One"}]},"index":0}]},\n'
    '{"candidates":[{"content":{"role":"model","parts":[{"text":"Two"}]},'
    '"finishReason":"STOP","index":0}]}\n'
    "]"
).encode()


async def byte_source(*parts):
    """Yield byte chunks, raising any exception instance found among them."""
    for part in parts:
        if isinstance(part, Exception):
            raise part
        yield part


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


def anthropic_stream(*parts, **kwargs) -> EventStream:
    decoder = TaggedSSEDecoder(anthropic.stream_event_adapter, provider="anthropic")
    return EventStream(byte_source(*parts), decoder, **kwargs)


def openai_stream(*parts, **kwargs) -> EventStream:
    decoder = SentinelSSEDecoder(chunk_adapter, provider="openai")
    return EventStream(byte_source(*parts), decoder, **kwargs)


def google_stream(*parts, **kwargs) -> EventStream:
    decoder = JSONArrayDecoder(response_adapter, provider="google")
    return EventStream(byte_source(*parts), decoder, **kwargs)


async def collect(stream: EventStream) -> list:
    return [item async for item in stream]


def summarize(items: list) -> list:
    """Comparable form of stream items."""
    return [
        (type(item).__name__, item.record)
        if isinstance(item, DecodeError)
        else (type(item).__name__, item.model_dump())
        for item in items
    ]


class TestFramingInvariance:
    """Chunk boundaries never change the decoded output."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 2, 3, 7, 64, 1000])
    async def test_anthropic(self, size):
        expected = summarize(await collect(anthropic_stream(ANTHROPIC_BODY)))
        actual = summarize(await collect(anthropic_stream(*split_every(ANTHROPIC_BODY, size))))
        assert actual == expected
        assert [name for name, _ in expected] == [
            "MessageStart", "ContentBlockStart", "Ping", "ContentBlockDelta",
            "DecodeError", "ContentBlockStop", "MessageDelta", "MessageStop",
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 5, 17])
    async def test_openai(self, size):
        expected = summarize(await collect(openai_stream(OPENAI_BODY)))
        actual = summarize(await collect(openai_stream(*split_every(OPENAI_BODY, size))))
        assert actual == expected
        assert len(expected) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 4, 11])
    async def test_google(self, size):
        expected = summarize(await collect(google_stream(GOOGLE_BODY)))
        actual = summarize(await collect(google_stream(*split_every(GOOGLE_BODY, size))))
        assert actual == expected

    @pytest.mark.asyncio
    async def test_multibyte_text_survives_one_byte_delivery(self):
        items = await collect(anthropic_stream(*split_every(ANTHROPIC_BODY, 1)))
        deltas = [item for item in items if isinstance(item, anthropic.ContentBlockDelta)]
        assert deltas[0].delta.text == "Héllo ✓"


class TestEndOfStream:
    """Flush and termination."""

    @pytest.mark.asyncio
    async def test_final_record_without_newline_is_decoded(self):
        stream = anthropic_stream(b'data: {"type":"message_stop"}')
        assert await anext(stream) == anthropic.MessageStop()
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

    @pytest.mark.asyncio
    async def test_pulling_past_the_end_is_idempotent(self):
        stream = anthropic_stream(b'data: {"type":"ping"}\n')
        assert await collect(stream) == [anthropic.Ping()]
        for _ in range(3):
            with pytest.raises(StopAsyncIteration):
                await anext(stream)
        assert stream.finished

    @pytest.mark.asyncio
    async def test_done_sentinel_ends_without_error(self):
        stream = openai_stream(b"data: [DONE]\n")
        with pytest.raises(StopAsyncIteration):
            await anext(stream)
        assert stream.get_stats()["decode_errors"] == 0

    @pytest.mark.asyncio
    async def test_records_after_sentinel_are_not_read(self):
        closed = []

        async def source():
            try:
                yield b"data: [DONE]\n"
                yield b"data: {garbage}\n"
            finally:
                closed.append(True)

        stream = EventStream(source(), SentinelSSEDecoder(chunk_adapter, provider="openai"))
        assert await collect(stream) == []
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_google_four_chunk_array(self):
        stream = google_stream(b"[", b'{"foo":1},', b'{"foo":2}', b"]")
        items = await collect(stream)
        assert [item.model_extra["foo"] for item in items] == [1, 2]

    @pytest.mark.asyncio
    async def test_google_pretty_printed_elements(self):
        body = b'[{\n  "foo": 1,\n  "bar": "}{"\n}\n,\r\n{\n  "foo": 2\n}\n]'
        items = await collect(google_stream(*split_every(body, 3)))
        assert [item.model_extra["foo"] for item in items] == [1, 2]
        assert items[0].model_extra["bar"] == "}{"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 3, 1000])
    async def test_google_unclosed_element_is_isolated(self, size):
        body = b'[\n{"foo":1,\n{"foo":2},\n{"foo":3}\n]\n'
        items = await collect(google_stream(*split_every(body, size)))

        assert isinstance(items[0], DecodeError)
        assert items[0].record == '{"foo":1,'
        assert [item.model_extra["foo"] for item in items[1:]] == [2, 3]

    @pytest.mark.asyncio
    async def test_google_four_lines_yield_two_elements_in_order(self):
        stream = google_stream(b"[\n", b'{"foo":1},\n', b'{"foo":2}\n', b"]")
        items = await collect(stream)
        assert [item.model_extra["foo"] for item in items] == [1, 2]


class TestErrors:
    """Decode errors are isolated, transport errors are terminal."""

    @pytest.mark.asyncio
    async def test_decode_error_does_not_stop_the_stream(self):
        stream = anthropic_stream(
            b'data: {"type":"nope"}\n',
            b'data: {"type":"ping"}\n',
        )
        items = await collect(stream)
        assert isinstance(items[0], DecodeError)
        assert items[1] == anthropic.Ping()
        assert stream.get_stats() == {
            "records": 2,
            "events": 1,
            "decode_errors": 1,
            "transport_errors": 0,
        }

    @pytest.mark.asyncio
    async def test_empty_openai_payload_is_a_decode_error(self):
        items = await collect(openai_stream(b"data: \n", b"data: [DONE]\n"))
        assert len(items) == 1
        assert isinstance(items[0], DecodeError)

    @pytest.mark.asyncio
    async def test_transport_error_is_the_final_item(self):
        on_close_calls = []

        async def on_close():
            on_close_calls.append(True)

        stream = anthropic_stream(
            b'data: {"type":"ping"}\n',
            httpx.ReadError("connection reset"),
            on_close=on_close,
        )
        items = await collect(stream)

        assert items[0] == anthropic.Ping()
        assert isinstance(items[1], TransportError)
        assert isinstance(items[1].cause, httpx.ReadError)
        assert len(items) == 2
        assert on_close_calls == [True]
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

    @pytest.mark.asyncio
    async def test_unexpected_source_failure_is_a_transport_error(self):
        on_close_calls = []

        async def on_close():
            on_close_calls.append(True)

        stream = anthropic_stream(
            b'data: {"type":"ping"}\n',
            RuntimeError("boom"),
            on_close=on_close,
        )
        items = await collect(stream)

        assert items[0] == anthropic.Ping()
        assert isinstance(items[1], TransportError)
        assert isinstance(items[1].cause, RuntimeError)
        assert len(items) == 2
        assert on_close_calls == [True]
        assert stream.get_stats()["transport_errors"] == 1

    @pytest.mark.asyncio
    async def test_decoder_bug_still_releases_the_source(self):
        closed = []

        class BrokenDecoder:
            provider = "test"
            completed = False
            record_boundary = staticmethod(newline_boundary)

            def decode(self, record):
                raise RuntimeError("decoder bug")

        async def source():
            try:
                yield b"first\n"
                yield b"second\n"
            finally:
                closed.append(True)

        stream = EventStream(source(), BrokenDecoder())
        with pytest.raises(RuntimeError, match="decoder bug"):
            await anext(stream)

        assert closed == [True]
        assert stream.finished
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

    @pytest.mark.asyncio
    async def test_events_raises_the_first_error(self):
        stream = anthropic_stream(
            b'data: {"type":"ping"}\n',
            b"data: {broken\n",
            b'data: {"type":"message_stop"}\n',
        )
        seen = []
        with pytest.raises(StreamError):
            async for event in stream.events():
                seen.append(event)
        assert seen == [anthropic.Ping()]
        assert stream.finished


class TestAbandonment:
    """Closing a stream releases the source exactly once."""

    @pytest.mark.asyncio
    async def test_aclose_releases_source_and_stops(self):
        closed = []
        on_close_calls = []

        async def source():
            try:
                yield b'data: {"type":"ping"}\n'
                yield b'data: {"type":"message_stop"}\n'
            finally:
                closed.append(True)

        async def on_close():
            on_close_calls.append(True)

        decoder = TaggedSSEDecoder(anthropic.stream_event_adapter, provider="anthropic")
        async with EventStream(source(), decoder, on_close=on_close) as stream:
            assert await anext(stream) == anthropic.Ping()

        assert closed == [True]
        assert on_close_calls == [True]
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

        await stream.aclose()
        assert on_close_calls == [True]
