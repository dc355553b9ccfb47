"""
Pull-based event stream composed from a record assembler and a decoder.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterable, Awaitable, Callable

import structlog

from ..exceptions import DecodeError, StreamError, TransportError
from .assembler import RecordAssembler
from .decoders import RecordDecoder

logger = structlog.get_logger(__name__)


class EventStream[E]:
    """
    Lazy, single-pass sequence of decoded provider events.

    Items are either events or StreamError instances:
    - DecodeError for a record that failed to decode; pulling continues.
    - TransportError when the byte source fails; it is the last item.

    The stream finishes on source exhaustion, on the decoder's completion
    sentinel, after a transport failure, or when closed by the caller.
    Finishing releases the source once; later pulls raise
    StopAsyncIteration without touching the source again.
    """

    def __init__(
        self,
        source: AsyncIterable[bytes],
        decoder: RecordDecoder[E],
        *,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ):
        self.provider = decoder.provider
        self._assembler = RecordAssembler(
            source, provider=self.provider, boundary=decoder.record_boundary
        )
        self._decoder = decoder
        self._on_close = on_close
        self._finished = False
        self._closed = False
        self.stats = {
            "records": 0,
            "events": 0,
            "decode_errors": 0,
            "transport_errors": 0,
        }

    @property
    def finished(self) -> bool:
        return self._finished

    def __aiter__(self) -> EventStream[E]:
        return self

    async def __anext__(self) -> E | StreamError:
        try:
            item = await self._next_item()
        except Exception:
            # Anything other than a stream error still releases the source
            await self._finish()
            raise
        if item is None:
            raise StopAsyncIteration
        return item

    async def _next_item(self) -> E | StreamError | None:
        while not self._finished:
            try:
                record = await self._assembler.next_record()
            except TransportError as e:
                self.stats["transport_errors"] += 1
                logger.warning(
                    "Stream transport failure",
                    provider=self.provider,
                    error_message=str(e),
                )
                await self._finish()
                return e

            if record is None:
                await self._finish()
                break

            self.stats["records"] += 1
            try:
                event = self._decoder.decode(record)
            except DecodeError as e:
                self.stats["decode_errors"] += 1
                logger.debug(
                    "Record decode failed",
                    provider=self.provider,
                    record=record[:200],
                    error_message=str(e),
                )
                return e

            if self._decoder.completed:
                await self._finish()
                break

            if event is not None:
                self.stats["events"] += 1
                return event

        return None

    async def events(self) -> AsyncGenerator[E]:
        """Yield events only, raising the first StreamError encountered."""
        try:
            async for item in self:
                if isinstance(item, StreamError):
                    raise item
                yield item
        finally:
            await self.aclose()

    async def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        logger.debug("Stream finished", provider=self.provider, **self.stats)
        await self._release()

    async def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._assembler.aclose()
        finally:
            if self._on_close is not None:
                await self._on_close()

    async def aclose(self) -> None:
        """Abandon the stream and release the underlying source."""
        self._finished = True
        await self._release()

    def get_stats(self) -> dict[str, int]:
        """Get stream counters for monitoring."""
        return self.stats.copy()

    async def __aenter__(self) -> EventStream[E]:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
