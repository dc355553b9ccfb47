"""
Anthropic messages API client.
"""

from __future__ import annotations

from ...logging_utils import handle_provider_errors, log_operation
from ...streaming import EventStream, TaggedSSEDecoder
from ..base import BaseProviderClient
from .types import (
    Message,
    MessagesRequest,
    MessagesResponse,
    StreamEvent,
    stream_event_adapter,
)

PROVIDER = "anthropic"
API_VERSION = "2023-06-01"
CONNECTION_TEST_MODEL = "claude-sonnet-4-20250514"


class AnthropicClient(BaseProviderClient):
    """Client for /messages, authenticated with x-api-key."""

    provider = PROVIDER
    default_base_url = "https://api.anthropic.com/v1"

    def __init__(self, api_key: str, base_url: str | None = None, **kwargs) -> None:
        self.api_version = kwargs.pop("api_version", API_VERSION)
        super().__init__(api_key, base_url, **kwargs)

    def _auth_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

    @handle_provider_errors("test_connection", provider=PROVIDER)
    async def test_connection(self) -> bool:
        # No model listing here, so probe with a minimal message
        probe = MessagesRequest(
            model=CONNECTION_TEST_MODEL,
            messages=[Message(role="user", content="Hi")],
            max_tokens=10,
        )
        response = await self.client.post(
            "/messages", json=probe.model_dump(exclude_none=True)
        )
        return response.is_success

    @log_operation("anthropic.create_message")
    @handle_provider_errors("create_message", provider=PROVIDER)
    async def create_message(self, request: MessagesRequest) -> MessagesResponse:
        data = await self._post_json(
            "/messages", request.model_dump(exclude_none=True)
        )
        return MessagesResponse.model_validate(data)

    @handle_provider_errors("create_message_stream", provider=PROVIDER)
    async def create_message_stream(
        self, request: MessagesRequest
    ) -> EventStream[StreamEvent]:
        """Open a streamed message; the returned stream yields typed events."""
        payload = request.model_copy(update={"stream": True}).model_dump(
            exclude_none=True
        )
        decoder = TaggedSSEDecoder(stream_event_adapter, provider=PROVIDER)
        return await self._open_stream("/messages", payload, decoder)
