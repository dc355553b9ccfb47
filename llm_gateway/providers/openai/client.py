"""
OpenAI-compatible chat-completions client.
"""

from __future__ import annotations

from ...logging_utils import handle_provider_errors, log_operation
from ...streaming import EventStream, SentinelSSEDecoder
from ..base import BaseProviderClient
from .types import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ImageGenerationRequest,
    ImageGenerationResponse,
    Model,
    ModelListResponse,
    chunk_adapter,
)

PROVIDER = "openai"


class OpenAIClient(BaseProviderClient):
    """Bearer-authenticated client for /models, /chat/completions and /images."""

    provider = PROVIDER
    default_base_url = "https://api.openai.com/v1"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    @handle_provider_errors("test_connection", provider=PROVIDER)
    async def test_connection(self) -> bool:
        response = await self.client.get("/models")
        return response.is_success

    @log_operation("openai.list_models")
    @handle_provider_errors("list_models", provider=PROVIDER)
    async def list_models(self) -> list[Model]:
        data = await self._get_json("/models")
        return ModelListResponse.model_validate(data).data

    @log_operation("openai.chat_completion")
    @handle_provider_errors("chat_completion", provider=PROVIDER)
    async def chat_completion(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionResponse:
        data = await self._post_json(
            "/chat/completions", request.model_dump(exclude_none=True)
        )
        return ChatCompletionResponse.model_validate(data)

    @handle_provider_errors("chat_completion_stream", provider=PROVIDER)
    async def chat_completion_stream(
        self, request: ChatCompletionRequest
    ) -> EventStream[ChatCompletionChunk]:
        """Open a streamed completion; the returned stream yields chunks."""
        payload = request.model_copy(update={"stream": True}).model_dump(
            exclude_none=True
        )
        decoder = SentinelSSEDecoder(chunk_adapter, provider=PROVIDER)
        return await self._open_stream("/chat/completions", payload, decoder)

    @log_operation("openai.generate_image")
    @handle_provider_errors("generate_image", provider=PROVIDER)
    async def generate_image(
        self, request: ImageGenerationRequest
    ) -> ImageGenerationResponse:
        data = await self._post_json(
            "/images/generations", request.model_dump(exclude_none=True)
        )
        return ImageGenerationResponse.model_validate(data)
