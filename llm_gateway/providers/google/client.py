"""
Google Generative Language API client.
"""

from __future__ import annotations

from ...logging_utils import handle_provider_errors, log_operation
from ...streaming import EventStream, JSONArrayDecoder
from ..base import BaseProviderClient
from .types import (
    GenerateContentRequest,
    GenerateContentResponse,
    Model,
    ModelListResponse,
    response_adapter,
)

PROVIDER = "google"


class GoogleClient(BaseProviderClient):
    """Client authenticated by the `key` query parameter."""

    provider = PROVIDER
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def _auth_params(self) -> dict[str, str]:
        return {"key": self.api_key}

    @staticmethod
    def _payload(request: GenerateContentRequest) -> dict:
        return request.model_dump(by_alias=True, exclude_none=True)

    @handle_provider_errors("test_connection", provider=PROVIDER)
    async def test_connection(self) -> bool:
        response = await self.client.get("/models")
        return response.is_success

    @log_operation("google.list_models")
    @handle_provider_errors("list_models", provider=PROVIDER)
    async def list_models(self) -> list[Model]:
        data = await self._get_json("/models")
        return ModelListResponse.model_validate(data).models

    @log_operation("google.generate_content")
    @handle_provider_errors("generate_content", provider=PROVIDER)
    async def generate_content(
        self, model: str, request: GenerateContentRequest
    ) -> GenerateContentResponse:
        data = await self._post_json(
            f"/models/{model}:generateContent", self._payload(request)
        )
        return GenerateContentResponse.model_validate(data)

    @handle_provider_errors("generate_content_stream", provider=PROVIDER)
    async def generate_content_stream(
        self, model: str, request: GenerateContentRequest
    ) -> EventStream[GenerateContentResponse]:
        """
        Open a streamed generation.

        The body is one JSON array delivered incrementally; each element is
        yielded as a GenerateContentResponse.
        """
        decoder = JSONArrayDecoder(response_adapter, provider=PROVIDER)
        return await self._open_stream(
            f"/models/{model}:streamGenerateContent",
            self._payload(request),
            decoder,
        )
