"""
Shared HTTP plumbing for provider clients.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ..exceptions import InvalidResponseError, ProviderError, TransportError
from ..streaming import EventStream, RecordDecoder

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class BaseProviderClient:
    """HTTP client for one provider API, owning an httpx.AsyncClient."""

    provider: str = "unknown"
    default_base_url: str = ""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        *,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ProviderError(
                f"API key for provider '{self.provider}' is empty",
                provider=self.provider,
            )

        self.api_key: str = api_key
        self.base_url: str = (base_url or self.default_base_url).rstrip("/")
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._auth_headers(),
            params=self._auth_params(),
            timeout=timeout,
            transport=transport,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {}

    def _auth_params(self) -> dict[str, str]:
        return {}

    async def _ensure_success(self, response: httpx.Response) -> None:
        """Raise InvalidResponseError carrying the body of a failed response."""
        if response.is_success:
            return
        body = (await response.aread()).decode("utf-8", errors="replace")
        logger.warning(
            "Provider returned error status",
            provider=self.provider,
            status=response.status_code,
            body=body[:500],
        )
        raise InvalidResponseError(
            f"Invalid response: {body}",
            body=body,
            provider=self.provider,
            status_code=response.status_code,
        )

    async def _post_json(self, path: str, payload: dict[str, Any]) -> Any:
        response = await self.client.post(path, json=payload)
        await self._ensure_success(response)
        return response.json()

    async def _get_json(self, path: str) -> Any:
        response = await self.client.get(path)
        await self._ensure_success(response)
        return response.json()

    async def _open_stream[E](
        self, path: str, payload: dict[str, Any], decoder: RecordDecoder[E]
    ) -> EventStream[E]:
        """
        Send a streaming request and wrap its body in an EventStream.

        The response stays open until the stream finishes or is closed.
        """
        request = self.client.build_request("POST", path, json=payload)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise TransportError(
                f"Request error: {e!s}", cause=e, provider=self.provider
            ) from e

        try:
            await self._ensure_success(response)
        except InvalidResponseError:
            await response.aclose()
            raise

        logger.debug(
            "Stream opened",
            provider=self.provider,
            path=path,
            content_type=response.headers.get("content-type", ""),
        )
        return EventStream(
            response.aiter_bytes(), decoder, on_close=response.aclose
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
