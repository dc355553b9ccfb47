"""
Error hierarchy for provider clients and stream decoding.

Two failure kinds matter while streaming:
- TransportError: the byte source failed mid-stream. Terminal.
- DecodeError: one record could not be parsed. The stream keeps going.

Both derive from StreamError so stream consumers can test a single type.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base gateway error with provider context."""

    def __init__(
        self,
        message: str,
        provider: str = "unknown",
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.response_data = response_data or {}


class StreamError(GatewayError):
    """Errors surfaced as items of an event stream."""


class TransportError(StreamError):
    """The underlying byte source failed."""

    def __init__(self, message: str, cause: BaseException | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.cause = cause


class DecodeError(StreamError):
    """A single record could not be decoded into the provider schema."""

    def __init__(
        self,
        message: str,
        record: str = "",
        cause: BaseException | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.record = record
        self.cause = cause


class InvalidResponseError(GatewayError):
    """Provider answered with a non-success status."""

    def __init__(self, message: str, body: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.body = body


class ProviderError(GatewayError):
    """Provider-specific configuration or setup errors."""
    pass
