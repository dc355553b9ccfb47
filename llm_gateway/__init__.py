"""
Uniform access to OpenAI-, Anthropic- and Google-style LLM APIs.

This package provides:
- Per-provider httpx clients for connection tests, model listing and generation
- Incremental decoding of streamed responses into typed events
- A static model catalog and small HTTP routes around it
"""

from __future__ import annotations

from .accumulator import MessageAccumulator
from .exceptions import (
    DecodeError,
    GatewayError,
    InvalidResponseError,
    ProviderError,
    StreamError,
    TransportError,
)
from .providers import (
    AnthropicClient,
    GoogleClient,
    ModelInfo,
    OpenAIClient,
    ProviderConfig,
    ProviderType,
)
from .streaming import EventStream

__all__ = [
    # Clients
    "AnthropicClient",
    # Exceptions
    "DecodeError",
    # Streaming
    "EventStream",
    "GatewayError",
    "GoogleClient",
    "InvalidResponseError",
    "MessageAccumulator",
    "ModelInfo",
    "OpenAIClient",
    "ProviderConfig",
    "ProviderError",
    "ProviderType",
    "StreamError",
    "TransportError",
]
