"""
Per-provider clients and the provider configuration they are built from.
"""

from .anthropic import AnthropicClient
from .base import BaseProviderClient
from .google import GoogleClient
from .models import (
    DEFAULT_MODELS,
    ModelCapabilities,
    ModelInfo,
    ModelPricing,
    ProviderConfig,
    ProviderType,
)
from .openai import OpenAIClient

__all__ = [
    "DEFAULT_MODELS",
    "AnthropicClient",
    "BaseProviderClient",
    "GoogleClient",
    "ModelCapabilities",
    "ModelInfo",
    "ModelPricing",
    "OpenAIClient",
    "ProviderConfig",
    "ProviderType",
]
