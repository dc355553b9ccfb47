"""
Provider configuration and the static model catalog.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from ..exceptions import ProviderError
from ..logging_utils import operation_context
from .anthropic import AnthropicClient
from .base import BaseProviderClient
from .google import GoogleClient
from .openai import OpenAIClient


class ProviderType(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    OPENROUTER = "openrouter"


class ModelCapabilities(BaseModel):
    text: bool
    vision: bool
    image_gen: bool
    files: bool
    audio: bool


class ModelPricing(BaseModel):
    """USD per one million tokens."""
    input_cost_per_1m: float
    output_cost_per_1m: float


class ModelInfo(BaseModel):
    id: str
    display_name: str
    provider: ProviderType
    capabilities: ModelCapabilities
    pricing: ModelPricing | None = None
    context_window: int | None = None


CLIENT_CLASSES: dict[ProviderType, type[BaseProviderClient]] = {
    ProviderType.OPENAI: OpenAIClient,
    ProviderType.ANTHROPIC: AnthropicClient,
    ProviderType.GOOGLE: GoogleClient,
}


class ProviderConfig(BaseModel):
    """Credentials and endpoint for one provider."""
    provider_type: ProviderType
    api_key: str
    base_url: str | None = None

    def create_client(self, **kwargs) -> BaseProviderClient:
        """Build the matching client. OpenRouter has none."""
        client_class = CLIENT_CLASSES.get(self.provider_type)
        if client_class is None:
            raise ProviderError(
                f"No client available for provider '{self.provider_type.value}'",
                provider=self.provider_type.value,
            )
        return client_class(self.api_key, self.base_url, **kwargs)

    async def test_connection(self, **client_kwargs) -> bool:
        """Check that the credentials are accepted by the provider."""
        if self.provider_type is ProviderType.OPENROUTER:
            return True

        async with operation_context(
            "test_connection", context={"provider": self.provider_type.value}
        ):
            async with self.create_client(**client_kwargs) as client:
                return await client.test_connection()

    def get_default_models(self) -> list[ModelInfo]:
        return [
            model.model_copy(deep=True)
            for model in DEFAULT_MODELS.get(self.provider_type, [])
        ]


def _model(
    model_id: str,
    display_name: str,
    provider: ProviderType,
    *,
    text: bool = True,
    vision: bool = True,
    image_gen: bool = False,
    files: bool = True,
    audio: bool = False,
    pricing: tuple[float, float] | None = None,
    context_window: int | None = None,
) -> ModelInfo:
    return ModelInfo(
        id=model_id,
        display_name=display_name,
        provider=provider,
        capabilities=ModelCapabilities(
            text=text, vision=vision, image_gen=image_gen, files=files, audio=audio
        ),
        pricing=(
            ModelPricing(input_cost_per_1m=pricing[0], output_cost_per_1m=pricing[1])
            if pricing else None
        ),
        context_window=context_window,
    )


_IMAGE_ONLY = {"text": False, "vision": False, "image_gen": True, "files": False}

DEFAULT_MODELS: dict[ProviderType, list[ModelInfo]] = {
    ProviderType.OPENAI: [
        _model("gpt-4o", "GPT-4o", ProviderType.OPENAI,
               pricing=(2.5, 10.0), context_window=128000),
        _model("gpt-4o-mini", "GPT-4o Mini", ProviderType.OPENAI,
               pricing=(0.15, 0.6), context_window=128000),
        _model("gpt-4-turbo", "GPT-4 Turbo", ProviderType.OPENAI,
               pricing=(10.0, 30.0), context_window=128000),
        _model("dall-e-3", "DALL-E 3", ProviderType.OPENAI, **_IMAGE_ONLY),
    ],
    ProviderType.ANTHROPIC: [
        _model("claude-sonnet-4-20250514", "Claude Sonnet 4", ProviderType.ANTHROPIC,
               pricing=(3.0, 15.0), context_window=200000),
        _model("claude-opus-4-20250514", "Claude Opus 4", ProviderType.ANTHROPIC,
               pricing=(15.0, 75.0), context_window=200000),
        _model("claude-haiku-4-20250514", "Claude Haiku 4", ProviderType.ANTHROPIC,
               pricing=(0.4, 2.0), context_window=200000),
    ],
    ProviderType.GOOGLE: [
        _model("gemini-1.5-pro", "Gemini 1.5 Pro", ProviderType.GOOGLE,
               audio=True, pricing=(1.25, 5.0), context_window=2097152),
        _model("gemini-1.5-flash", "Gemini 1.5 Flash", ProviderType.GOOGLE,
               audio=True, pricing=(0.075, 0.3), context_window=1048576),
        _model("imagen-3", "Imagen 3", ProviderType.GOOGLE, **_IMAGE_ONLY),
    ],
    ProviderType.OPENROUTER: [],
}
