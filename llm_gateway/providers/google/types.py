"""
Google Generative Language API wire models.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class GoogleModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InlineData(GoogleModel):
    mime_type: str
    data: str


class FunctionCall(GoogleModel):
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class Part(GoogleModel):
    text: str | None = None
    inline_data: InlineData | None = None
    function_call: FunctionCall | None = None


class Content(GoogleModel):
    role: str | None = None
    parts: list[Part] = Field(default_factory=list)


class GenerationConfig(GoogleModel):
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    max_output_tokens: int | None = None
    candidate_count: int | None = None
    stop_sequences: list[str] | None = None


class GenerateContentRequest(GoogleModel):
    contents: list[Content]
    system_instruction: Content | None = None
    generation_config: GenerationConfig | None = None
    tools: list[dict[str, Any]] | None = None


class SafetyRating(GoogleModel):
    category: str
    probability: str


class Candidate(GoogleModel):
    content: Content | None = None
    finish_reason: str | None = None
    index: int | None = None
    safety_ratings: list[SafetyRating] = Field(default_factory=list)


class UsageMetadata(GoogleModel):
    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int = 0


class GenerateContentResponse(GoogleModel):
    """One element of a streamGenerateContent array, or a whole response."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        protected_namespaces=(),
    )

    candidates: list[Candidate] = Field(default_factory=list)
    usage_metadata: UsageMetadata | None = None
    model_version: str | None = None

    @property
    def text(self) -> str:
        """Concatenated text of the first candidate."""
        if not self.candidates or self.candidates[0].content is None:
            return ""
        return "".join(
            part.text for part in self.candidates[0].content.parts if part.text
        )


response_adapter: TypeAdapter[GenerateContentResponse] = TypeAdapter(
    GenerateContentResponse
)


class Model(GoogleModel):
    name: str
    display_name: str | None = None
    description: str | None = None
    input_token_limit: int | None = None
    output_token_limit: int | None = None
    supported_generation_methods: list[str] = Field(default_factory=list)


class ModelListResponse(GoogleModel):
    models: list[Model] = Field(default_factory=list)
    next_page_token: str | None = None
