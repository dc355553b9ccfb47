from .client import OpenAIClient
from .types import ChatCompletionChunk, ChatCompletionRequest, ChatMessage

__all__ = [
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatMessage",
    "OpenAIClient",
]
