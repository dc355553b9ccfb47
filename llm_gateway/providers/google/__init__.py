from .client import GoogleClient
from .types import Content, GenerateContentRequest, GenerateContentResponse, Part

__all__ = [
    "Content",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "GoogleClient",
    "Part",
]
