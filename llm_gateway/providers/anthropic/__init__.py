from .client import AnthropicClient
from .types import Message, MessagesRequest, StreamEvent

__all__ = [
    "AnthropicClient",
    "Message",
    "MessagesRequest",
    "StreamEvent",
]
