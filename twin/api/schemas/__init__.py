"""API schemas package."""

from twin.api.schemas.chat import ChatMessage, ChatRequest, MessagePart
from twin.api.schemas.marketing import MarketingCopyRequest

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "MarketingCopyRequest",
    "MessagePart",
]
