"""Chat request schemas (AI SDK style UI messages)."""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from twin.domain.services.chat_service import InboundMessage


class MessagePart(BaseModel):
    """One part of a UI message. Only text parts carry content for the model."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None


class ChatMessage(BaseModel):
    """A message as sent by the chat widget.

    Content may arrive as a plain string, as a list of parts, or in ``parts``.
    """

    model_config = ConfigDict(extra="allow")

    role: Literal["user", "assistant", "system"]
    content: Union[str, list[MessagePart], None] = None
    parts: list[MessagePart] | None = None

    def text_segments(self) -> tuple[str, ...]:
        """Text of every text part, in order."""
        if self.parts:
            parts = self.parts
        elif isinstance(self.content, list):
            parts = self.content
        elif isinstance(self.content, str):
            return (self.content,)
        else:
            return ()
        return tuple(p.text or "" for p in parts if p.type == "text")

    def to_inbound(self) -> InboundMessage:
        return InboundMessage(role=self.role, texts=self.text_segments())


class ChatRequest(BaseModel):
    """Streaming chat request."""

    messages: list[ChatMessage] = Field(default_factory=list)
