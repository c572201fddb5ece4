"""Conversation history models shared by the orchestrator and providers."""

from dataclasses import dataclass, field
from typing import Any, Literal, Union

Role = Literal["user", "assistant", "system", "tool"]


@dataclass(frozen=True)
class TextPart:
    """Plain text content."""

    text: str
    type: Literal["text"] = "text"


@dataclass(frozen=True)
class ToolCallPart:
    """A tool invocation requested by the model."""

    call_id: str
    name: str
    arguments: Any = field(default_factory=dict)  # raw string when the provider sent invalid JSON
    type: Literal["tool-call"] = "tool-call"


@dataclass(frozen=True)
class ToolResultPart:
    """Outcome of a tool invocation, fed back to the model."""

    call_id: str
    name: str
    output: Any = None
    error: dict[str, str] | None = None  # {"code": ..., "message": ...}
    type: Literal["tool-result"] = "tool-result"

    @property
    def is_error(self) -> bool:
        return self.error is not None


Part = Union[TextPart, ToolCallPart, ToolResultPart]


@dataclass(frozen=True)
class Message:
    """One role-tagged message made of ordered parts."""

    role: Role
    parts: tuple[Part, ...]

    @classmethod
    def text(cls, role: Role, content: str) -> "Message":
        return cls(role=role, parts=(TextPart(text=content),))

    @property
    def text_content(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def tool_calls(self) -> list[ToolCallPart]:
        return [p for p in self.parts if isinstance(p, ToolCallPart)]

    @property
    def tool_results(self) -> list[ToolResultPart]:
        return [p for p in self.parts if isinstance(p, ToolResultPart)]


@dataclass(frozen=True)
class ToolInvocationResult:
    """Result of executing one tool call through the registry."""

    tool_name: str
    call_id: str
    input: dict[str, Any]
    output: Any = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_code is None

    def to_part(self) -> ToolResultPart:
        error = None
        if not self.ok:
            error = {"code": self.error_code, "message": self.error_message or ""}
        return ToolResultPart(
            call_id=self.call_id,
            name=self.tool_name,
            output=self.output,
            error=error,
        )


class ConversationTurn:
    """Append-only message history for one turn.

    Messages are immutable; the orchestrator may only append.
    """

    def __init__(self, messages: list[Message] | tuple[Message, ...] = ()) -> None:
        self._messages: list[Message] = list(messages)

    def append(self, message: Message) -> None:
        self._messages.append(message)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
