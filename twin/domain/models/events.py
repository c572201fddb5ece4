"""Stream events emitted by the turn orchestrator."""

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Stream event types, in wire spelling."""

    TEXT_DELTA = "text-delta"
    TOOL_CALL_STARTED = "tool-call-started"
    TOOL_CALL_RESULT = "tool-call-result"
    TURN_ERROR = "turn-error"
    TURN_COMPLETE = "turn-complete"


TERMINAL_EVENT_TYPES = frozenset({EventType.TURN_ERROR, EventType.TURN_COMPLETE})


class BaseEvent(BaseModel):
    """Base model for all stream events."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    sequence: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENT_TYPES


class TextDeltaEvent(BaseEvent):
    """Incremental assistant text."""

    type: Literal[EventType.TEXT_DELTA] = EventType.TEXT_DELTA
    delta: str


class ToolCallStartedEvent(BaseEvent):
    """The model requested a tool and execution is starting."""

    type: Literal[EventType.TOOL_CALL_STARTED] = EventType.TOOL_CALL_STARTED
    call_id: str
    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolCallResultEvent(BaseEvent):
    """A tool finished, successfully or with an error payload."""

    type: Literal[EventType.TOOL_CALL_RESULT] = EventType.TOOL_CALL_RESULT
    call_id: str
    tool_name: str
    output: Any = None
    error: Optional[dict[str, str]] = None


class TurnErrorEvent(BaseEvent):
    """Terminal failure of the turn."""

    type: Literal[EventType.TURN_ERROR] = EventType.TURN_ERROR
    code: str
    message: str


class TurnCompleteEvent(BaseEvent):
    """Terminal success of the turn."""

    type: Literal[EventType.TURN_COMPLETE] = EventType.TURN_COMPLETE
    text: str
    steps: int = 0


StreamEvent = Union[
    TextDeltaEvent,
    ToolCallStartedEvent,
    ToolCallResultEvent,
    TurnErrorEvent,
    TurnCompleteEvent,
]
