"""LLM client interface."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from twin.domain.models.conversation import Message
from twin.domain.tools.registry import ToolDeclaration


@dataclass(frozen=True)
class ProviderToolCall:
    """A tool call decoded from the provider's output."""

    call_id: str
    name: str
    arguments: Any = field(default_factory=dict)  # dict, or raw string if not valid JSON


@dataclass(frozen=True)
class ProviderChunk:
    """One incremental unit of provider output.

    ``text`` precedes any tool calls in the chunk; ``trailing_text`` is text
    the provider emitted after a tool call within the same chunk.
    """

    text: str = ""
    tool_calls: tuple[ProviderToolCall, ...] = ()
    trailing_text: str = ""
    finish_reason: str | None = None


@dataclass(frozen=True)
class ProviderRequest:
    """Everything one provider round trip needs."""

    system_prompt: str
    messages: tuple[Message, ...]
    tools: tuple[ToolDeclaration, ...] = ()
    model: str | None = None
    temperature: float = 0.3


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    name: str = "llm"

    @abstractmethod
    def stream(self, request: ProviderRequest) -> AsyncIterator[ProviderChunk]:
        """Stream a response as ProviderChunks.

        Implementations are async generators. Closing the generator must
        release the upstream connection.

        Raises:
            AuthRejected: Credentials rejected
            RateLimited: Provider throttled the request
            UpstreamDisconnect: Connection failed or dropped
        """

    @abstractmethod
    async def generate_structured(
        self,
        system_prompt: str,
        prompt: str,
        schema: type[BaseModel],
        model: str | None = None,
    ) -> str:
        """Single-shot generation constrained to a JSON schema.

        Returns the raw text; validation is the caller's job.
        """
