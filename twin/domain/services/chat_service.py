"""Chat service: validates inbound history and runs a streaming turn."""

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from twin.core.business_context import set_business_context
from twin.domain.context import ContextAssembler, ContextCache
from twin.domain.errors import InvalidChatRequest
from twin.domain.models.config import OrchestratorConfig
from twin.domain.models.context import ContextBundle
from twin.domain.models.conversation import Message, Role
from twin.domain.models.events import BaseEvent
from twin.domain.tools.registry import ToolRegistry
from twin.llm.client import LLMClient
from twin.llm.orchestrator import TurnOrchestrator
from twin.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InboundMessage:
    """A client message reduced to its role and text segments."""

    role: Role
    texts: tuple[str, ...]


@dataclass(frozen=True)
class PreparedTurn:
    """Everything a turn needs before the first provider call."""

    context: ContextBundle
    history: tuple[Message, ...]


class ChatService:
    """Service for processing streaming chat requests."""

    def __init__(
        self,
        session: AsyncSession,
        llm_client: LLMClient,
        registry: ToolRegistry,
        config: OrchestratorConfig,
        cache: ContextCache | None = None,
        max_messages: int | None = None,
        max_text_chars: int | None = None,
    ) -> None:
        self.llm_client = llm_client
        self.registry = registry
        self.config = config
        self.context_assembler = ContextAssembler(
            session,
            cache=cache,
            max_products=settings.context_max_products,
            max_offers=settings.context_max_offers,
        )
        self.max_messages = max_messages or settings.chat_max_messages
        self.max_text_chars = max_text_chars or settings.chat_max_text_chars

    def build_history(self, messages: Sequence[InboundMessage]) -> tuple[Message, ...]:
        """Check request bounds and convert to conversation messages.

        System messages from the client are dropped; the system prompt comes
        only from the context bundle.

        Raises:
            InvalidChatRequest: If any bound is violated
        """
        if not messages:
            raise InvalidChatRequest("At least one message is required")
        if len(messages) > self.max_messages:
            raise InvalidChatRequest(f"Too many messages (max {self.max_messages})")

        history: list[Message] = []
        for message in messages:
            for text in message.texts:
                if len(text) > self.max_text_chars:
                    raise InvalidChatRequest(
                        f"Message text too long (max {self.max_text_chars} characters)"
                    )
            if message.role == "system":
                continue
            content = "".join(message.texts)
            if not content and message.role != "user":
                continue
            history.append(Message.text(message.role, content))

        if not history or history[-1].role != "user":
            raise InvalidChatRequest("The last message must come from the user")
        if not history[-1].text_content.strip():
            raise InvalidChatRequest("The last message must contain text")
        return tuple(history)

    async def prepare_turn(self, business_id: int, messages: Sequence[InboundMessage]) -> PreparedTurn:
        """Validate the request and assemble context.

        Raises:
            InvalidChatRequest: Request bounds violated
            BusinessNotFound: No active business with this id
        """
        history = self.build_history(messages)
        set_business_context(business_id)
        context = await self.context_assembler.assemble(business_id)
        return PreparedTurn(context=context, history=history)

    def stream_turn(self, prepared: PreparedTurn) -> AsyncIterator[BaseEvent]:
        """Start the orchestrated turn and return its event stream."""
        orchestrator = TurnOrchestrator(self.llm_client, self.registry, self.config)
        logger.info(
            "Starting chat turn",
            extra={
                "business_id": prepared.context.business_id,
                "history_length": len(prepared.history),
                "provider": self.llm_client.name,
            },
        )
        return orchestrator.run(prepared.context, prepared.history)
