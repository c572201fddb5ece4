"""Turn orchestrator: drives one conversation turn through the provider and tools."""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from enum import Enum

from twin.domain.errors import StepLimitExceeded, TwinError
from twin.domain.models.config import OrchestratorConfig
from twin.domain.models.context import ContextBundle
from twin.domain.models.conversation import (
    ConversationTurn,
    Message,
    Part,
    TextPart,
    ToolCallPart,
)
from twin.domain.models.events import (
    BaseEvent,
    TextDeltaEvent,
    ToolCallResultEvent,
    ToolCallStartedEvent,
    TurnCompleteEvent,
    TurnErrorEvent,
)
from twin.domain.prompts import PromptAssembler
from twin.domain.tools.registry import ToolRegistry
from twin.llm.client import LLMClient, ProviderRequest, ProviderToolCall

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong while generating a reply. Please try again."


class TurnState(str, Enum):
    REQUESTING = "requesting"
    STREAMING = "streaming"
    TOOL_PENDING = "tool_pending"
    COMPLETED = "completed"
    FAILED = "failed"


class TurnOrchestrator:
    """Runs the request / stream / tool loop for a single turn.

    One orchestrator instance serves one turn. Events are yielded in order
    with a monotonically increasing sequence number, and the last event is
    always exactly one of ``turn-complete`` or ``turn-error``.
    """

    def __init__(
        self,
        client: LLMClient,
        registry: ToolRegistry,
        config: OrchestratorConfig,
        prompt_assembler: PromptAssembler | None = None,
    ) -> None:
        self.client = client
        self.registry = registry
        self.config = config
        self.prompt_assembler = prompt_assembler or PromptAssembler()
        self.state = TurnState.REQUESTING
        self.steps = 0
        self._sequence = 0

    def _sequenced(self, event: BaseEvent) -> BaseEvent:
        self._sequence += 1
        return event.model_copy(update={"sequence": self._sequence})

    async def run(self, context: ContextBundle, history: Sequence[Message]) -> AsyncIterator[BaseEvent]:
        """Run the turn and yield stream events.

        Args:
            context: Snapshot of business facts grounding this turn
            history: Prior messages, ending with the user's message

        Yields:
            StreamEvents, terminated by exactly one terminal event
        """
        turn = ConversationTurn(history)
        system_prompt = self.prompt_assembler.assemble(context)
        tools = tuple(self.registry.declarations())
        emitted_text: list[str] = []

        try:
            while True:
                self.state = TurnState.REQUESTING
                request = ProviderRequest(
                    system_prompt=system_prompt,
                    messages=turn.messages,
                    tools=tools,
                    model=self.config.model,
                )

                leading: list[str] = []
                trailing: list[str] = []
                calls: list[ProviderToolCall] = []

                stream = self.client.stream(request)
                try:
                    async for chunk in stream:
                        self.state = TurnState.STREAMING
                        if chunk.text:
                            # Text after a tool call in the same response is held until tools finish
                            if calls:
                                trailing.append(chunk.text)
                            else:
                                leading.append(chunk.text)
                                emitted_text.append(chunk.text)
                                yield self._sequenced(TextDeltaEvent(delta=chunk.text))
                        calls.extend(chunk.tool_calls)
                        if chunk.trailing_text:
                            if calls:
                                trailing.append(chunk.trailing_text)
                            else:
                                leading.append(chunk.trailing_text)
                                emitted_text.append(chunk.trailing_text)
                                yield self._sequenced(TextDeltaEvent(delta=chunk.trailing_text))
                finally:
                    await stream.aclose()

                if not calls:
                    text = "".join(leading)
                    turn.append(Message(role="assistant", parts=(TextPart(text=text),)))
                    self.state = TurnState.COMPLETED
                    logger.info(
                        "Turn completed",
                        extra={"business_id": context.business_id, "steps": self.steps},
                    )
                    yield self._sequenced(TurnCompleteEvent(text="".join(emitted_text), steps=self.steps))
                    return

                if self.steps >= self.config.max_tool_steps:
                    raise StepLimitExceeded(
                        f"The assistant needed more than {self.config.max_tool_steps} tool steps to answer. "
                        "Please try a simpler question."
                    )

                self.state = TurnState.TOOL_PENDING
                self.steps += 1
                call_parts = [ToolCallPart(call_id=c.call_id, name=c.name, arguments=c.arguments) for c in calls]
                held_text = "".join(trailing)

                assistant_parts: list[Part] = []
                if leading:
                    assistant_parts.append(TextPart(text="".join(leading)))
                assistant_parts.extend(call_parts)
                if held_text:
                    assistant_parts.append(TextPart(text=held_text))
                turn.append(Message(role="assistant", parts=tuple(assistant_parts)))

                result_parts: list[Part] = []
                for call in call_parts:
                    yield self._sequenced(
                        ToolCallStartedEvent(
                            call_id=call.call_id,
                            tool_name=call.name,
                            input=call.arguments if isinstance(call.arguments, dict) else {},
                        )
                    )
                    result = await self.registry.invoke(call, context)
                    result_parts.append(result.to_part())
                    yield self._sequenced(
                        ToolCallResultEvent(
                            call_id=result.call_id,
                            tool_name=result.tool_name,
                            output=result.output,
                            error=result.to_part().error,
                        )
                    )
                turn.append(Message(role="tool", parts=tuple(result_parts)))

                if held_text:
                    emitted_text.append(held_text)
                    yield self._sequenced(TextDeltaEvent(delta=held_text))

        except asyncio.CancelledError:
            self.state = TurnState.FAILED
            logger.info("Turn cancelled", extra={"business_id": context.business_id, "steps": self.steps})
            raise
        except TwinError as e:
            self.state = TurnState.FAILED
            logger.warning(
                f"Turn failed: {e.code}",
                extra={"business_id": context.business_id, "error_code": e.code, "steps": self.steps},
            )
            yield self._sequenced(TurnErrorEvent(code=e.code, message=e.message))
        except Exception as e:
            self.state = TurnState.FAILED
            logger.error(
                f"Unexpected turn failure: {e}",
                exc_info=True,
                extra={"business_id": context.business_id},
            )
            yield self._sequenced(TurnErrorEvent(code=TwinError.code, message=GENERIC_FAILURE_MESSAGE))
