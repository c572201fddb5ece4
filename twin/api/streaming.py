"""Server-Sent Events transport for turn event streams."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from twin.domain.errors import TurnTimeout, TwinError, UpstreamDisconnect
from twin.domain.models.events import BaseEvent, TurnErrorEvent

logger = logging.getLogger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

_END = object()


def encode_sse(event: BaseEvent) -> str:
    """Frame one event as ``event: <type>`` plus a JSON ``data`` line."""
    return f"event: {event.type.value}\ndata: {event.model_dump_json()}\n\n"


class StreamTransport:
    """Forwards events from a turn to the client as they occur.

    The event source runs in its own task and hands events over through a
    queue. The transport enforces the total turn duration, watches for client
    disconnects and guarantees the stream ends with a terminal event.
    """

    def __init__(self, turn_timeout_seconds: float = 60.0, disconnect_poll_seconds: float = 0.5) -> None:
        self.turn_timeout_seconds = turn_timeout_seconds
        self.disconnect_poll_seconds = disconnect_poll_seconds

    async def events(
        self,
        source: AsyncIterator[BaseEvent],
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> AsyncIterator[BaseEvent]:
        """Yield events from ``source`` in arrival order until a terminal event.

        On client disconnect the source task is cancelled and nothing more is
        yielded.
        """
        # One slot so the turn only advances as fast as the client reads
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        producer = asyncio.create_task(self._produce(source, queue))
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.turn_timeout_seconds
        next_poll = loop.time() + self.disconnect_poll_seconds
        last_sequence = 0

        try:
            while True:
                now = loop.time()
                remaining = deadline - now
                if remaining <= 0:
                    logger.warning("Turn timed out", extra={"timeout_seconds": self.turn_timeout_seconds})
                    yield TurnErrorEvent(
                        code=TurnTimeout.code,
                        message="The reply took too long and was stopped. Please try again.",
                        sequence=last_sequence + 1,
                    )
                    return

                if is_disconnected is not None and now >= next_poll:
                    next_poll = now + self.disconnect_poll_seconds
                    if await is_disconnected():
                        logger.info("Client disconnected; cancelling turn")
                        return

                try:
                    item = await asyncio.wait_for(
                        queue.get(), timeout=min(remaining, self.disconnect_poll_seconds)
                    )
                except asyncio.TimeoutError:
                    continue

                if item is _END:
                    logger.warning("Event source ended without a terminal event")
                    yield TurnErrorEvent(
                        code=UpstreamDisconnect.code,
                        message="The reply ended unexpectedly. Please try again.",
                        sequence=last_sequence + 1,
                    )
                    return

                if item.sequence <= last_sequence:
                    item = item.model_copy(update={"sequence": last_sequence + 1})
                last_sequence = item.sequence
                yield item
                if item.is_terminal:
                    return
        finally:
            if not producer.done():
                producer.cancel()
            await asyncio.gather(producer, return_exceptions=True)

    async def stream(
        self,
        source: AsyncIterator[BaseEvent],
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
    ) -> AsyncIterator[str]:
        """SSE-encoded variant of ``events`` for a StreamingResponse body."""
        async for event in self.events(source, is_disconnected):
            yield encode_sse(event)

    @staticmethod
    async def _produce(source: AsyncIterator[BaseEvent], queue: asyncio.Queue) -> None:
        try:
            async for event in source:
                await queue.put(event)
                if event.is_terminal:
                    return
        except TwinError as e:
            await queue.put(TurnErrorEvent(code=e.code, message=e.message))
            return
        except Exception as e:
            logger.error(f"Event source failed: {e}", exc_info=True)
            await queue.put(
                TurnErrorEvent(code=TwinError.code, message="Something went wrong. Please try again.")
            )
            return
        await queue.put(_END)
