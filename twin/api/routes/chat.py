"""Public streaming chat endpoint for the Digital Twin widget."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from twin.api.deps import CacheDep, LLMDep, OrchestratorConfigDep, RegistryDep, TransportDep
from twin.api.schemas.chat import ChatRequest
from twin.api.streaming import SSE_HEADERS, SSE_MEDIA_TYPE
from twin.domain.errors import TwinError
from twin.domain.services.chat_service import ChatService
from twin.persistence.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{business_id}/stream")
async def stream_chat(
    business_id: int,
    chat_request: ChatRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    llm_client: LLMDep,
    registry: RegistryDep,
    cache: CacheDep,
    config: OrchestratorConfigDep,
    transport: TransportDep,
) -> StreamingResponse:
    """Stream one Digital Twin turn as Server-Sent Events.

    Request bounds and the business lookup are checked before the response
    starts, so those failures are plain HTTP errors. Everything after that,
    provider failures included, arrives as a ``turn-error`` event.
    """
    chat_service = ChatService(db, llm_client, registry, config, cache=cache)

    try:
        prepared = await chat_service.prepare_turn(
            business_id,
            [message.to_inbound() for message in chat_request.messages],
        )
    except TwinError as e:
        logger.info(
            f"Chat request rejected: {e.code}",
            extra={"business_id": business_id, "error_code": e.code},
        )
        raise HTTPException(status_code=e.http_status, detail=e.message)

    events = chat_service.stream_turn(prepared)
    return StreamingResponse(
        transport.stream(events, request.is_disconnected),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )
