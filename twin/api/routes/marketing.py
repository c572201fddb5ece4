"""Structured marketing copy endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from twin.api.deps import CacheDep, LLMDep, OrchestratorConfigDep
from twin.api.schemas.marketing import MarketingCopyRequest
from twin.domain.errors import TwinError
from twin.domain.models.marketing import MarketingCopy
from twin.domain.services.marketing_copy_service import MarketingCopyService
from twin.persistence.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{business_id}/marketing-copy", response_model=MarketingCopy)
async def generate_marketing_copy(
    business_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    llm_client: LLMDep,
    cache: CacheDep,
    config: OrchestratorConfigDep,
    copy_request: MarketingCopyRequest | None = None,
) -> MarketingCopy:
    """Generate marketing copy that strictly matches the MarketingCopy schema."""
    service = MarketingCopyService(db, llm_client, cache=cache, model=config.model)
    copy_request = copy_request or MarketingCopyRequest()
    try:
        return await service.generate(business_id, goal=copy_request.goal, channel=copy_request.channel)
    except TwinError as e:
        logger.warning(
            f"Marketing copy failed: {e.code}",
            extra={"business_id": business_id, "error_code": e.code},
        )
        raise HTTPException(status_code=e.http_status, detail=e.message)
