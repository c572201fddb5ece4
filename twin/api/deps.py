"""FastAPI dependencies for providers, tools and context."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from twin.api.streaming import StreamTransport
from twin.domain.context import ContextCache
from twin.domain.errors import ConfigError
from twin.domain.models.config import OrchestratorConfig
from twin.domain.tools.registry import ToolRegistry
from twin.llm.client import LLMClient
from twin.llm.factory import get_llm_client
from twin.persistence.database import get_db
from twin.settings import settings

logger = logging.getLogger(__name__)

__all__ = [
    "get_context_cache",
    "get_db",
    "get_llm",
    "get_orchestrator_config",
    "get_stream_transport",
    "get_tool_registry",
]


def get_llm() -> LLMClient:
    """Build the provider client for this request.

    Raises:
        HTTPException: 500 with an actionable message when credentials are
            missing or malformed
    """
    try:
        return get_llm_client(settings.llm_mode)
    except ConfigError as e:
        logger.error(f"LLM client misconfigured: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )


def get_tool_registry(request: Request) -> ToolRegistry:
    """Frozen tool registry built at startup."""
    return request.app.state.tool_registry


def get_context_cache(request: Request) -> ContextCache | None:
    return getattr(request.app.state, "context_cache", None)


def get_orchestrator_config() -> OrchestratorConfig:
    return settings.orchestrator_config()


def get_stream_transport() -> StreamTransport:
    return StreamTransport(
        turn_timeout_seconds=settings.chat_turn_timeout_seconds,
        disconnect_poll_seconds=settings.chat_disconnect_poll_seconds,
    )


LLMDep = Annotated[LLMClient, Depends(get_llm)]
RegistryDep = Annotated[ToolRegistry, Depends(get_tool_registry)]
CacheDep = Annotated[ContextCache | None, Depends(get_context_cache)]
OrchestratorConfigDep = Annotated[OrchestratorConfig, Depends(get_orchestrator_config)]
TransportDep = Annotated[StreamTransport, Depends(get_stream_transport)]
