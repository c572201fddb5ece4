"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from twin.api.middleware import RequestIdMiddleware
from twin.api.routes import api_router
from twin.domain.context import ContextCache
from twin.domain.tools import build_default_registry
from twin.infrastructure.appointments import get_appointment_submitter
from twin.logging_config import setup_logging
from twin.settings import settings

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Tool registration and configuration errors abort startup.
    """
    config = settings.orchestrator_config()
    app.state.tool_registry = build_default_registry(
        get_appointment_submitter(),
        default_timeout_seconds=config.tool_timeout_seconds,
    )
    app.state.context_cache = ContextCache(settings.context_cache_ttl_seconds)
    logger.info(
        "Digital Twin core started",
        extra={
            "llm_mode": settings.llm_mode,
            "model": config.model,
            "tools": [d.name for d in app.state.tool_registry.declarations()],
        },
    )
    yield
    app.state.context_cache.invalidate()


# Create FastAPI app
app = FastAPI(
    title="Merchant Digital Twin API",
    description="Conversational AI core for business directory Digital Twins",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.add_middleware(RequestIdMiddleware)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Merchant Digital Twin API",
        "version": "0.1.0",
        "docs": "/docs",
    }
