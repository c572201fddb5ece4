"""API routes."""

from fastapi import APIRouter

from twin.api.routes import chat, marketing

api_router = APIRouter()

# Public routes
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(marketing.router, prefix="/businesses", tags=["marketing"])
