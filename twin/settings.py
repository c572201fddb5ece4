"""Application settings using Pydantic BaseSettings."""

import os
import re

from pydantic_settings import BaseSettings, SettingsConfigDict

from twin.domain.models.config import OrchestratorConfig


def get_async_database_url() -> str:
    """Get database URL converted for asyncpg driver."""
    url = os.environ.get("DATABASE_URL", "") or settings.database_url
    if not url:
        return "sqlite+aiosqlite:///./twin.db"
    # Convert postgres:// to postgresql+asyncpg:// for SQLAlchemy async
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql://") and "+asyncpg" not in url:
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    # asyncpg doesn't support sslmode, it uses ssl parameter
    if "sslmode=" in url:
        url = re.sub(r'[?&]sslmode=[^&]*', '', url)
        url = url.rstrip('?&')
    return url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GCP Configuration (optional for local dev)
    gcp_project_id: str = "local-development"

    # Database (read-only from the chat core's point of view)
    database_url: str = ""

    # LLM provider selection: "openrouter" or "gemini"
    llm_mode: str = "openrouter"

    # OpenRouter
    openrouter_api_key: str = ""
    openrouter_model: str = "openai/gpt-5-mini"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    http_timeout_seconds: float = 60.0

    # Chat guardrails
    chat_max_tool_steps: int = 5
    chat_tool_timeout_seconds: float = 5.0
    chat_turn_timeout_seconds: float = 60.0
    chat_max_messages: int = 100
    chat_max_text_chars: int = 10_000
    chat_disconnect_poll_seconds: float = 0.5

    # Context assembly
    context_cache_ttl_seconds: int = 30
    context_max_products: int = 50
    context_max_offers: int = 20

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"

    # Cloud Tasks (appointment workflow)
    cloud_tasks_queue_name: str = "appointment-requests"
    cloud_tasks_location: str = "us-central1"
    cloud_tasks_worker_url: str | None = None  # Workflow endpoint; unset means log-only

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def active_model(self) -> str:
        """Model identifier for the selected provider."""
        if self.llm_mode.lower() in ("gemini", "google", "googleai"):
            return self.gemini_model
        return self.openrouter_model

    def orchestrator_config(self) -> OrchestratorConfig:
        """Build the explicit orchestrator configuration from settings."""
        return OrchestratorConfig(
            model=self.active_model,
            max_tool_steps=self.chat_max_tool_steps,
            tool_timeout_seconds=self.chat_tool_timeout_seconds,
        )


settings = Settings()
