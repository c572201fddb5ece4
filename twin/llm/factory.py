"""Factory to create LLM clients based on a mode string or settings."""
from typing import Optional

from twin.domain.errors import ConfigError
from twin.llm.client import LLMClient
from twin.llm.gemini_client import GeminiClient
from twin.llm.openrouter_client import OpenRouterClient
from twin.settings import settings


def get_llm_client(mode: Optional[str] = None) -> LLMClient:
    """Return an LLMClient instance for the requested mode.

    Priority: explicit `mode` argument -> `LLM_MODE` setting -> 'openrouter'

    Raises:
        ConfigError: Unknown mode or missing/invalid credentials
    """
    selected = (mode or settings.llm_mode or "openrouter").lower()

    if selected in ("openrouter", "openai"):
        return OpenRouterClient()

    if selected in ("gemini", "google", "googleai"):
        return GeminiClient()

    raise ConfigError(f"Unsupported LLM mode: {selected}")
