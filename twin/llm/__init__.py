"""LLM abstraction layer."""

from twin.llm.client import LLMClient, ProviderChunk, ProviderRequest, ProviderToolCall
from twin.llm.factory import get_llm_client
from twin.llm.gemini_client import GeminiClient
from twin.llm.openrouter_client import OpenRouterClient
from twin.llm.orchestrator import TurnOrchestrator, TurnState
from twin.llm.structured import StructuredOutputValidator

__all__ = [
    "LLMClient",
    "ProviderChunk",
    "ProviderRequest",
    "ProviderToolCall",
    "GeminiClient",
    "OpenRouterClient",
    "TurnOrchestrator",
    "TurnState",
    "StructuredOutputValidator",
    "get_llm_client",
]
