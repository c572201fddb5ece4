"""Explicit orchestrator configuration."""

from dataclasses import dataclass

from twin.domain.errors import ConfigError


@dataclass(frozen=True)
class OrchestratorConfig:
    """Per-process configuration handed to the turn orchestrator.

    Built once from settings at startup so the orchestrator never reads the
    environment itself.
    """

    model: str
    max_tool_steps: int = 5
    tool_timeout_seconds: float = 5.0

    def __post_init__(self) -> None:
        if self.max_tool_steps < 1:
            raise ConfigError("max_tool_steps must be at least 1")
        if self.tool_timeout_seconds <= 0:
            raise ConfigError("tool_timeout_seconds must be positive")
