"""Tool registry and built-in tools."""

from twin.domain.tools.business_tools import build_default_registry
from twin.domain.tools.registry import ToolDeclaration, ToolRegistry

__all__ = ["ToolDeclaration", "ToolRegistry", "build_default_registry"]
