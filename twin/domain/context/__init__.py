"""Context assembly for Digital Twin turns."""

from twin.domain.context.assembler import ContextAssembler
from twin.domain.context.cache import ContextCache

__all__ = ["ContextAssembler", "ContextCache"]
