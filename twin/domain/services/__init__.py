"""Domain services."""

from twin.domain.services.chat_service import ChatService, InboundMessage, PreparedTurn
from twin.domain.services.marketing_copy_service import MarketingCopyService

__all__ = ["ChatService", "InboundMessage", "MarketingCopyService", "PreparedTurn"]
