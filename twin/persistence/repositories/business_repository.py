"""Business and persona repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from twin.persistence.models.business import Business, BusinessPersona
from twin.persistence.repositories.base import BaseRepository


class BusinessRepository(BaseRepository[Business]):
    """Repository for Business entities."""

    def __init__(self, session: AsyncSession):
        """Initialize business repository."""
        super().__init__(Business, session)

    async def get_active(self, business_id: int) -> Business | None:
        """Get a business by ID if it is active."""
        stmt = select(Business).where(
            Business.id == business_id,
            Business.status == "active",
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class BusinessPersonaRepository(BaseRepository[BusinessPersona]):
    """Repository for BusinessPersona entities."""

    def __init__(self, session: AsyncSession):
        """Initialize persona repository."""
        super().__init__(BusinessPersona, session)

    async def get_by_business_id(self, business_id: int) -> BusinessPersona | None:
        """Get persona configuration by business ID."""
        stmt = select(BusinessPersona).where(BusinessPersona.business_id == business_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
