"""Product and offer repositories."""

from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from twin.persistence.models.catalog import Offer, Product
from twin.persistence.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """Repository for Product entities."""

    def __init__(self, session: AsyncSession):
        """Initialize product repository."""
        super().__init__(Product, session)

    async def list_available(self, business_id: int, limit: int = 50) -> list[Product]:
        """List products currently available for a business."""
        stmt = (
            select(Product)
            .where(Product.business_id == business_id, Product.is_available.is_(True))
            .order_by(Product.sort_order, Product.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class OfferRepository(BaseRepository[Offer]):
    """Repository for Offer entities."""

    def __init__(self, session: AsyncSession):
        """Initialize offer repository."""
        super().__init__(Offer, session)

    async def list_active(
        self, business_id: int, on_date: date, limit: int = 20
    ) -> list[Offer]:
        """List offers that are switched on and valid on the given date.

        A null valid_from or valid_until is treated as an open bound.
        """
        stmt = (
            select(Offer)
            .where(
                Offer.business_id == business_id,
                Offer.is_active.is_(True),
                or_(Offer.valid_from.is_(None), Offer.valid_from <= on_date),
                or_(Offer.valid_until.is_(None), Offer.valid_until >= on_date),
            )
            .order_by(Offer.valid_until.is_(None), Offer.valid_until, Offer.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
