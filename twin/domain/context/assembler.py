"""Context assembler: loads the business facts grounding one turn."""

import logging
from datetime import date, datetime
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from twin.domain.context.cache import ContextCache
from twin.domain.errors import BusinessNotFound
from twin.domain.models.context import (
    BusinessProfile,
    ContextBundle,
    OfferInfo,
    PersonaConfig,
    ProductInfo,
)
from twin.persistence.models.business import Business, BusinessPersona
from twin.persistence.models.catalog import Offer, Product
from twin.persistence.repositories.business_repository import (
    BusinessPersonaRepository,
    BusinessRepository,
)
from twin.persistence.repositories.catalog_repository import OfferRepository, ProductRepository

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Builds a frozen ContextBundle for a business.

    Every fact is read before the bundle is returned, so the system prompt
    is fully determined before the first provider call. Only SELECT
    statements are issued.
    """

    def __init__(
        self,
        session: AsyncSession,
        cache: ContextCache | None = None,
        max_products: int = 50,
        max_offers: int = 20,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.business_repo = BusinessRepository(session)
        self.persona_repo = BusinessPersonaRepository(session)
        self.product_repo = ProductRepository(session)
        self.offer_repo = OfferRepository(session)
        self.cache = cache
        self.max_products = max_products
        self.max_offers = max_offers
        self._today = today

    async def assemble(self, business_id: int) -> ContextBundle:
        """Assemble the context bundle for a business.

        Args:
            business_id: Target business

        Returns:
            Frozen ContextBundle

        Raises:
            BusinessNotFound: If no active business matches
        """
        if self.cache is not None:
            cached = self.cache.get(business_id)
            if cached is not None:
                logger.debug("Context cache hit", extra={"business_id": business_id})
                return cached

        business = await self.business_repo.get_active(business_id)
        if business is None:
            raise BusinessNotFound(f"Business {business_id} not found")

        persona = await self.persona_repo.get_by_business_id(business_id)
        products = await self.product_repo.list_available(business_id, limit=self.max_products)
        offers = await self.offer_repo.list_active(
            business_id, on_date=self._today(), limit=self.max_offers
        )

        bundle = ContextBundle(
            business_id=business.id,
            profile=_profile_from(business),
            persona=_persona_from(persona, business),
            products=tuple(_product_from(p) for p in products),
            offers=tuple(_offer_from(o) for o in offers),
            assembled_at=datetime.utcnow(),
        )

        logger.info(
            "Context assembled",
            extra={
                "business_id": business_id,
                "product_count": len(bundle.products),
                "offer_count": len(bundle.offers),
            },
        )

        if self.cache is not None:
            self.cache.set(bundle)
        return bundle


def _profile_from(business: Business) -> BusinessProfile:
    return BusinessProfile(
        name=business.name,
        category=business.category,
        description=business.description,
        address=business.address,
        phone=business.phone,
        website=business.website,
        hours=business.hours,
        rating=business.rating or None,
    )


def _persona_from(persona: BusinessPersona | None, business: Business) -> PersonaConfig:
    if persona is None:
        return PersonaConfig(display_name=f"{business.name} Assistant")
    return PersonaConfig(
        display_name=persona.display_name or f"{business.name} Assistant",
        tone=persona.tone or PersonaConfig.model_fields["tone"].default,
        greeting=persona.greeting,
        instructions=persona.instructions,
        appointments_enabled=bool(persona.appointments_enabled),
    )


def _product_from(product: Product) -> ProductInfo:
    return ProductInfo(
        name=product.name,
        description=product.description,
        price=product.price,
        currency=product.currency or "USD",
        category=product.category,
    )


def _offer_from(offer: Offer) -> OfferInfo:
    return OfferInfo(
        title=offer.title,
        description=offer.description,
        discount_type=offer.discount_type or "percent",
        discount_value=offer.discount_value,
        terms=offer.terms,
        valid_until=offer.valid_until,
    )
