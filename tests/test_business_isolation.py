"""Tests for business-scoped data access."""

from datetime import date
from decimal import Decimal

from twin.persistence.models import Business, BusinessPersona, Offer, Product
from twin.persistence.repositories import (
    BusinessPersonaRepository,
    BusinessRepository,
    OfferRepository,
    ProductRepository,
)


async def _second_business(db_session, status="active"):
    other = Business(merchant_code="MRC-OTHER-0002", name="Harbor Books", status=status)
    db_session.add(other)
    await db_session.flush()
    db_session.add_all([
        Product(business_id=other.id, name="Sea Charts", price=Decimal("15.00")),
        Offer(business_id=other.id, title="Two for One", discount_type="other", is_active=True),
        BusinessPersona(business_id=other.id, display_name="Harbor Helper"),
    ])
    await db_session.commit()
    return other


async def test_available_products_exclude_other_business(db_session, coastal_bites):
    await _second_business(db_session)

    products = await ProductRepository(db_session).list_available(coastal_bites.id)

    names = [p.name for p in products]
    assert "Sea Charts" not in names
    assert "Oyster Platter" not in names
    assert names == ["Fish Tacos", "Clam Chowder", "Lobster Roll"]


async def test_active_offers_exclude_other_business(db_session, coastal_bites):
    other = await _second_business(db_session)
    repo = OfferRepository(db_session)

    ours = [o.title for o in await repo.list_active(coastal_bites.id, date.today())]
    theirs = [o.title for o in await repo.list_active(other.id, date.today())]

    assert ours == ["Happy Hour Special"]
    assert theirs == ["Two for One"]


async def test_persona_is_scoped(db_session, coastal_bites):
    other = await _second_business(db_session)
    repo = BusinessPersonaRepository(db_session)

    persona = await repo.get_by_business_id(other.id)

    assert persona.display_name == "Harbor Helper"
    assert (await repo.get_by_business_id(coastal_bites.id)).business_id == coastal_bites.id


async def test_inactive_business_is_not_found(db_session, coastal_bites):
    other = await _second_business(db_session, status="suspended")

    assert await BusinessRepository(db_session).get_active(other.id) is None
    assert (await BusinessRepository(db_session).get_active(coastal_bites.id)).name == "Coastal Bites"
