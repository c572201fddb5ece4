"""Demo business used for local development and end-to-end tests."""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from twin.persistence.models.business import Business, BusinessPersona
from twin.persistence.models.catalog import Offer, Product

COASTAL_BITES_CODE = "MRC-COASTAL-0001"


async def seed_coastal_bites(session: AsyncSession, today: date | None = None) -> Business:
    """Create the "Coastal Bites" demo business if it does not exist.

    The business has exactly one active offer (20% off), one expired offer and
    one unavailable product, so grounding and filtering are both visible.
    """
    result = await session.execute(select(Business).where(Business.merchant_code == COASTAL_BITES_CODE))
    existing = result.scalar_one_or_none()
    if existing:
        return existing

    today = today or date.today()
    business = Business(
        merchant_code=COASTAL_BITES_CODE,
        name="Coastal Bites",
        category="Seafood Restaurant",
        description="Casual seafood spot on the boardwalk serving fresh catch daily.",
        address="12 Harbor Walk, Bayview",
        phone="(555) 010-2233",
        website="https://coastalbites.example",
        hours="Tue-Sun 11am-9pm",
        status="active",
        rating=4.6,
    )
    session.add(business)
    await session.flush()

    session.add(
        BusinessPersona(
            business_id=business.id,
            display_name="Coastal Bites Assistant",
            tone="warm, upbeat and brief",
            greeting="Hi! Hungry for something fresh from the sea?",
            appointments_enabled=True,
        )
    )
    session.add_all([
        Product(
            business_id=business.id,
            name="Fish Tacos",
            description="Two grilled mahi tacos with mango salsa",
            price=Decimal("12.50"),
            category="Mains",
            sort_order=1,
        ),
        Product(
            business_id=business.id,
            name="Clam Chowder",
            description="New England style, served in a bread bowl",
            price=Decimal("9.00"),
            category="Soups",
            sort_order=2,
        ),
        Product(
            business_id=business.id,
            name="Lobster Roll",
            description="Maine lobster on a toasted brioche roll",
            price=Decimal("24.00"),
            category="Mains",
            sort_order=3,
        ),
        Product(
            business_id=business.id,
            name="Oyster Platter",
            description="Seasonal, currently out of stock",
            price=Decimal("30.00"),
            category="Raw Bar",
            is_available=False,
            sort_order=4,
        ),
    ])
    session.add_all([
        Offer(
            business_id=business.id,
            title="Happy Hour Special",
            description="20% off all mains on weekdays from 3pm to 5pm",
            discount_type="percent",
            discount_value=Decimal("20"),
            terms="Dine-in only",
            valid_from=today - timedelta(days=7),
            valid_until=today + timedelta(days=30),
            is_active=True,
        ),
        Offer(
            business_id=business.id,
            title="Summer Kickoff",
            description="$5 off any order over $30",
            discount_type="amount",
            discount_value=Decimal("5"),
            valid_from=today - timedelta(days=90),
            valid_until=today - timedelta(days=30),
            is_active=True,
        ),
    ])
    await session.commit()
    await session.refresh(business)
    return business
