"""Seed the "Coastal Bites" demo business for local development."""

import asyncio

from twin.persistence.database import AsyncSessionLocal, Base, engine
from twin.persistence.demo_data import seed_coastal_bites


async def seed_business():
    """Create tables (local dev only) and the demo business."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        try:
            business = await seed_coastal_bites(db)
            print(f"\n{'='*60}")
            print("Demo business ready")
            print(f"{'='*60}")
            print(f"Business ID: {business.id}")
            print(f"Name: {business.name}")
            print("\nTry it:")
            print(f"  POST /api/v1/chat/{business.id}/stream")
            print('  {"messages": [{"role": "user", "content": "what deals do you have?"}]}')
            return business.id
        except Exception as e:
            print(f"\n❌ Error: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(seed_business())
