"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from twin.domain.models.context import (
    BusinessProfile,
    ContextBundle,
    OfferInfo,
    PersonaConfig,
    ProductInfo,
)
from twin.domain.tools import build_default_registry
from twin.llm.client import LLMClient, ProviderChunk
from twin.persistence.database import Base, get_db
from twin.persistence.demo_data import seed_coastal_bites
from twin.persistence.models import *  # noqa: F401, F403


class ScriptedLLMClient(LLMClient):
    """Provider double that replays scripted responses.

    Each entry of ``rounds`` is the list of chunks for one provider call.
    An Exception in a round is raised at that point of the stream.
    """

    name = "scripted"

    def __init__(self, rounds=(), repeat_last=False, structured_output=""):
        self.rounds = [list(r) for r in rounds]
        self.repeat_last = repeat_last
        self.structured_output = structured_output
        self.requests = []
        self.chunks_pulled = 0
        self.structured_calls = 0
        self.closed_streams = 0

    async def stream(self, request):
        self.requests.append(request)
        if self.rounds:
            round_ = self.rounds[0] if (self.repeat_last and len(self.rounds) == 1) else self.rounds.pop(0)
        else:
            round_ = [ProviderChunk(text="", finish_reason="stop")]
        try:
            for item in round_:
                if isinstance(item, BaseException):
                    raise item
                self.chunks_pulled += 1
                yield item
        finally:
            self.closed_streams += 1

    async def generate_structured(self, system_prompt, prompt, schema, model=None):
        self.structured_calls += 1
        return self.structured_output


class RecordingSubmitter:
    """AppointmentSubmitter double that records requests."""

    def __init__(self, reference="APT-TEST0001"):
        self.reference = reference
        self.requests = []

    async def submit(self, request):
        self.requests.append(request)
        return self.reference


@pytest.fixture
async def db_session():
    """Create a test database session."""
    # Use in-memory SQLite for testing
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def coastal_bites(db_session):
    """Seed the Coastal Bites demo business."""
    return await seed_coastal_bites(db_session, today=date.today())


@pytest.fixture
def coastal_bundle():
    """A Coastal Bites context bundle built without a database."""
    return ContextBundle(
        business_id=1,
        profile=BusinessProfile(
            name="Coastal Bites",
            category="Seafood Restaurant",
            address="12 Harbor Walk, Bayview",
            hours="Tue-Sun 11am-9pm",
        ),
        persona=PersonaConfig(display_name="Coastal Bites Assistant", appointments_enabled=True),
        products=(
            ProductInfo(name="Fish Tacos", price=Decimal("12.50"), category="Mains"),
            ProductInfo(name="Clam Chowder", price=Decimal("9.00"), category="Soups"),
            ProductInfo(name="Lobster Roll", price=Decimal("24.00"), category="Mains"),
        ),
        offers=(
            OfferInfo(
                title="Happy Hour Special",
                description="20% off all mains on weekdays from 3pm to 5pm",
                discount_type="percent",
                discount_value=Decimal("20"),
            ),
        ),
    )


@pytest.fixture
def submitter():
    return RecordingSubmitter()


@pytest.fixture
def registry(submitter):
    """Frozen default registry with a recording appointment submitter."""
    return build_default_registry(submitter, default_timeout_seconds=1.0)


@pytest.fixture
def make_llm():
    """Factory for scripted provider doubles."""
    return ScriptedLLMClient


@pytest.fixture
async def api_client(db_session, registry):
    """Create an async test client bound to the test database session."""
    import httpx
    from twin.main import app

    app.dependency_overrides[get_db] = lambda: db_session
    # Lifespan does not run under ASGITransport; install startup state directly
    app.state.tool_registry = registry
    app.state.context_cache = None

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
