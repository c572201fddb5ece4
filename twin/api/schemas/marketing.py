"""Marketing copy request schema."""

from pydantic import BaseModel, Field


class MarketingCopyRequest(BaseModel):
    """Optional steering for generated copy."""

    goal: str | None = Field(default=None, max_length=500)
    channel: str | None = Field(default=None, max_length=50)
