"""Structured marketing copy generated for a business."""

from pydantic import Field

from twin.domain.models.structured import StructuredSchema


class MarketingCopy(StructuredSchema):
    """Short promotional copy grounded in the business context."""

    headline: str = Field(min_length=1, max_length=80)
    tagline: str = Field(min_length=1, max_length=140)
    body: str = Field(min_length=1)
    call_to_action: str = Field(min_length=1)
    hashtags: list[str] = Field(default_factory=list, max_length=5)
