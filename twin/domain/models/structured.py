"""Base class for structured output schemas."""

from pydantic import BaseModel, ConfigDict


class StructuredSchema(BaseModel):
    """Base for schemas the structured output validator enforces.

    Unknown fields are rejected and no type coercion is applied.
    """

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)
