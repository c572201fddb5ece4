"""Structured output: single-shot typed generation that fails closed."""

import logging
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from twin.domain.errors import SchemaValidationError
from twin.domain.models.structured import StructuredSchema  # noqa: F401  re-exported
from twin.llm.client import LLMClient

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL | re.IGNORECASE)


SchemaT = TypeVar("SchemaT", bound=BaseModel)


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    match = _FENCE_RE.match(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


class StructuredOutputValidator:
    """Generates provider output for a schema and validates it."""

    def __init__(self, client: LLMClient, model: str | None = None) -> None:
        self.client = client
        self.model = model

    async def generate(self, schema: type[SchemaT], prompt: str, system_prompt: str = "") -> SchemaT:
        """Generate an instance of ``schema``.

        Raises:
            SchemaValidationError: Output is not JSON or does not match the schema
            ProviderError: Upstream failure
        """
        raw = await self.client.generate_structured(
            system_prompt=system_prompt,
            prompt=prompt,
            schema=schema,
            model=self.model,
        )
        return self.validate(schema, raw)

    @staticmethod
    def validate(schema: type[SchemaT], raw: str) -> SchemaT:
        """Validate raw provider text against ``schema``.

        Pure: the same input always yields an equal instance or the same error.
        """
        text = strip_code_fences(raw or "")
        if not text:
            raise SchemaValidationError(f"Model returned no {schema.__name__} output")
        try:
            return schema.model_validate_json(text)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning(
                "Structured output failed validation",
                extra={"schema": schema.__name__, "errors": problems[:500]},
            )
            raise SchemaValidationError(f"Model output did not match {schema.__name__}: {problems}")
