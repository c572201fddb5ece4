"""Marketing copy generation with strict structured output."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from twin.domain.context import ContextAssembler, ContextCache
from twin.domain.models.marketing import MarketingCopy
from twin.domain.prompts import PromptAssembler
from twin.llm.client import LLMClient
from twin.llm.structured import StructuredOutputValidator
from twin.settings import settings

logger = logging.getLogger(__name__)

MARKETING_RULES = """## TASK
You write short marketing copy for the business described above.
- Use only the facts listed above. Never invent offers, prices or products.
- Respond with a single JSON object and nothing else.
- Fields: headline (max 80 characters), tagline (max 140 characters), body,
  call_to_action, hashtags (a list of at most 5 strings)."""

# Facts only; conversational rules do not apply to one-shot copy
MARKETING_SECTION_ORDER = ["business_info", "offers", "catalog"]


class MarketingCopyService:
    """Generates MarketingCopy for a business."""

    def __init__(
        self,
        session: AsyncSession,
        llm_client: LLMClient,
        cache: ContextCache | None = None,
        model: str | None = None,
    ) -> None:
        self.context_assembler = ContextAssembler(
            session,
            cache=cache,
            max_products=settings.context_max_products,
            max_offers=settings.context_max_offers,
        )
        self.validator = StructuredOutputValidator(llm_client, model=model)
        self.prompt_assembler = PromptAssembler(MARKETING_SECTION_ORDER)

    async def generate(self, business_id: int, goal: str | None = None, channel: str | None = None) -> MarketingCopy:
        """Generate copy for a business.

        Raises:
            BusinessNotFound: No active business with this id
            SchemaValidationError: Model output did not match MarketingCopy
            ProviderError: Upstream failure
        """
        bundle = await self.context_assembler.assemble(business_id)
        system_prompt = self.prompt_assembler.assemble(bundle) + "\n\n" + MARKETING_RULES

        prompt = f"Write marketing copy for {bundle.profile.name}."
        if goal:
            prompt += f" Goal: {goal}."
        if channel:
            prompt += f" Channel: {channel}."

        copy = await self.validator.generate(MarketingCopy, prompt, system_prompt=system_prompt)
        logger.info("Marketing copy generated", extra={"business_id": business_id})
        return copy
