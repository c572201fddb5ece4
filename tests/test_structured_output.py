"""Tests for the structured output validator and marketing copy."""

import json

import pytest

from twin.domain.errors import SchemaValidationError
from twin.domain.models.marketing import MarketingCopy
from twin.domain.services.marketing_copy_service import MarketingCopyService
from twin.llm.structured import StructuredOutputValidator, strip_code_fences

VALID_COPY = {
    "headline": "Fresh catch, happy hour prices",
    "tagline": "20% off mains on weekdays from 3pm to 5pm at Coastal Bites.",
    "body": "Swing by the boardwalk for fish tacos and lobster rolls.",
    "call_to_action": "Visit us this week",
    "hashtags": ["seafood", "happyhour"],
}


class TestValidate:
    """Tests for StructuredOutputValidator.validate."""

    def test_valid_output(self):
        copy = StructuredOutputValidator.validate(MarketingCopy, json.dumps(VALID_COPY))

        assert copy.headline == VALID_COPY["headline"]
        assert copy.hashtags == ["seafood", "happyhour"]

    def test_idempotent(self):
        raw = json.dumps(VALID_COPY)

        assert StructuredOutputValidator.validate(MarketingCopy, raw) == StructuredOutputValidator.validate(
            MarketingCopy, raw
        )

    def test_missing_field(self):
        raw = json.dumps({k: v for k, v in VALID_COPY.items() if k != "call_to_action"})

        with pytest.raises(SchemaValidationError):
            StructuredOutputValidator.validate(MarketingCopy, raw)

    def test_wrong_type_is_not_coerced(self):
        raw = json.dumps({**VALID_COPY, "headline": 42})

        with pytest.raises(SchemaValidationError):
            StructuredOutputValidator.validate(MarketingCopy, raw)

    def test_constraint_violation(self):
        raw = json.dumps({**VALID_COPY, "headline": "x" * 81})

        with pytest.raises(SchemaValidationError):
            StructuredOutputValidator.validate(MarketingCopy, raw)

    def test_too_many_hashtags(self):
        raw = json.dumps({**VALID_COPY, "hashtags": ["a", "b", "c", "d", "e", "f"]})

        with pytest.raises(SchemaValidationError):
            StructuredOutputValidator.validate(MarketingCopy, raw)

    def test_extra_field_rejected(self):
        raw = json.dumps({**VALID_COPY, "discount_code": "FREE"})

        with pytest.raises(SchemaValidationError):
            StructuredOutputValidator.validate(MarketingCopy, raw)

    def test_non_json(self):
        with pytest.raises(SchemaValidationError):
            StructuredOutputValidator.validate(MarketingCopy, "Sure! Here is your copy: great food.")

    def test_empty_output(self):
        with pytest.raises(SchemaValidationError):
            StructuredOutputValidator.validate(MarketingCopy, "")

    def test_code_fences_are_stripped(self):
        raw = "```json\n" + json.dumps(VALID_COPY) + "\n```"

        assert StructuredOutputValidator.validate(MarketingCopy, raw).tagline == VALID_COPY["tagline"]

    def test_strip_code_fences_leaves_plain_text(self):
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestGenerate:
    """Tests for provider-backed generation."""

    async def test_generate_calls_provider_once(self, make_llm):
        llm = make_llm(structured_output=json.dumps(VALID_COPY))
        validator = StructuredOutputValidator(llm, model="test-model")

        copy = await validator.generate(MarketingCopy, "Write copy")

        assert isinstance(copy, MarketingCopy)
        assert llm.structured_calls == 1

    async def test_generate_fails_closed(self, make_llm):
        llm = make_llm(structured_output=json.dumps({"headline": "Only a headline"}))

        with pytest.raises(SchemaValidationError):
            await StructuredOutputValidator(llm).generate(MarketingCopy, "Write copy")


class TestMarketingCopyService:
    """Tests for MarketingCopyService."""

    async def test_generates_grounded_copy(self, db_session, coastal_bites, make_llm):
        prompts = []
        llm = make_llm(structured_output=json.dumps(VALID_COPY))
        original = llm.generate_structured

        async def capture(system_prompt, prompt, schema, model=None):
            prompts.append(system_prompt)
            return await original(system_prompt, prompt, schema, model)

        llm.generate_structured = capture
        service = MarketingCopyService(db_session, llm)

        copy = await service.generate(coastal_bites.id, goal="fill weekday tables")

        assert copy.call_to_action == "Visit us this week"
        assert "Happy Hour Special" in prompts[0]
        assert "IDENTITY" not in prompts[0]
