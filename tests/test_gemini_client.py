"""Tests for the Gemini client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import errors as genai_errors
from google.genai import types

from twin.domain.errors import RateLimited, UpstreamDisconnect
from twin.domain.models.conversation import Message, ToolCallPart, ToolResultPart
from twin.llm.client import ProviderRequest
from twin.llm.gemini_client import GeminiClient


def _chunk(*parts, finish_reason=None):
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)), finish_reason=finish_reason)]
    )


def _text(text):
    return SimpleNamespace(text=text, function_call=None)


def _call(name, args, call_id=None):
    return SimpleNamespace(text=None, function_call=SimpleNamespace(name=name, args=args, id=call_id))


async def _aiter(items):
    for item in items:
        yield item


def _mock_genai(chunks=None, error=None):
    client = MagicMock()
    if error is not None:
        client.aio.models.generate_content_stream = AsyncMock(side_effect=error)
    else:
        client.aio.models.generate_content_stream = AsyncMock(return_value=_aiter(chunks or []))
    return client


async def _collect(client):
    request = ProviderRequest(system_prompt="sys", messages=(Message.text("user", "deals?"),))
    return [chunk async for chunk in client.stream(request)]


class TestStreaming:
    """Tests for chunk parsing."""

    async def test_text_then_function_call(self):
        genai_client = _mock_genai([
            _chunk(_text("Let me check. ")),
            _chunk(_call("list_offers", {}, call_id="fc_1"), _text("One sec."), finish_reason=types.FinishReason.STOP),
        ])
        client = GeminiClient(client=genai_client, model="gemini-test")

        chunks = await _collect(client)

        assert chunks[0].text == "Let me check. "
        assert chunks[1].tool_calls[0].name == "list_offers"
        assert chunks[1].tool_calls[0].call_id == "fc_1"
        assert chunks[1].trailing_text == "One sec."
        assert chunks[1].text == ""
        assert chunks[1].finish_reason == "STOP"

    async def test_missing_call_id_is_generated(self):
        client = GeminiClient(client=_mock_genai([_chunk(_call("list_products", {"limit": 2}))]))

        chunks = await _collect(client)

        call = chunks[0].tool_calls[0]
        assert call.call_id.startswith("call_")
        assert call.arguments == {"limit": 2}

    async def test_disables_automatic_function_calling(self, registry):
        genai_client = _mock_genai([_chunk(_text("Hi"), finish_reason=types.FinishReason.STOP)])
        client = GeminiClient(client=genai_client, model="gemini-test")
        request = ProviderRequest(
            system_prompt="sys",
            messages=(Message.text("user", "hi"),),
            tools=tuple(registry.declarations()),
        )

        [chunk async for chunk in client.stream(request)]

        kwargs = genai_client.aio.models.generate_content_stream.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        config = kwargs["config"]
        assert config.automatic_function_calling.disable is True
        names = [d.name for d in config.tools[0].function_declarations]
        assert names == ["list_offers", "list_products", "request_appointment"]

    async def test_api_error_is_mapped(self):
        error = genai_errors.APIError(429, {"error": {"message": "Resource exhausted", "status": "RESOURCE_EXHAUSTED"}})
        client = GeminiClient(client=_mock_genai(error=error))

        with pytest.raises(RateLimited):
            await _collect(client)

    async def test_unexpected_error_is_upstream_disconnect(self):
        client = GeminiClient(client=_mock_genai(error=OSError("reset by peer")))

        with pytest.raises(UpstreamDisconnect):
            await _collect(client)


class TestContents:
    """Tests for history conversion."""

    def test_roles_and_tool_parts(self):
        history = (
            Message.text("system", "ignored"),
            Message.text("user", "deals?"),
            Message(role="assistant", parts=(ToolCallPart(call_id="c1", name="list_offers", arguments={}),)),
            Message(role="tool", parts=(ToolResultPart(call_id="c1", name="list_offers", output={"count": 1}),)),
        )

        contents = GeminiClient._build_contents(history)

        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[1].parts[0].function_call.name == "list_offers"
        assert contents[2].parts[0].function_response.response == {"result": {"count": 1}}
