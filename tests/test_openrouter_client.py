"""Tests for the OpenRouter client."""

import json

import httpx
import pytest

from twin.domain.errors import AuthRejected, ConfigError, RateLimited, UpstreamDisconnect
from twin.domain.models.config import OrchestratorConfig
from twin.domain.models.conversation import Message, ToolCallPart, ToolResultPart
from twin.domain.models.events import EventType
from twin.domain.models.marketing import MarketingCopy
from twin.llm.client import ProviderRequest
from twin.llm.openrouter_client import OpenRouterClient, validate_openrouter_key
from twin.llm.orchestrator import TurnOrchestrator

VALID_KEY = "sk-or-v1-0123456789abcdef"


def _sse(*payloads, done=True):
    lines = [f"data: {json.dumps(p)}\n\n" for p in payloads]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


def _client(handler):
    return OpenRouterClient(
        api_key=VALID_KEY,
        model="openai/gpt-5-mini",
        base_url="https://openrouter.test/api/v1",
        transport=httpx.MockTransport(handler),
    )


async def _collect(client, request=None):
    request = request or ProviderRequest(system_prompt="sys", messages=(Message.text("user", "hi"),))
    return [chunk async for chunk in client.stream(request)]


class TestKeyValidation:
    """Credential shape checks from the original route."""

    def test_missing_key(self):
        with pytest.raises(ConfigError, match="not configured"):
            validate_openrouter_key("")

    def test_wrong_prefix(self):
        with pytest.raises(ConfigError, match="sk-or-v1-"):
            validate_openrouter_key("sk-proj-abc")

    def test_placeholder_key(self):
        with pytest.raises(ConfigError):
            validate_openrouter_key("sk-or-v1-your-key-here")

    def test_valid_key_is_stripped(self):
        assert validate_openrouter_key(f"  {VALID_KEY}\n") == VALID_KEY


class TestStreaming:
    """Tests for SSE decoding."""

    async def test_text_deltas(self):
        def handler(request):
            return httpx.Response(
                200,
                content=_sse(
                    {"choices": [{"delta": {"content": "Hello "}}]},
                    {"choices": [{"delta": {"content": "there"}}]},
                    {"choices": [{"delta": {}, "finish_reason": "stop"}]},
                ),
            )

        chunks = await _collect(_client(handler))

        assert "".join(c.text for c in chunks) == "Hello there"
        assert chunks[-1].finish_reason == "stop"

    async def test_tool_call_deltas_are_accumulated(self):
        def handler(request):
            return httpx.Response(
                200,
                content=_sse(
                    {"choices": [{"delta": {"tool_calls": [
                        {"index": 0, "id": "call_1", "function": {"name": "list_products", "arguments": '{"max_'}}
                    ]}}]},
                    {"choices": [{"delta": {"tool_calls": [
                        {"index": 0, "function": {"arguments": 'price": 10}'}}
                    ]}}]},
                    {"choices": [{"delta": {}, "finish_reason": "tool_calls"}]},
                ),
            )

        chunks = await _collect(_client(handler))

        calls = [call for chunk in chunks for call in chunk.tool_calls]
        assert len(calls) == 1
        assert calls[0].call_id == "call_1"
        assert calls[0].name == "list_products"
        assert calls[0].arguments == {"max_price": 10}

    async def test_invalid_tool_arguments_kept_raw(self):
        def handler(request):
            return httpx.Response(
                200,
                content=_sse(
                    {"choices": [{"delta": {"tool_calls": [
                        {"index": 0, "id": "call_1", "function": {"name": "list_products", "arguments": "{oops"}}
                    ]}, "finish_reason": "tool_calls"}]},
                ),
            )

        chunks = await _collect(_client(handler))

        assert chunks[-1].tool_calls[0].arguments == "{oops"

    async def test_stream_ending_early_is_upstream_disconnect(self):
        def handler(request):
            return httpx.Response(200, content=_sse({"choices": [{"delta": {"content": "Hel"}}]}, done=False))

        with pytest.raises(UpstreamDisconnect):
            await _collect(_client(handler))

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(UpstreamDisconnect):
            await _collect(_client(handler))


class TestErrorMapping:
    """Upstream HTTP failures map onto the error taxonomy."""

    async def test_401_is_auth_rejected(self):
        def handler(request):
            return httpx.Response(401, json={"error": {"message": "User not found.", "code": 401}})

        with pytest.raises(AuthRejected) as exc_info:
            await _collect(_client(handler))

        assert "401" in exc_info.value.message
        assert "User not found" not in exc_info.value.message

    async def test_user_not_found_body_is_auth_rejected(self):
        def handler(request):
            return httpx.Response(400, text='{"error":{"message":"User not found."}}')

        with pytest.raises(AuthRejected):
            await _collect(_client(handler))

    async def test_429_is_rate_limited(self):
        def handler(request):
            return httpx.Response(429, json={"error": {"message": "slow down"}})

        with pytest.raises(RateLimited, match="wait a bit"):
            await _collect(_client(handler))

    async def test_mid_stream_error(self):
        def handler(request):
            return httpx.Response(200, content=_sse({"error": {"code": 429, "message": "Rate limit"}}))

        with pytest.raises(RateLimited):
            await _collect(_client(handler))


class TestPayload:
    """Tests for the outbound request body."""

    async def test_payload_carries_history_and_tools(self, registry):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            captured["auth"] = request.headers["Authorization"]
            return httpx.Response(200, content=_sse({"choices": [{"delta": {}, "finish_reason": "stop"}]}))

        history = (
            Message.text("user", "deals?"),
            Message(role="assistant", parts=(ToolCallPart(call_id="c1", name="list_offers", arguments={}),)),
            Message(role="tool", parts=(ToolResultPart(call_id="c1", name="list_offers", output={"count": 1}),)),
        )
        request = ProviderRequest(
            system_prompt="You are Coastal Bites Assistant.",
            messages=history,
            tools=tuple(registry.declarations()),
        )

        await _collect(_client(handler), request)

        body = captured["body"]
        assert captured["auth"] == f"Bearer {VALID_KEY}"
        assert body["stream"] is True
        assert body["model"] == "openai/gpt-5-mini"
        assert [m["role"] for m in body["messages"]] == ["system", "user", "assistant", "tool"]
        assert body["messages"][2]["tool_calls"][0]["function"]["arguments"] == "{}"
        assert body["messages"][3]["tool_call_id"] == "c1"
        assert json.loads(body["messages"][3]["content"]) == {"result": {"count": 1}}
        assert [t["function"]["name"] for t in body["tools"]] == [
            "list_offers",
            "list_products",
            "request_appointment",
        ]

    async def test_generate_structured_requests_json_schema(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": '{"headline": "x"}'}}]})

        raw = await _client(handler).generate_structured("sys", "Write copy", MarketingCopy)

        assert raw == '{"headline": "x"}'
        assert captured["body"]["response_format"]["type"] == "json_schema"
        assert captured["body"]["response_format"]["json_schema"]["name"] == "MarketingCopy"


class TestTrailingText:
    """Text after a tool call fragment waits for the call to be released."""

    @staticmethod
    def _tool_then_text():
        return _sse(
            {"choices": [{"delta": {"tool_calls": [
                {"index": 0, "id": "call_1", "function": {"name": "list_offers", "arguments": "{}"}}
            ]}}]},
            {"choices": [{"delta": {"content": "Checking now."}}]},
            {"choices": [{"delta": {}, "finish_reason": "tool_calls"}]},
        )

    async def test_text_after_fragment_is_trailing(self):
        def handler(request):
            return httpx.Response(200, content=self._tool_then_text())

        chunks = await _collect(_client(handler))

        assert [c.text for c in chunks] == [""]
        assert chunks[0].tool_calls[0].name == "list_offers"
        assert chunks[0].trailing_text == "Checking now."

    async def test_turn_emits_tool_events_before_trailing_text(self, registry, coastal_bundle):
        responses = iter([
            httpx.Response(200, content=self._tool_then_text()),
            httpx.Response(200, content=_sse(
                {"choices": [{"delta": {"content": "20% off mains."}, "finish_reason": "stop"}]},
            )),
        ])

        def handler(request):
            return next(responses)

        orchestrator = TurnOrchestrator(
            _client(handler),
            registry,
            OrchestratorConfig(model="openai/gpt-5-mini", max_tool_steps=5, tool_timeout_seconds=1.0),
        )
        events = [e async for e in orchestrator.run(coastal_bundle, [Message.text("user", "deals?")])]

        types = [e.type for e in events]
        assert types == [
            EventType.TOOL_CALL_STARTED,
            EventType.TOOL_CALL_RESULT,
            EventType.TEXT_DELTA,
            EventType.TEXT_DELTA,
            EventType.TURN_COMPLETE,
        ]
        assert events[2].delta == "Checking now."
        assert events[3].delta == "20% off mains."
