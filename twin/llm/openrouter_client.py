"""OpenRouter client (OpenAI-compatible chat completions over httpx)."""

import json
import logging
import uuid
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import BaseModel

from twin.domain.errors import ConfigError, UpstreamDisconnect
from twin.domain.models.conversation import Message, TextPart, ToolCallPart, ToolResultPart
from twin.domain.tools.registry import ToolDeclaration
from twin.llm.client import LLMClient, ProviderChunk, ProviderRequest, ProviderToolCall
from twin.llm.errors import provider_error_for_status
from twin.settings import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "sk-or-v1-"


def validate_openrouter_key(api_key: str | None) -> str:
    """Check the key shape before any request is made.

    Raises:
        ConfigError: If the key is missing or obviously not an OpenRouter key
    """
    key = (api_key or "").strip()
    if not key:
        raise ConfigError("OpenRouter API key not configured. Set OPENROUTER_API_KEY in .env")
    # Catch common misconfigurations early (prevents confusing 401s)
    if not key.startswith(KEY_PREFIX) or "your-key" in key:
        raise ConfigError(
            f"Invalid OPENROUTER_API_KEY. Paste a real OpenRouter key (starts with '{KEY_PREFIX}') "
            "into your .env and restart the server."
        )
    return key


class OpenRouterClient(LLMClient):
    """Streams chat completions with tool calling from OpenRouter."""

    name = "openrouter"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = validate_openrouter_key(api_key if api_key is not None else settings.openrouter_api_key)
        self.model_name = model or settings.openrouter_model
        self.base_url = (base_url or settings.openrouter_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        # One connection per turn; nothing is pooled across turns
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def stream(self, request: ProviderRequest) -> AsyncIterator[ProviderChunk]:
        payload = self._build_payload(request)
        payload["stream"] = True

        try:
            async with self._http_client() as client:
                async with client.stream(
                    "POST",
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                ) as resp:
                    if resp.status_code >= 400:
                        body = (await resp.aread()).decode("utf-8", errors="replace")
                        raise provider_error_for_status(
                            "OpenRouter", resp.status_code, body, key_hint="OPENROUTER_API_KEY"
                        )
                    async for chunk in self._iter_sse(resp):
                        yield chunk
        except httpx.HTTPError as e:
            logger.warning(f"OpenRouter stream failed: {e}", extra={"provider": self.name})
            raise UpstreamDisconnect("Connection to the model provider was lost. Please try again.") from e

    async def _iter_sse(self, resp: httpx.Response) -> AsyncIterator[ProviderChunk]:
        """Decode the SSE body into ProviderChunks.

        Tool call fragments are accumulated by index and released as one
        chunk once the provider reports a finish reason. Text arriving after
        the first fragment is held back and released with the calls as
        ``trailing_text``.
        """
        pending: dict[int, dict[str, Any]] = {}
        held: list[str] = []
        finished = False

        async for line in resp.aiter_lines():
            line = line.strip()
            if not line or line.startswith(":"):
                continue  # keep-alive comments
            if not line.startswith("data:"):
                continue
            data_str = line[5:].strip()
            if data_str == "[DONE]":
                finished = True
                break
            try:
                data = json.loads(data_str)
            except json.JSONDecodeError:
                logger.debug("Skipping undecodable stream line", extra={"provider": self.name})
                continue

            if "error" in data:
                error = data.get("error") or {}
                status = error.get("code") if isinstance(error.get("code"), int) else None
                raise provider_error_for_status(
                    "OpenRouter", status, json.dumps(error), key_hint="OPENROUTER_API_KEY"
                )

            for choice in data.get("choices") or []:
                delta = choice.get("delta") or {}
                text = delta.get("content") or ""
                if text and pending:
                    held.append(text)
                    text = ""
                for fragment in delta.get("tool_calls") or []:
                    slot = pending.setdefault(fragment.get("index", 0), {"id": None, "name": "", "arguments": ""})
                    if fragment.get("id"):
                        slot["id"] = fragment["id"]
                    function = fragment.get("function") or {}
                    if function.get("name"):
                        slot["name"] += function["name"]
                    if function.get("arguments"):
                        slot["arguments"] += function["arguments"]

                finish_reason = choice.get("finish_reason")
                if finish_reason:
                    finished = True
                    calls = self._finalize_tool_calls(pending)
                    pending = {}
                    yield ProviderChunk(
                        text=text,
                        tool_calls=calls,
                        trailing_text="".join(held),
                        finish_reason=finish_reason,
                    )
                    held = []
                elif text:
                    yield ProviderChunk(text=text)

        if pending:
            yield ProviderChunk(
                tool_calls=self._finalize_tool_calls(pending),
                trailing_text="".join(held),
                finish_reason="tool_calls",
            )
        elif not finished:
            raise UpstreamDisconnect("The model provider closed the stream early. Please try again.")

    @staticmethod
    def _finalize_tool_calls(pending: dict[int, dict[str, Any]]) -> tuple[ProviderToolCall, ...]:
        calls = []
        for index in sorted(pending):
            slot = pending[index]
            raw_args = slot["arguments"]
            try:
                arguments = json.loads(raw_args) if raw_args else {}
            except json.JSONDecodeError:
                arguments = raw_args
            calls.append(
                ProviderToolCall(
                    call_id=slot["id"] or f"call_{uuid.uuid4().hex[:12]}",
                    name=slot["name"],
                    arguments=arguments,
                )
            )
        return tuple(calls)

    async def generate_structured(
        self,
        system_prompt: str,
        prompt: str,
        schema: type[BaseModel],
        model: str | None = None,
    ) -> str:
        request = ProviderRequest(
            system_prompt=system_prompt,
            messages=(Message.text("user", prompt),),
            model=model,
            temperature=0.2,
        )
        payload = self._build_payload(request)
        payload["response_format"] = {
            "type": "json_schema",
            "json_schema": {
                "name": schema.__name__,
                "schema": schema.model_json_schema(),
            },
        }

        try:
            async with self._http_client() as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise UpstreamDisconnect("Connection to the model provider failed. Please try again.") from e

        if resp.status_code >= 400:
            raise provider_error_for_status(
                "OpenRouter", resp.status_code, resp.text, key_hint="OPENROUTER_API_KEY"
            )

        data = resp.json()
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""

    def _build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        """Convert a ProviderRequest into the chat completions JSON body."""
        messages: list[dict[str, Any]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        for message in request.messages:
            messages.extend(self._message_to_payload(message))

        payload: dict[str, Any] = {
            "model": request.model or self.model_name,
            "messages": messages,
            "temperature": request.temperature,
        }
        if request.tools:
            payload["tools"] = [self._serialize_tool(tool) for tool in request.tools]
            payload["tool_choice"] = "auto"
        return payload

    @staticmethod
    def _serialize_tool(tool: ToolDeclaration) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.full_description,
                "parameters": tool.input_json_schema(),
            },
        }

    @staticmethod
    def _message_to_payload(message: Message) -> list[dict[str, Any]]:
        if message.role == "tool":
            return [
                {
                    "role": "tool",
                    "tool_call_id": part.call_id,
                    "content": json.dumps(
                        {"error": part.error} if part.is_error else {"result": part.output},
                        default=str,
                    ),
                }
                for part in message.parts
                if isinstance(part, ToolResultPart)
            ]

        text = "".join(p.text for p in message.parts if isinstance(p, TextPart))
        payload: dict[str, Any] = {"role": message.role, "content": text or None}
        calls = [p for p in message.parts if isinstance(p, ToolCallPart)]
        if calls:
            payload["tool_calls"] = [
                {
                    "id": call.call_id,
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": call.arguments
                        if isinstance(call.arguments, str)
                        else json.dumps(call.arguments),
                    },
                }
                for call in calls
            ]
        elif payload["content"] is None:
            payload["content"] = ""
        return [payload]
