"""Gemini client implementation using google-genai."""

import json
import logging
import os
import uuid
from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from twin.domain.errors import ConfigError, TwinError, UpstreamDisconnect
from twin.domain.models.conversation import Message, TextPart, ToolCallPart, ToolResultPart
from twin.domain.tools.registry import ToolDeclaration
from twin.llm.client import LLMClient, ProviderChunk, ProviderRequest, ProviderToolCall
from twin.llm.errors import provider_error_for_status
from twin.settings import settings

logger = logging.getLogger(__name__)


class GeminiClient(LLMClient):
    """Gemini client with function calling.

    Automatic function calling is disabled; tool execution belongs to the
    orchestrator.
    """

    name = "gemini"

    def __init__(self, api_key: str | None = None, model: str | None = None, client: Any = None) -> None:
        """Initialize the Gemini client.

        Raises:
            ConfigError: If no API key is configured
        """
        if client is not None:
            self.client = client
        else:
            api_key = api_key or os.environ.get("AI_INTEGRATIONS_GEMINI_API_KEY", settings.gemini_api_key)
            if not api_key:
                raise ConfigError("Gemini API key not configured. Set GEMINI_API_KEY in .env")
            base_url = os.environ.get("AI_INTEGRATIONS_GEMINI_BASE_URL")
            if base_url:
                http_options = types.HttpOptions(api_version="v1beta", base_url=base_url)
            else:
                http_options = types.HttpOptions(api_version="v1beta")
            self.client = genai.Client(api_key=api_key, http_options=http_options)
        self.model_name = model or settings.gemini_model

    async def stream(self, request: ProviderRequest) -> AsyncIterator[ProviderChunk]:
        config = types.GenerateContentConfig(
            system_instruction=request.system_prompt or None,
            temperature=request.temperature,
            tools=self._build_tools(request.tools),
            automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
        )

        try:
            response = await self.client.aio.models.generate_content_stream(
                model=request.model or self.model_name,
                contents=self._build_contents(request.messages),
                config=config,
            )
            seen_tool_call = False
            async for chunk in response:
                parsed = self._parse_chunk(chunk, seen_tool_call)
                if parsed is None:
                    continue
                seen_tool_call = seen_tool_call or bool(parsed.tool_calls)
                yield parsed
        except genai_errors.APIError as e:
            raise provider_error_for_status("Gemini", e.code, str(e), key_hint="GEMINI_API_KEY") from e
        except TwinError:
            raise
        except Exception as e:
            logger.warning(f"Gemini stream failed: {e}", extra={"provider": self.name})
            raise UpstreamDisconnect("Connection to the model provider was lost. Please try again.") from e

    @staticmethod
    def _parse_chunk(chunk: Any, seen_tool_call: bool) -> ProviderChunk | None:
        """Split one streamed response into leading text, tool calls and trailing text."""
        candidates = getattr(chunk, "candidates", None) or []
        if not candidates:
            return None
        candidate = candidates[0]
        content = getattr(candidate, "content", None)
        parts = (getattr(content, "parts", None) or []) if content else []

        leading: list[str] = []
        trailing: list[str] = []
        calls: list[ProviderToolCall] = []
        for part in parts:
            function_call = getattr(part, "function_call", None)
            if function_call is not None:
                calls.append(
                    ProviderToolCall(
                        call_id=getattr(function_call, "id", None) or f"call_{uuid.uuid4().hex[:12]}",
                        name=function_call.name or "",
                        arguments=dict(function_call.args or {}),
                    )
                )
                continue
            text = getattr(part, "text", None)
            if text:
                if calls or seen_tool_call:
                    trailing.append(text)
                else:
                    leading.append(text)

        finish_reason = getattr(candidate, "finish_reason", None)
        if not (leading or trailing or calls or finish_reason):
            return None
        return ProviderChunk(
            text="".join(leading),
            tool_calls=tuple(calls),
            trailing_text="".join(trailing),
            finish_reason=finish_reason.name if finish_reason else None,
        )

    async def generate_structured(
        self,
        system_prompt: str,
        prompt: str,
        schema: type[BaseModel],
        model: str | None = None,
    ) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_prompt or None,
            temperature=0.2,
            response_mime_type="application/json",
            response_schema=schema,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=model or self.model_name,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            raise provider_error_for_status("Gemini", e.code, str(e), key_hint="GEMINI_API_KEY") from e
        except Exception as e:
            raise UpstreamDisconnect("Connection to the model provider failed. Please try again.") from e
        return response.text or ""

    @staticmethod
    def _build_tools(tools: tuple[ToolDeclaration, ...]) -> list[types.Tool] | None:
        if not tools:
            return None
        return [
            types.Tool(
                function_declarations=[
                    types.FunctionDeclaration(
                        name=tool.name,
                        description=tool.full_description,
                        parameters_json_schema=tool.input_json_schema(),
                    )
                    for tool in tools
                ]
            )
        ]

    @staticmethod
    def _build_contents(messages: tuple[Message, ...]) -> list[types.Content]:
        """Map history onto Gemini contents (roles ``user`` and ``model``)."""
        contents: list[types.Content] = []
        for message in messages:
            if message.role == "system":
                continue
            parts: list[types.Part] = []
            for part in message.parts:
                if isinstance(part, TextPart):
                    if part.text:
                        parts.append(types.Part(text=part.text))
                elif isinstance(part, ToolCallPart):
                    args = part.arguments if isinstance(part.arguments, dict) else {"raw": str(part.arguments)}
                    parts.append(
                        types.Part(function_call=types.FunctionCall(id=part.call_id, name=part.name, args=args))
                    )
                elif isinstance(part, ToolResultPart):
                    response = {"error": part.error} if part.is_error else {"result": part.output}
                    parts.append(
                        types.Part(
                            function_response=types.FunctionResponse(
                                id=part.call_id,
                                name=part.name,
                                response=json.loads(json.dumps(response, default=str)),
                            )
                        )
                    )
            if not parts:
                continue
            role = "model" if message.role == "assistant" else "user"
            contents.append(types.Content(role=role, parts=parts))
        return contents
