"""Tool registry: named, schema-typed capabilities the model may invoke."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from twin.domain.errors import (
    ConfigError,
    InvalidToolInput,
    ToolError,
    ToolExecutionError,
    ToolTimeout,
    UnknownTool,
)
from twin.domain.models.context import ContextBundle
from twin.domain.models.conversation import ToolCallPart, ToolInvocationResult

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any, ContextBundle], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDeclaration:
    """A tool the model may call.

    Attributes:
        name: Unique name within a registry
        description: What the tool does, shown to the model
        input_model: Pydantic model the raw arguments are validated against
        handler: Coroutine receiving the validated input and the turn context
        output_description: Shape of the returned value, shown to the model
        timeout_seconds: Per-tool override of the registry timeout
    """

    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler
    output_description: str = ""
    timeout_seconds: float | None = None

    def input_json_schema(self) -> dict[str, Any]:
        """JSON schema of the tool input, as advertised to providers."""
        schema = self.input_model.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    @property
    def full_description(self) -> str:
        if self.output_description:
            return f"{self.description} Returns: {self.output_description}"
        return self.description


class ToolRegistry:
    """Registry of tool declarations.

    Tools are registered at startup and the registry is then frozen; after
    that it is only read, so concurrent turns can resolve tools without
    locking.
    """

    def __init__(self, default_timeout_seconds: float = 5.0) -> None:
        self._tools: dict[str, ToolDeclaration] = {}
        self._frozen = False
        self.default_timeout_seconds = default_timeout_seconds

    def register(self, declaration: ToolDeclaration) -> None:
        """Register a tool.

        Raises:
            ConfigError: On a duplicate name or after the registry is frozen
        """
        if self._frozen:
            raise ConfigError(f"Tool registry is frozen; cannot register {declaration.name!r}")
        if declaration.name in self._tools:
            raise ConfigError(f"Duplicate tool name: {declaration.name!r}")
        self._tools[declaration.name] = declaration

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, name: str) -> ToolDeclaration:
        """Look up a tool by name.

        Raises:
            UnknownTool: If no tool with that name is registered
        """
        declaration = self._tools.get(name)
        if declaration is None:
            raise UnknownTool(f"Unknown tool: {name!r}")
        return declaration

    def declarations(self) -> list[ToolDeclaration]:
        """All declarations in registration order."""
        return list(self._tools.values())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    async def execute(self, name: str, raw_input: Any, context: ContextBundle) -> Any:
        """Validate input and run a tool under its timeout.

        Args:
            name: Tool name
            raw_input: Arguments as produced by the model
            context: Context bundle of the current turn

        Returns:
            JSON-compatible tool output

        Raises:
            UnknownTool: Tool not registered
            InvalidToolInput: Arguments fail the input schema
            ToolTimeout: Handler exceeded its timeout
            ToolExecutionError: Handler raised
        """
        declaration = self.resolve(name)
        validated = self._validate_input(declaration, raw_input)
        timeout = declaration.timeout_seconds or self.default_timeout_seconds

        try:
            output = await asyncio.wait_for(declaration.handler(validated, context), timeout=timeout)
        except asyncio.TimeoutError:
            raise ToolTimeout(f"Tool {name!r} timed out after {timeout:g}s")
        except ToolError:
            raise
        except Exception as e:
            logger.warning(
                f"Tool {name} failed: {e}",
                exc_info=True,
                extra={"tool_name": name},
            )
            raise ToolExecutionError(f"Tool {name!r} failed") from e

        if isinstance(output, BaseModel):
            return output.model_dump(mode="json")
        return output

    async def invoke(self, call: ToolCallPart, context: ContextBundle) -> ToolInvocationResult:
        """Execute a model tool call, converting tool errors into a result.

        Tool-level failures are returned rather than raised so the model can
        recover conversationally. Cancellation still propagates.
        """
        try:
            output = await self.execute(call.name, call.arguments, context)
        except ToolError as e:
            logger.info(
                "Tool call returned error",
                extra={"tool_name": call.name, "error_code": e.code},
            )
            return ToolInvocationResult(
                tool_name=call.name,
                call_id=call.call_id,
                input=call.arguments if isinstance(call.arguments, dict) else {},
                error_code=e.code,
                error_message=e.message,
            )
        return ToolInvocationResult(
            tool_name=call.name,
            call_id=call.call_id,
            input=call.arguments if isinstance(call.arguments, dict) else {},
            output=output,
        )

    @staticmethod
    def _validate_input(declaration: ToolDeclaration, raw_input: Any) -> BaseModel:
        if raw_input is None:
            raw_input = {}
        if not isinstance(raw_input, dict):
            raise InvalidToolInput(f"Arguments for {declaration.name!r} must be a JSON object")
        try:
            return declaration.input_model.model_validate(raw_input)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'input'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidToolInput(f"Invalid arguments for {declaration.name!r}: {problems}")
