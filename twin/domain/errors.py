"""Error taxonomy for the chat core.

Every error raised across module boundaries derives from TwinError so the
API layer and the stream transport can map it to a stable code without
inspecting upstream payloads.
"""


class TwinError(Exception):
    """Base class for chat core errors.

    Attributes:
        code: Machine-readable error code (e.g. "RATE_LIMITED")
        message: Client-safe message
        http_status: Status used when the error surfaces on a plain HTTP route
    """

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str, **extra) -> None:
        self.message = message
        self.extra = extra
        super().__init__(message)


class ConfigError(TwinError):
    """Invalid startup configuration (duplicate tool, bad credential shape)."""

    code = "CONFIG_ERROR"
    http_status = 500


class BusinessNotFound(TwinError):
    """No active business record matches the requested id."""

    code = "BUSINESS_NOT_FOUND"
    http_status = 404


class InvalidChatRequest(TwinError):
    """Inbound chat request violates the request bounds."""

    code = "INVALID_REQUEST"
    http_status = 400


# Provider-level errors: surfaced to the stream consumer, never retried here.


class ProviderError(TwinError):
    """Base class for upstream model provider failures."""

    code = "PROVIDER_ERROR"
    http_status = 502


class AuthRejected(ProviderError):
    """Provider rejected the configured credentials."""

    code = "AUTH_REJECTED"
    http_status = 502


class RateLimited(ProviderError):
    """Provider throttled the request."""

    code = "RATE_LIMITED"
    http_status = 429


class UpstreamDisconnect(ProviderError):
    """Provider connection failed or dropped mid-stream."""

    code = "UPSTREAM_DISCONNECT"
    http_status = 502


# Tool-level errors: fed back into the conversation as tool error parts.


class ToolError(TwinError):
    """Base class for errors recovered conversationally."""

    code = "TOOL_ERROR"
    http_status = 500


class UnknownTool(ToolError):
    """The model asked for a tool that is not registered."""

    code = "UNKNOWN_TOOL"


class InvalidToolInput(ToolError):
    """Tool arguments do not match the tool's input schema."""

    code = "INVALID_TOOL_INPUT"


class ToolExecutionError(ToolError):
    """Tool handler raised."""

    code = "TOOL_EXECUTION_ERROR"


class ToolTimeout(ToolError):
    """Tool handler exceeded its timeout."""

    code = "TOOL_TIMEOUT"


# Turn-level terminal errors.


class StepLimitExceeded(TwinError):
    """The model kept requesting tools past the configured step bound."""

    code = "STEP_LIMIT_EXCEEDED"
    http_status = 500


class TurnTimeout(TwinError):
    """The turn exceeded the transport's total duration."""

    code = "TURN_TIMEOUT"
    http_status = 504


class SchemaValidationError(TwinError):
    """Structured output did not match the declared schema."""

    code = "SCHEMA_VALIDATION_ERROR"
    http_status = 502
