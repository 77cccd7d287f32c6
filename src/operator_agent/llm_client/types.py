"""Type definitions for the LLM client module.

- ModelRole: which configured model a call goes to
- LLMResponse / ToolCall: normalized response structure
- Error classes: hierarchy of LLM client errors
"""

from enum import Enum
from typing import Any

from typing_extensions import TypedDict


class ModelRole(str, Enum):
    """Model roles, mapped to entries of config/models.yaml."""

    CONVERSATION = "conversation"
    CODING = "coding"
    VISION = "vision"


class ToolCall(TypedDict):
    """Tool call requested by the model.

    Attributes:
        id: Unique identifier for the tool call.
        name: Name of the tool to call.
        arguments: JSON string containing tool arguments.
    """

    id: str
    name: str
    arguments: str  # JSON string


class LLMResponse(TypedDict):
    """Normalized response from a chat completions call.

    Attributes:
        role: Response role (typically "assistant").
        content: Natural language content from the model (may be empty).
        tool_calls: Tool calls in the order the model emitted them.
        usage: Token usage information.
        raw: Raw response body for debugging.
    """

    role: str
    content: str
    tool_calls: list[ToolCall]
    usage: dict[str, Any]
    raw: dict[str, Any]


# Error hierarchy


class LLMClientError(Exception):
    """Base exception for all LLM client errors."""

    pass


class LLMTimeout(LLMClientError):
    """Raised when an LLM request times out."""

    pass


class LLMConnectionError(LLMClientError):
    """Raised when connection to the LLM service fails."""

    pass


class LLMRateLimit(LLMClientError):
    """Raised when the LLM service returns a rate limit or quota error."""

    pass


class LLMServerError(LLMClientError):
    """Raised when the LLM service returns an error (5xx)."""

    pass


class LLMInvalidResponse(LLMClientError):
    """Raised when the LLM service returns an invalid or unexpected response format."""

    pass
