"""Language-model client: one OpenAI-compatible chat completions call at a time."""

from operator_agent.llm_client.client import LLMClient
from operator_agent.llm_client.models import ModelConfig, ModelDefinition
from operator_agent.llm_client.types import (
    LLMClientError,
    LLMConnectionError,
    LLMInvalidResponse,
    LLMRateLimit,
    LLMResponse,
    LLMServerError,
    LLMTimeout,
    ModelRole,
    ToolCall,
)

__all__ = [
    "LLMClient",
    "ModelConfig",
    "ModelDefinition",
    "LLMClientError",
    "LLMConnectionError",
    "LLMInvalidResponse",
    "LLMResponse",
    "LLMRateLimit",
    "LLMServerError",
    "LLMTimeout",
    "ModelRole",
    "ToolCall",
]
