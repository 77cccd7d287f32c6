"""Language-model client.

This module provides the LLMClient class for calling an OpenAI-compatible
chat completions endpoint with error classification and telemetry. Each call
is a single attempt: callers decide how to surface failures, and nothing here
retries.
"""

import time
from typing import Any

import httpx

from operator_agent.llm_client.adapters import (
    adapt_chat_completions_response,
    build_chat_completions_request,
)
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
)
from operator_agent.telemetry import (
    MODEL_CALL_COMPLETED,
    MODEL_CALL_ERROR,
    MODEL_CALL_STARTED,
    TraceContext,
    get_logger,
)

log = get_logger(__name__)


class LLMClient:
    """Client for the language-model service.

    Attributes:
        base_url: Base URL for the API (e.g., "https://host/v1beta/openai").
        timeout_seconds: Timeout used when a model role sets none.
        model_configs: Mapping of model role names to ModelDefinition.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model_config: ModelConfig,
        timeout_seconds: int = 60,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Bearer credential for the service.
            base_url: Base URL of the OpenAI-compatible API.
            model_config: Model catalogue keyed by role.
            timeout_seconds: Fallback request timeout.
        """
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.model_configs: dict[str, ModelDefinition] = model_config.models

    def _endpoint_for(self, model_def: ModelDefinition) -> str:
        base = (model_def.endpoint or self.base_url).rstrip("/")
        return f"{base}/chat/completions"

    async def respond(
        self,
        role: ModelRole,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        tool_choice: str | dict[str, Any] | None = None,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout_s: float | None = None,
        trace_ctx: TraceContext | None = None,
    ) -> LLMResponse:
        """Make a single LLM call for a given model role.

        Args:
            role: Model role (conversation, coding, vision).
            messages: List of message dicts with role and content.
            tools: Optional list of tool definitions for function calling.
            tool_choice: Tool choice parameter ("auto", "none", or specific tool).
            system_prompt: Optional system prompt (prepended to messages).
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature (overrides the role default).
            timeout_s: Request timeout in seconds (overrides the role default).
            trace_ctx: Trace context for telemetry correlation.

        Returns:
            LLMResponse with normalized structure.

        Raises:
            LLMTimeout: If the request times out.
            LLMConnectionError: If the connection fails.
            LLMRateLimit: If the service reports a rate limit or exhausted quota.
            LLMServerError: If the service returns a 5xx error.
            LLMInvalidResponse: If the response body is malformed.
            LLMClientError: For any other failure, including a missing role.
        """
        model_def = self.model_configs.get(role.value)
        if model_def is None:
            raise LLMClientError(f"No model configured for role: {role.value}")

        if tools and not model_def.supports_function_calling:
            log.warning(
                "tools_filtered_no_function_calling",
                model_id=model_def.id,
                role=role.value,
                tools_count=len(tools),
            )
            tools = None
            tool_choice = None

        endpoint = self._endpoint_for(model_def)
        if timeout_s is None:
            timeout_s = float(model_def.default_timeout or self.timeout_seconds)
        effective_temperature = model_def.temperature if temperature is None else temperature
        effective_max_tokens = model_def.max_tokens if max_tokens is None else max_tokens

        request_messages = list(messages)
        if system_prompt:
            request_messages.insert(0, {"role": "system", "content": system_prompt})

        payload = build_chat_completions_request(
            messages=request_messages,
            model=model_def.id,
            tools=tools,
            tool_choice=tool_choice,
            max_tokens=effective_max_tokens,
            temperature=effective_temperature,
        )

        if trace_ctx is None:
            trace_ctx = TraceContext.new_trace()
        _, span_id = trace_ctx.new_span()

        start_time = time.monotonic()
        log.info(
            MODEL_CALL_STARTED,
            role=role.value,
            model_id=model_def.id,
            message_count=len(request_messages),
            tools_count=len(tools or []),
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
        )

        timeout_config = httpx.Timeout(connect=10.0, read=timeout_s, write=10.0, pool=10.0)
        headers = {"Authorization": f"Bearer {self._api_key}"}

        error: LLMClientError
        try:
            async with httpx.AsyncClient(timeout=timeout_config) as client:
                response = await client.post(endpoint, json=payload, headers=headers)
                response.raise_for_status()
                response_data = response.json()

            if isinstance(response_data, dict) and response_data.get("error"):
                error_obj = response_data["error"]
                error_msg = (
                    error_obj.get("message", str(error_obj))
                    if isinstance(error_obj, dict)
                    else str(error_obj)
                )
                raise LLMClientError(f"API returned error: {error_msg}")
            if not isinstance(response_data, dict):
                raise LLMInvalidResponse("Response body is not a JSON object")

            llm_response = adapt_chat_completions_response(response_data)

            log.info(
                MODEL_CALL_COMPLETED,
                role=role.value,
                model_id=model_def.id,
                latency_ms=int((time.monotonic() - start_time) * 1000),
                tool_calls=[tc["name"] for tc in llm_response["tool_calls"]],
                prompt_tokens=llm_response["usage"].get("prompt_tokens", 0),
                completion_tokens=llm_response["usage"].get("completion_tokens", 0),
                trace_id=trace_ctx.trace_id,
                span_id=span_id,
            )
            return llm_response

        except httpx.TimeoutException:
            error = LLMTimeout(f"Request to {endpoint} timed out after {timeout_s}s")
        except httpx.ConnectError as e:
            error = LLMConnectionError(f"Failed to connect to {endpoint}: {e}")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                error = LLMRateLimit(f"Rate limit or quota exceeded: {e}")
            elif status >= 500:
                error = LLMServerError(f"Server error {status}: {e}")
            else:
                error = LLMClientError(f"HTTP error {status}: {e}")
        except httpx.RequestError as e:
            error = LLMConnectionError(f"Request error: {e}")
        except LLMClientError as e:
            error = e
        except ValueError as e:
            # response.json() on a non-JSON body
            error = LLMInvalidResponse(f"Invalid response format: {e}")

        log.error(
            MODEL_CALL_ERROR,
            role=role.value,
            model_id=model_def.id,
            error_type=type(error).__name__,
            error=str(error),
            latency_ms=int((time.monotonic() - start_time) * 1000),
            trace_id=trace_ctx.trace_id,
            span_id=span_id,
        )
        raise error
