"""Request builders and response adapters for the chat completions API.

The language-model service is reached through its OpenAI-compatible
/chat/completions endpoint. These helpers build the payload and normalize the
response into LLMResponse.
"""

import base64
import json
from typing import Any

from operator_agent.llm_client.types import LLMInvalidResponse, LLMResponse, ToolCall


def adapt_chat_completions_response(response_data: dict[str, Any]) -> LLMResponse:
    """Adapt an OpenAI-style chat completions response to LLMResponse.

    Args:
        response_data: Raw response body.

    Returns:
        Normalized LLMResponse structure.

    Raises:
        LLMInvalidResponse: If the response has no choices or an unexpected shape.
    """
    try:
        choices = response_data.get("choices") or []
        if not choices:
            raise LLMInvalidResponse("Response has no choices")

        message = choices[0].get("message") or {}
        content = message.get("content") or ""
        if isinstance(content, list):
            # Some backends return content parts even for text-only replies
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )

        tool_calls: list[ToolCall] = []
        for idx, tc in enumerate(message.get("tool_calls") or []):
            if not isinstance(tc, dict):
                continue
            function = tc.get("function") or {}
            arguments = function.get("arguments")
            if arguments is None or arguments == "":
                arguments = "{}"
            elif not isinstance(arguments, str):
                # Some compatibility layers send an object instead of a string
                arguments = json.dumps(arguments)
            tool_calls.append(
                ToolCall(
                    id=tc.get("id") or f"call_{idx}",
                    name=function.get("name", ""),
                    arguments=arguments,
                )
            )

        usage = response_data.get("usage") or {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0,
        }

        return LLMResponse(
            role=message.get("role", "assistant"),
            content=content,
            tool_calls=tool_calls,
            usage=usage,
            raw=response_data,
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise LLMInvalidResponse(f"Invalid response format: {e}") from e


def build_chat_completions_request(
    messages: list[dict[str, Any]],
    model: str,
    tools: list[dict[str, Any]] | None = None,
    tool_choice: str | dict[str, Any] | None = None,
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Build a chat completions request payload.

    Args:
        messages: List of message dicts with role and content.
        model: Model identifier.
        tools: Optional list of tool definitions for function calling.
        tool_choice: Tool choice parameter ("auto", "none", or a specific tool).
        max_tokens: Maximum tokens to generate.
        temperature: Sampling temperature.

    Returns:
        Request payload dictionary.
    """
    payload: dict[str, Any] = {
        "model": model,
        "messages": [msg.copy() for msg in messages],
    }

    if tools:
        payload["tools"] = tools
        payload["tool_choice"] = tool_choice or "auto"

    if max_tokens is not None:
        payload["max_tokens"] = max_tokens

    if temperature is not None:
        payload["temperature"] = temperature

    return payload


def build_image_message(prompt: str, data: bytes, content_type: str) -> dict[str, Any]:
    """Build a user message carrying a text prompt and an inline image.

    Args:
        prompt: Instruction text for the model.
        data: Raw image bytes.
        content_type: MIME type of the image (e.g., "image/png").

    Returns:
        A chat message whose content is a text part followed by an image part.
    """
    encoded = base64.b64encode(data).decode("ascii")
    return {
        "role": "user",
        "content": [
            {"type": "text", "text": prompt},
            {
                "type": "image_url",
                "image_url": {"url": f"data:{content_type};base64,{encoded}"},
            },
        ],
    }
