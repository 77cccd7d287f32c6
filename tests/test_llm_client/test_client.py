"""Tests for LLMClient."""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from operator_agent.llm_client.client import LLMClient
from operator_agent.llm_client.models import ModelConfig
from operator_agent.llm_client.types import (
    LLMClientError,
    LLMConnectionError,
    LLMInvalidResponse,
    LLMRateLimit,
    LLMServerError,
    LLMTimeout,
    ModelRole,
)
from operator_agent.telemetry.trace import TraceContext

TEXT_RESPONSE = {
    "choices": [{"message": {"role": "assistant", "content": "Hello, world!"}}],
    "usage": {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13},
}


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://llm.test/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"status {status}", request=request, response=response)


class TestLLMClient:
    """Test LLMClient class."""

    @pytest.fixture
    def client(self, model_config: ModelConfig) -> LLMClient:
        return LLMClient(
            api_key="secret-key",
            base_url="https://llm.test/v1/",
            model_config=model_config,
            timeout_seconds=30,
        )

    @pytest.fixture
    def mock_http(self) -> Any:
        """Patch httpx.AsyncClient and yield the inner client mock."""
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            yield mock_client

    @staticmethod
    def _respond_with(mock_http: Any, body: Any) -> None:
        response = MagicMock()
        response.json.return_value = body
        response.raise_for_status = MagicMock()
        mock_http.post = AsyncMock(return_value=response)

    @pytest.mark.asyncio
    async def test_respond_success(self, client: LLMClient, mock_http: Any) -> None:
        self._respond_with(mock_http, TEXT_RESPONSE)

        response = await client.respond(
            role=ModelRole.CONVERSATION,
            messages=[{"role": "user", "content": "Hello"}],
            trace_ctx=TraceContext.new_trace(),
        )

        assert response["content"] == "Hello, world!"
        assert response["tool_calls"] == []
        assert response["usage"]["prompt_tokens"] == 10

    @pytest.mark.asyncio
    async def test_request_shape(self, client: LLMClient, mock_http: Any) -> None:
        """Endpoint, bearer header, system prompt, and model id are sent."""
        self._respond_with(mock_http, TEXT_RESPONSE)
        tools = [{"type": "function", "function": {"name": "skipTrack"}}]

        await client.respond(
            role=ModelRole.CONVERSATION,
            messages=[{"role": "user", "content": "skip"}],
            tools=tools,
            system_prompt="Be concise.",
        )

        args, kwargs = mock_http.post.call_args
        assert args[0] == "https://llm.test/v1/chat/completions"
        assert kwargs["headers"]["Authorization"] == "Bearer secret-key"
        payload = kwargs["json"]
        assert payload["model"] == "test-chat"
        assert payload["messages"][0] == {"role": "system", "content": "Be concise."}
        assert payload["messages"][1]["content"] == "skip"
        assert payload["tools"] == tools
        assert payload["tool_choice"] == "auto"

    @pytest.mark.asyncio
    async def test_tools_dropped_without_function_calling(
        self, client: LLMClient, mock_http: Any
    ) -> None:
        self._respond_with(mock_http, TEXT_RESPONSE)

        await client.respond(
            role=ModelRole.CODING,
            messages=[{"role": "user", "content": "x"}],
            tools=[{"type": "function", "function": {"name": "skipTrack"}}],
        )

        payload = mock_http.post.call_args.kwargs["json"]
        assert "tools" not in payload
        assert "tool_choice" not in payload

    @pytest.mark.asyncio
    async def test_tool_calls_returned(self, client: LLMClient, mock_http: Any) -> None:
        body = {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {
                                "id": "call_1",
                                "type": "function",
                                "function": {
                                    "name": "playMusic",
                                    "arguments": json.dumps({"query": "lofi"}),
                                },
                            }
                        ],
                    }
                }
            ]
        }
        self._respond_with(mock_http, body)

        response = await client.respond(
            role=ModelRole.CONVERSATION, messages=[{"role": "user", "content": "play lofi"}]
        )

        assert response["tool_calls"][0]["name"] == "playMusic"
        assert json.loads(response["tool_calls"][0]["arguments"]) == {"query": "lofi"}

    @pytest.mark.asyncio
    async def test_timeout(self, client: LLMClient, mock_http: Any) -> None:
        mock_http.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(LLMTimeout):
            await client.respond(role=ModelRole.CONVERSATION, messages=[])

    @pytest.mark.asyncio
    async def test_connection_error(self, client: LLMClient, mock_http: Any) -> None:
        mock_http.post = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(LLMConnectionError):
            await client.respond(role=ModelRole.CONVERSATION, messages=[])

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error_class"),
        [(429, LLMRateLimit), (503, LLMServerError), (400, LLMClientError)],
    )
    async def test_status_errors_single_attempt(
        self,
        client: LLMClient,
        mock_http: Any,
        status: int,
        error_class: type[Exception],
    ) -> None:
        """Error statuses are classified and never retried."""
        response = MagicMock()
        response.raise_for_status = MagicMock(side_effect=_status_error(status))
        mock_http.post = AsyncMock(return_value=response)

        with pytest.raises(error_class):
            await client.respond(role=ModelRole.CONVERSATION, messages=[])

        assert mock_http.post.await_count == 1

    @pytest.mark.asyncio
    async def test_error_body(self, client: LLMClient, mock_http: Any) -> None:
        self._respond_with(mock_http, {"error": {"message": "quota exhausted"}})

        with pytest.raises(LLMClientError, match="quota exhausted"):
            await client.respond(role=ModelRole.CONVERSATION, messages=[])

    @pytest.mark.asyncio
    async def test_non_json_body(self, client: LLMClient, mock_http: Any) -> None:
        response = MagicMock()
        response.raise_for_status = MagicMock()
        response.json = MagicMock(side_effect=ValueError("not json"))
        mock_http.post = AsyncMock(return_value=response)

        with pytest.raises(LLMInvalidResponse):
            await client.respond(role=ModelRole.CONVERSATION, messages=[])

    @pytest.mark.asyncio
    async def test_no_choices(self, client: LLMClient, mock_http: Any) -> None:
        self._respond_with(mock_http, {"choices": []})

        with pytest.raises(LLMInvalidResponse):
            await client.respond(role=ModelRole.CONVERSATION, messages=[])

    @pytest.mark.asyncio
    async def test_unconfigured_role(self) -> None:
        client = LLMClient(
            api_key="k", base_url="https://llm.test", model_config=ModelConfig(models={})
        )

        with pytest.raises(LLMClientError, match="No model configured"):
            await client.respond(role=ModelRole.VISION, messages=[])

    def test_endpoint_override(self, model_config: ModelConfig) -> None:
        model_config.models["vision"].endpoint = "https://vision.test/v1/"
        client = LLMClient(api_key="k", base_url="https://llm.test/v1", model_config=model_config)

        assert (
            client._endpoint_for(model_config.models["vision"])
            == "https://vision.test/v1/chat/completions"
        )
