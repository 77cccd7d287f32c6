"""Tests for the multimodal query handler."""

import base64
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from operator_agent.errors import AttachmentFetchFailed, ModelUnavailable
from operator_agent.llm_client import LLMTimeout, ModelRole
from operator_agent.vision import IMAGE_DEFAULT_PROMPT, MultimodalQueryHandler, is_image

IMAGE_URL = "https://cdn.test/attachments/cat.png"
IMAGE_BYTES = b"\x89PNG fake image"


@pytest.fixture
def mock_http() -> Any:
    """Patch httpx.AsyncClient and yield the inner client mock."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client_class.return_value.__aenter__.return_value = mock_client
        yield mock_client


def _serve(mock_http: Any, body: bytes) -> None:
    response = MagicMock()
    response.content = body
    response.raise_for_status = MagicMock()
    mock_http.get = AsyncMock(return_value=response)


class TestIsImage:
    @pytest.mark.parametrize("content_type", ["image/png", "image/jpeg", "IMAGE/GIF"])
    def test_image_types(self, content_type: str) -> None:
        assert is_image(content_type)

    @pytest.mark.parametrize("content_type", [None, "", "application/pdf", "text/plain"])
    def test_other_types(self, content_type: str | None) -> None:
        assert not is_image(content_type)


class TestMultimodalQueryHandler:
    @pytest.mark.asyncio
    async def test_describe_sends_image_to_vision_role(
        self, llm_client: MagicMock, make_response: Any, mock_http: Any
    ) -> None:
        _serve(mock_http, IMAGE_BYTES)
        llm_client.respond.return_value = make_response("A cat on a sofa.")
        handler = MultimodalQueryHandler(llm_client)

        text = await handler.describe(IMAGE_URL, "image/png", "what animal is this?")

        assert text == "A cat on a sofa."
        mock_http.get.assert_awaited_once_with(IMAGE_URL)
        kwargs = llm_client.respond.await_args.kwargs
        assert kwargs["role"] == ModelRole.VISION
        (message,) = kwargs["messages"]
        text_part, image_part = message["content"]
        assert text_part == {"type": "text", "text": "what animal is this?"}
        encoded = base64.b64encode(IMAGE_BYTES).decode("ascii")
        assert image_part["image_url"]["url"] == f"data:image/png;base64,{encoded}"

    @pytest.mark.asyncio
    async def test_empty_prompt_uses_default(
        self, llm_client: MagicMock, mock_http: Any
    ) -> None:
        _serve(mock_http, IMAGE_BYTES)
        handler = MultimodalQueryHandler(llm_client)

        await handler.describe(IMAGE_URL, "image/jpeg", "")

        (message,) = llm_client.respond.await_args.kwargs["messages"]
        assert message["content"][0]["text"] == IMAGE_DEFAULT_PROMPT

    @pytest.mark.asyncio
    async def test_non_image_rejected_before_download(
        self, llm_client: MagicMock, mock_http: Any
    ) -> None:
        handler = MultimodalQueryHandler(llm_client)

        with pytest.raises(AttachmentFetchFailed, match="Unsupported attachment type"):
            await handler.describe(IMAGE_URL, "application/pdf")

        mock_http.get.assert_not_called()
        llm_client.respond.assert_not_called()

    @pytest.mark.asyncio
    async def test_download_error(self, llm_client: MagicMock, mock_http: Any) -> None:
        mock_http.get = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
        handler = MultimodalQueryHandler(llm_client)

        with pytest.raises(AttachmentFetchFailed, match="Could not download attachment"):
            await handler.describe(IMAGE_URL, "image/png")

        llm_client.respond.assert_not_called()

    @pytest.mark.asyncio
    async def test_oversize_attachment(self, llm_client: MagicMock, mock_http: Any) -> None:
        _serve(mock_http, b"x" * 64)
        handler = MultimodalQueryHandler(llm_client, max_bytes=16)

        with pytest.raises(AttachmentFetchFailed, match="byte limit"):
            await handler.describe(IMAGE_URL, "image/png")

        llm_client.respond.assert_not_called()

    @pytest.mark.asyncio
    async def test_model_failure(self, llm_client: MagicMock, mock_http: Any) -> None:
        _serve(mock_http, IMAGE_BYTES)
        llm_client.respond.side_effect = LLMTimeout("vision model timed out")
        handler = MultimodalQueryHandler(llm_client)

        with pytest.raises(ModelUnavailable, match="timed out"):
            await handler.describe(IMAGE_URL, "image/png", "hi")
