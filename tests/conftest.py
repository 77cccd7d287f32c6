"""Shared fixtures for the operator agent test suite."""

from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from operator_agent.llm_client import LLMResponse, ModelConfig, ModelDefinition

SECRET_ENV_NAMES = (
    "DISCORD_TOKEN",
    "AGENT_DISCORD_TOKEN",
    "OWNER_ID",
    "AGENT_OWNER_ID",
    "LLM_API_KEY",
    "AGENT_LLM_API_KEY",
    "GEMINI_API_KEY",
)


@pytest.fixture
def clean_secrets(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Remove every secret variable so tests see only what they set."""
    for name in SECRET_ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch


@pytest.fixture
def model_config() -> ModelConfig:
    """A catalogue with all three roles."""
    return ModelConfig(
        models={
            "conversation": ModelDefinition(id="test-chat", default_timeout=5),
            "coding": ModelDefinition(
                id="test-coder", default_timeout=5, supports_function_calling=False
            ),
            "vision": ModelDefinition(
                id="test-vision", default_timeout=5, supports_function_calling=False
            ),
        }
    )


@pytest.fixture
def models_yaml(tmp_path: Path) -> Path:
    """Write a minimal models.yaml and return its path."""
    config_file = tmp_path / "models.yaml"
    config_file.write_text(
        """
models:
  conversation:
    id: "chat-model"
    default_timeout: 30
    temperature: 0.7
  coding:
    id: "code-model"
    supports_function_calling: false
  vision:
    id: "vision-model"
    supports_function_calling: false
"""
    )
    return config_file


def _make_response(
    content: str = "", tool_calls: list[dict[str, str]] | None = None
) -> LLMResponse:
    """Build a normalized LLM response for mocked clients."""
    return LLMResponse(
        role="assistant",
        content=content,
        tool_calls=tool_calls or [],  # type: ignore[typeddict-item]
        usage={"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0},
        raw={},
    )


@pytest.fixture
def llm_client() -> MagicMock:
    """An LLMClient stand-in whose respond() is an AsyncMock."""
    client = MagicMock()
    client.respond = AsyncMock(return_value=_make_response("Hello!"))
    return client


def _make_message(
    *,
    author_id: int = 42,
    content: str = "",
    guild_id: int | None = 1,
    in_voice: bool = True,
    attachments: list[MagicMock] | None = None,
) -> MagicMock:
    """Build a discord.Message stand-in with awaitable reply/send."""
    message = MagicMock()
    message.content = content
    message.author.id = author_id
    message.author.bot = False
    message.author.display_name = "operator"
    message.author.voice = MagicMock() if in_voice else None
    if guild_id is None:
        message.guild = None
    else:
        message.guild.id = guild_id
    message.attachments = attachments or []
    message.reply = AsyncMock()
    message.channel.send = AsyncMock()
    return message


@pytest.fixture
def make_response() -> Callable[..., LLMResponse]:
    return _make_response


@pytest.fixture
def make_message() -> Callable[..., MagicMock]:
    return _make_message
