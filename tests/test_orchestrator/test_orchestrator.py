"""Tests for per-event orchestration."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from operator_agent.errors import AttachmentFetchFailed, ModelUnavailable
from operator_agent.llm_client import LLMTimeout
from operator_agent.orchestrator import (
    INTENT_FAILURE_REPLY,
    IntentRouter,
    Orchestrator,
    SessionStore,
    StructuredCall,
    split_message,
)
from operator_agent.tools import get_default_registry
from operator_agent.vision import IMAGE_FAILURE_REPLY


@pytest.fixture
def sessions() -> Any:
    store = SessionStore(ttl_seconds=60)
    yield store
    store.clear()


@pytest.fixture
def dispatcher() -> MagicMock:
    dispatcher = MagicMock()
    dispatcher.dispatch = AsyncMock()
    return dispatcher


@pytest.fixture
def describer() -> MagicMock:
    describer = MagicMock()
    describer.describe = AsyncMock(return_value="A cat on a keyboard.")
    return describer


@pytest.fixture
def orchestrator(
    llm_client: MagicMock,
    sessions: SessionStore,
    dispatcher: MagicMock,
    describer: MagicMock,
) -> Orchestrator:
    return Orchestrator(
        client=MagicMock(),
        sessions=sessions,
        router=IntentRouter(llm_client, get_default_registry()),
        dispatcher=dispatcher,
        describer=describer,
    )


def _image(content_type: str = "image/png") -> MagicMock:
    attachment = MagicMock()
    attachment.url = "https://cdn.test/cat.png"
    attachment.content_type = content_type
    return attachment


@pytest.mark.asyncio
async def test_chat_reply_recorded_in_session(
    orchestrator: Orchestrator,
    sessions: SessionStore,
    make_message: Callable[..., MagicMock],
) -> None:
    message = make_message(content="hi")

    await orchestrator.handle(message, "hi")

    message.reply.assert_awaited_once_with("Hello!")
    session = sessions.get("42")
    assert session is not None
    assert [(t.role, t.text) for t in session.turns] == [("user", "hi"), ("assistant", "Hello!")]


@pytest.mark.asyncio
async def test_session_carries_across_utterances(
    orchestrator: Orchestrator,
    llm_client: MagicMock,
    make_message: Callable[..., MagicMock],
) -> None:
    await orchestrator.handle(make_message(), "first")
    await orchestrator.handle(make_message(), "second")

    messages = llm_client.respond.await_args.kwargs["messages"]
    assert [m["content"] for m in messages] == ["first", "Hello!", "second"]


@pytest.mark.asyncio
async def test_structured_call_dispatched(
    orchestrator: Orchestrator,
    llm_client: MagicMock,
    dispatcher: MagicMock,
    make_message: Callable[..., MagicMock],
    make_response: Callable[..., Any],
) -> None:
    llm_client.respond = AsyncMock(
        return_value=make_response(
            tool_calls=[{"id": "c1", "name": "skipTrack", "arguments": "{}"}]
        )
    )
    message = make_message()

    await orchestrator.handle(message, "skip")

    dispatcher.dispatch.assert_awaited_once()
    call = dispatcher.dispatch.await_args.args[0]
    assert call == StructuredCall(name="skipTrack", arguments={}, call_id="c1")
    assert dispatcher.dispatch.await_args.kwargs["client"] is orchestrator.client
    message.reply.assert_not_awaited()


@pytest.mark.asyncio
async def test_model_unavailable_apologizes_once(
    orchestrator: Orchestrator,
    llm_client: MagicMock,
    dispatcher: MagicMock,
    make_message: Callable[..., MagicMock],
) -> None:
    llm_client.respond = AsyncMock(side_effect=ModelUnavailable("timeout"))
    message = make_message()

    await orchestrator.handle(message, "hello")

    message.reply.assert_awaited_once_with(INTENT_FAILURE_REPLY)
    assert llm_client.respond.await_count == 1
    dispatcher.dispatch.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_classification_leaves_histories_consistent(
    orchestrator: Orchestrator,
    sessions: SessionStore,
    llm_client: MagicMock,
    make_message: Callable[..., MagicMock],
) -> None:
    message = make_message()
    await orchestrator.handle(message, "hello")

    llm_client.respond = AsyncMock(side_effect=LLMTimeout("timed out"))
    await orchestrator.handle(message, "play something")

    session = sessions.get("42")
    assert session is not None
    assert [(t.role, t.text) for t in session.turns] == [
        ("user", "hello"),
        ("assistant", "Hello!"),
    ]
    assert [m["content"] for m in session.conversation] == ["hello", "Hello!"]


@pytest.mark.asyncio
async def test_empty_free_text_sends_nothing(
    orchestrator: Orchestrator,
    llm_client: MagicMock,
    make_message: Callable[..., MagicMock],
    make_response: Callable[..., Any],
) -> None:
    llm_client.respond = AsyncMock(return_value=make_response("   "))
    message = make_message()

    await orchestrator.handle(message, "hmm")

    message.reply.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_utterance_without_image_is_noop(
    orchestrator: Orchestrator,
    llm_client: MagicMock,
    sessions: SessionStore,
    make_message: Callable[..., MagicMock],
) -> None:
    message = make_message()

    await orchestrator.handle(message, "")

    llm_client.respond.assert_not_awaited()
    message.reply.assert_not_awaited()
    assert len(sessions) == 0


@pytest.mark.asyncio
async def test_unexpected_error_still_replies(
    orchestrator: Orchestrator,
    dispatcher: MagicMock,
    llm_client: MagicMock,
    make_message: Callable[..., MagicMock],
    make_response: Callable[..., Any],
) -> None:
    llm_client.respond = AsyncMock(
        return_value=make_response(
            tool_calls=[{"id": "c1", "name": "skipTrack", "arguments": "{}"}]
        )
    )
    dispatcher.dispatch = AsyncMock(side_effect=RuntimeError("boom"))
    message = make_message()

    await orchestrator.handle(message, "skip")

    message.reply.assert_awaited_once_with(INTENT_FAILURE_REPLY)


@pytest.mark.asyncio
async def test_image_bypasses_session_and_router(
    orchestrator: Orchestrator,
    llm_client: MagicMock,
    describer: MagicMock,
    sessions: SessionStore,
    make_message: Callable[..., MagicMock],
) -> None:
    message = make_message(attachments=[_image()])

    await orchestrator.handle(message, "what is this?")

    describer.describe.assert_awaited_once()
    args = describer.describe.await_args.args
    assert args == ("https://cdn.test/cat.png", "image/png", "what is this?")
    message.reply.assert_awaited_once_with("A cat on a keyboard.")
    llm_client.respond.assert_not_awaited()
    assert len(sessions) == 0


@pytest.mark.asyncio
async def test_image_failure_reply(
    orchestrator: Orchestrator,
    describer: MagicMock,
    make_message: Callable[..., MagicMock],
) -> None:
    describer.describe = AsyncMock(side_effect=AttachmentFetchFailed("404"))
    message = make_message(attachments=[_image()])

    await orchestrator.handle(message, "")

    message.reply.assert_awaited_once_with(IMAGE_FAILURE_REPLY)


@pytest.mark.asyncio
async def test_non_image_attachment_routes_text(
    orchestrator: Orchestrator,
    describer: MagicMock,
    make_message: Callable[..., MagicMock],
) -> None:
    message = make_message(attachments=[_image("application/pdf")])

    await orchestrator.handle(message, "hello")

    describer.describe.assert_not_awaited()
    message.reply.assert_awaited_once_with("Hello!")


def test_split_message() -> None:
    assert split_message("short") == ["short"]
    assert split_message("") == []

    text = "a" * 10 + "\n" + "b" * 10
    assert split_message(text, limit=15) == ["a" * 10, "b" * 10]
    assert split_message("c" * 25, limit=10) == ["c" * 10, "c" * 10, "c" * 5]
