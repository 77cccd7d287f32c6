"""Tests for the execution engine."""

import asyncio
import types
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from operator_agent.actions.engine import (
    SAFE_BUILTINS,
    ExecutionEngine,
    ExecutionUnit,
    format_execution_error,
)
from operator_agent.errors import ExecutionFailed


@pytest.fixture
def message() -> MagicMock:
    message = MagicMock()
    message.reply = AsyncMock()
    return message


def test_format_execution_error() -> None:
    assert format_execution_error("Missing permissions") == (
        "❌ **Execution Error:**\n```Missing permissions```"
    )


def test_curated_builtins() -> None:
    for name in ("__import__", "open", "eval", "exec", "compile", "getattr", "globals"):
        assert name not in SAFE_BUILTINS
    assert SAFE_BUILTINS["len"] is len
    assert "BaseException" not in SAFE_BUILTINS
    assert SAFE_BUILTINS["Exception"] is Exception


def test_build_binds_exactly_three_names() -> None:
    action = ExecutionEngine().build(ExecutionUnit("return (client, message, discord)"))

    assert action.__code__.co_varnames[:3] == ("client", "message", "discord")
    assert action.__code__.co_argcount == 3


def test_build_syntax_error() -> None:
    with pytest.raises(ExecutionFailed, match="SyntaxError"):
        ExecutionEngine().build(ExecutionUnit("await message.reply("))


@pytest.mark.asyncio
async def test_success_is_silent(message: MagicMock) -> None:
    """The unit confirms its own work; the engine adds nothing."""
    outcome = await ExecutionEngine().execute(
        ExecutionUnit("await message.reply('Done!')"), client=MagicMock(), message=message
    )

    assert outcome.success is True
    assert outcome.error is None
    message.reply.assert_awaited_once_with("Done!")


@pytest.mark.asyncio
async def test_bindings_passed_through(message: MagicMock) -> None:
    client = MagicMock()
    client.fetch_channel = AsyncMock(return_value="channel")
    body = (
        "channel = await client.fetch_channel(123)\n"
        "await message.reply(f'{channel}:{discord.__name__}')"
    )

    await ExecutionEngine().execute(ExecutionUnit(body), client=client, message=message)

    client.fetch_channel.assert_awaited_once_with(123)
    message.reply.assert_awaited_once_with(f"channel:{discord.__name__}")


@pytest.mark.asyncio
async def test_thrown_message_surfaced_verbatim(message: MagicMock) -> None:
    outcome = await ExecutionEngine().execute(
        ExecutionUnit("raise Exception('Role not found')"), client=MagicMock(), message=message
    )

    assert outcome.success is False
    assert outcome.error == "Role not found"
    message.reply.assert_awaited_once_with("❌ **Execution Error:**\n```Role not found```")


@pytest.mark.asyncio
async def test_executes_exactly_once(message: MagicMock) -> None:
    client = MagicMock()
    client.side_effect_call = AsyncMock(side_effect=RuntimeError("platform refused"))

    outcome = await ExecutionEngine().execute(
        ExecutionUnit("await client.side_effect_call()"), client=client, message=message
    )

    assert outcome.error == "platform refused"
    client.side_effect_call.assert_awaited_once()


@pytest.mark.asyncio
async def test_restricted_builtins_fail_at_runtime(message: MagicMock) -> None:
    outcome = await ExecutionEngine().execute(
        ExecutionUnit("open('/etc/passwd')"), client=MagicMock(), message=message
    )

    assert outcome.success is False
    assert "open" in (outcome.error or "")


@pytest.mark.asyncio
async def test_timeout_bounds_run(message: MagicMock) -> None:
    engine = ExecutionEngine(timeout_seconds=0.05)

    outcome = await engine.execute(
        ExecutionUnit("await discord.sleep(5)"),
        client=MagicMock(),
        message=message,
        namespace=asyncio,  # type: ignore[arg-type]
    )

    assert outcome.success is False
    assert outcome.error == "Execution timed out after 0.05s"
    message.reply.assert_awaited_once_with(
        "❌ **Execution Error:**\n```Execution timed out after 0.05s```"
    )


@pytest.mark.asyncio
async def test_failed_report_does_not_raise(message: MagicMock) -> None:
    response = MagicMock(status=500, reason="error")
    message.reply = AsyncMock(side_effect=discord.HTTPException(response, "down"))

    outcome = await ExecutionEngine().execute(
        ExecutionUnit("raise ValueError('bad')"), client=MagicMock(), message=message
    )

    assert outcome.error == "bad"


@pytest.mark.asyncio
async def test_multiline_string_kept_verbatim(message: MagicMock) -> None:
    body = 'await message.reply("""Rules:\n1. Be kind\n2. No spam""")'

    await ExecutionEngine().execute(ExecutionUnit(body), client=MagicMock(), message=message)

    message.reply.assert_awaited_once_with("Rules:\n1. Be kind\n2. No spam")


@pytest.mark.asyncio
async def test_cancelled_error_raised_by_unit_is_reported(message: MagicMock) -> None:
    outcome = await ExecutionEngine().execute(
        ExecutionUnit("raise discord.CancelledError('boom')"),
        client=MagicMock(),
        message=message,
        namespace=asyncio,  # type: ignore[arg-type]
    )

    assert outcome.success is False
    assert outcome.error == "boom"
    message.reply.assert_awaited_once_with("❌ **Execution Error:**\n```boom```")


@pytest.mark.asyncio
async def test_base_exception_subclass_is_reported(message: MagicMock) -> None:
    class Halt(BaseException):
        pass

    namespace = types.ModuleType("platform")
    namespace.Halt = Halt  # type: ignore[attr-defined]

    outcome = await ExecutionEngine().execute(
        ExecutionUnit("raise discord.Halt('stop here')"),
        client=MagicMock(),
        message=message,
        namespace=namespace,
    )

    assert outcome.success is False
    assert outcome.error == "stop here"
    message.reply.assert_awaited_once()


@pytest.mark.asyncio
async def test_handler_cancellation_propagates(message: MagicMock) -> None:
    engine = ExecutionEngine(timeout_seconds=None)
    task = asyncio.ensure_future(
        engine.execute(
            ExecutionUnit("await discord.sleep(5)"),
            client=MagicMock(),
            message=message,
            namespace=asyncio,  # type: ignore[arg-type]
        )
    )
    await asyncio.sleep(0.01)

    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    message.reply.assert_not_called()
