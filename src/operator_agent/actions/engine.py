"""Execution engine for synthesized actions.

A candidate body that passed the safety filter is wrapped as the body of an
async function taking exactly three bindings (the platform client, the
triggering message, and the platform library namespace), compiled against a
curated set of builtins, and awaited once. Failures are reported to the
operator; the action is never retried.
"""

import ast
import asyncio
import builtins
import time
from dataclasses import dataclass
from types import ModuleType
from typing import Any

import discord

from operator_agent.actions.safety import parse_action_body
from operator_agent.errors import ExecutionFailed
from operator_agent.telemetry import (
    EXECUTION_COMPLETED,
    EXECUTION_FAILED,
    EXECUTION_STARTED,
    REPLY_FAILED,
    TraceContext,
    get_logger,
)

log = get_logger(__name__)

ACTION_FUNCTION_NAME = "__operator_action__"
ACTION_FILENAME = "<synthesized>"
EXECUTION_ERROR_TEMPLATE = "❌ **Execution Error:**\n```{message}```"

_ALLOWED_BUILTINS = (
    # Values and constructors
    "bool",
    "int",
    "float",
    "str",
    "bytes",
    "list",
    "tuple",
    "dict",
    "set",
    "frozenset",
    "range",
    "slice",
    # Iteration
    "len",
    "enumerate",
    "zip",
    "map",
    "filter",
    "sorted",
    "reversed",
    "iter",
    "next",
    "aiter",
    "anext",
    "any",
    "all",
    "min",
    "max",
    "sum",
    "abs",
    "round",
    "divmod",
    # Inspection
    "isinstance",
    "issubclass",
    "hasattr",
    "repr",
    "format",
    "print",
    "chr",
    "ord",
    # Exceptions
    "Exception",
    "ValueError",
    "TypeError",
    "KeyError",
    "IndexError",
    "LookupError",
    "RuntimeError",
    "AttributeError",
    "StopIteration",
    "StopAsyncIteration",
    "NotImplementedError",
    "PermissionError",
)

SAFE_BUILTINS: dict[str, Any] = {name: getattr(builtins, name) for name in _ALLOWED_BUILTINS}


def format_execution_error(message: str) -> str:
    """Render an execution failure as the operator-facing reply."""
    return EXECUTION_ERROR_TEMPLATE.format(message=message)


@dataclass(frozen=True)
class ExecutionUnit:
    """A candidate body and the names it is bound to."""

    source: str
    bindings: tuple[str, ...] = ("client", "message", "discord")


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of running one unit."""

    success: bool
    error: str | None = None
    duration_ms: int = 0


class ExecutionEngine:
    """Runs synthesized units once, in a restricted namespace, with a time bound."""

    def __init__(self, timeout_seconds: float | None = 60.0) -> None:
        """Initialize the engine.

        Args:
            timeout_seconds: Upper bound on a unit's run time; None for no bound.
        """
        self.timeout_seconds = timeout_seconds

    def build(self, unit: ExecutionUnit) -> Any:
        """Compile a unit into an async function.

        Raises:
            ExecutionFailed: If the body does not compile.
        """
        params = ", ".join(unit.bindings)
        namespace: dict[str, Any] = {"__builtins__": SAFE_BUILTINS}
        try:
            body = parse_action_body(unit.source, ACTION_FILENAME)
            # The parsed statements replace the placeholder body of the wrapper
            module = ast.parse(f"async def {ACTION_FUNCTION_NAME}({params}):\n    pass\n")
            module.body[0].body = body.body or [ast.Pass()]  # type: ignore[attr-defined]
            code = compile(ast.fix_missing_locations(module), ACTION_FILENAME, "exec")
        except SyntaxError as e:
            raise ExecutionFailed(f"SyntaxError: {e.msg}") from e
        exec(code, namespace)
        return namespace[ACTION_FUNCTION_NAME]

    async def run(
        self,
        unit: ExecutionUnit,
        *,
        client: discord.Client,
        message: discord.Message,
        namespace: ModuleType = discord,
    ) -> None:
        """Run a unit once.

        Raises:
            ExecutionFailed: If the unit fails to compile, throws, or times out.
        """
        action = self.build(unit)
        try:
            await asyncio.wait_for(action(client, message, namespace), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ExecutionFailed(
                f"Execution timed out after {self.timeout_seconds:g}s"
            ) from e
        except BaseException as e:
            task = asyncio.current_task()
            if isinstance(e, asyncio.CancelledError) and task is not None and task.cancelling():
                # The handler itself is being cancelled, not the unit
                raise
            raise ExecutionFailed(str(e) or type(e).__name__) from e

    async def execute(
        self,
        unit: ExecutionUnit,
        *,
        client: discord.Client,
        message: discord.Message,
        namespace: ModuleType = discord,
        trace_ctx: TraceContext | None = None,
    ) -> ExecutionOutcome:
        """Run a unit once and report a failure to the operator.

        Success is silent here; the unit confirms its own work.

        Args:
            unit: The safety-checked candidate.
            client: Platform client bound as `client`.
            message: Triggering message bound as `message`.
            namespace: Platform library bound as `discord`.
            trace_ctx: Trace context for log correlation.

        Returns:
            ExecutionOutcome describing the single run.
        """
        trace_id = trace_ctx.trace_id if trace_ctx else None
        log.info(EXECUTION_STARTED, trace_id=trace_id)
        start = time.monotonic()

        try:
            await self.run(unit, client=client, message=message, namespace=namespace)
        except ExecutionFailed as e:
            duration_ms = int((time.monotonic() - start) * 1000)
            log.warning(
                EXECUTION_FAILED,
                error=str(e),
                cause_type=type(e.__cause__).__name__ if e.__cause__ else None,
                duration_ms=duration_ms,
                trace_id=trace_id,
            )
            await self._report(message, str(e))
            return ExecutionOutcome(success=False, error=str(e), duration_ms=duration_ms)

        duration_ms = int((time.monotonic() - start) * 1000)
        log.info(EXECUTION_COMPLETED, duration_ms=duration_ms, trace_id=trace_id)
        return ExecutionOutcome(success=True, duration_ms=duration_ms)

    @staticmethod
    async def _report(message: discord.Message, error: str) -> None:
        try:
            await message.reply(format_execution_error(error))
        except discord.HTTPException as e:
            log.warning(REPLY_FAILED, error=str(e))
