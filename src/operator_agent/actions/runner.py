"""Open-ended administrative actions: synthesize, screen, execute."""

import discord

from operator_agent.actions.engine import (
    ExecutionEngine,
    ExecutionOutcome,
    ExecutionUnit,
    format_execution_error,
)
from operator_agent.actions.safety import SafetyFilter
from operator_agent.actions.synthesizer import ActionSynthesizer
from operator_agent.errors import ModelUnavailable, SynthesisRejected
from operator_agent.telemetry import REPLY_FAILED, TraceContext, get_logger

log = get_logger(__name__)

SYNTHESIS_FAILURE_REPLY = "I'm sorry, I encountered an error while trying to process your request."


class ActionRunner:
    """Carries out an ExecuteCommand request end to end.

    The candidate is executed only if the safety filter accepts it; a
    rejected candidate is reported and never run.
    """

    def __init__(
        self,
        synthesizer: ActionSynthesizer,
        engine: ExecutionEngine,
        safety_filter: SafetyFilter | None = None,
    ) -> None:
        self.synthesizer = synthesizer
        self.engine = engine
        self.safety_filter = safety_filter or SafetyFilter()

    async def run(
        self,
        description: str,
        *,
        client: discord.Client,
        message: discord.Message,
        trace_ctx: TraceContext | None = None,
    ) -> ExecutionOutcome:
        """Synthesize code for the description, screen it, and run it once.

        Every failure is reported to the operator with one reply.

        Returns:
            The outcome; unsuccessful when nothing ran.
        """
        try:
            body = await self.synthesizer.synthesize(description, trace_ctx=trace_ctx)
            self.safety_filter.check(body)
        except ModelUnavailable as e:
            await self._reply(message, SYNTHESIS_FAILURE_REPLY)
            return ExecutionOutcome(success=False, error=str(e))
        except SynthesisRejected as e:
            await self._reply(message, format_execution_error(str(e)))
            return ExecutionOutcome(success=False, error=str(e))

        return await self.engine.execute(
            ExecutionUnit(source=body),
            client=client,
            message=message,
            trace_ctx=trace_ctx,
        )

    @staticmethod
    async def _reply(message: discord.Message, text: str) -> None:
        try:
            await message.reply(text)
        except discord.HTTPException as e:
            log.warning(REPLY_FAILED, error=str(e))
