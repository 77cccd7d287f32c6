"""Action synthesis: turn a natural-language request into a code body.

Each request is an independent, history-free model call, so identical
requests may produce different code. The result is untrusted until it has
passed the safety filter.
"""

import re

from operator_agent.errors import ModelUnavailable, SynthesisRejected
from operator_agent.llm_client import LLMClient, LLMClientError, ModelRole
from operator_agent.actions.prompts import SYNTHESIS_SYSTEM_PROMPT
from operator_agent.telemetry import (
    SYNTHESIS_COMPLETED,
    SYNTHESIS_FAILED,
    TraceContext,
    get_logger,
)

log = get_logger(__name__)

_LEADING_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?[ \t]*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around the model's output.

    Only a fence at the very start and one at the very end are removed;
    backticks inside the body are left alone.
    """
    body = _LEADING_FENCE.sub("", text, count=1)
    body = _TRAILING_FENCE.sub("", body, count=1)
    return body.strip("\n").rstrip()


class ActionSynthesizer:
    """Generates the body of an async function for an administrative request."""

    def __init__(self, llm_client: LLMClient, system_prompt: str = SYNTHESIS_SYSTEM_PROMPT) -> None:
        self.llm_client = llm_client
        self.system_prompt = system_prompt

    async def synthesize(self, description: str, trace_ctx: TraceContext | None = None) -> str:
        """Generate a candidate body for the described action.

        Args:
            description: What the operator wants done.
            trace_ctx: Trace context for log correlation.

        Returns:
            Candidate function body with code fences removed.

        Raises:
            ModelUnavailable: If the model call fails.
            SynthesisRejected: If the model returned no code.
        """
        try:
            response = await self.llm_client.respond(
                role=ModelRole.CODING,
                messages=[{"role": "user", "content": description}],
                system_prompt=self.system_prompt,
                trace_ctx=trace_ctx,
            )
        except LLMClientError as e:
            log.warning(SYNTHESIS_FAILED, error_type=type(e).__name__, error=str(e))
            raise ModelUnavailable(str(e)) from e

        body = strip_code_fences(response["content"])
        if not body.strip():
            raise SynthesisRejected("The model returned no code for this request.")

        log.info(
            SYNTHESIS_COMPLETED,
            description=description,
            code=body,
            trace_id=trace_ctx.trace_id if trace_ctx else None,
        )
        return body
