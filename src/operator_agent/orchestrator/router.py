"""Intent routing: decide whether an utterance is chat or a capability call.

The utterance is appended to the session's model conversation and sent with
the full tool registry attached. The model answers with either tool calls or
text. At most one tool call is honored per utterance; any others are logged
and dropped.
"""

import json
from typing import Any

from operator_agent.errors import ModelUnavailable
from operator_agent.llm_client import LLMClient, LLMClientError, ModelRole
from operator_agent.orchestrator.prompts import CONVERSATION_SYSTEM_PROMPT
from operator_agent.orchestrator.session import Session
from operator_agent.orchestrator.types import FreeText, IntentResolution, StructuredCall
from operator_agent.telemetry import (
    EXTRA_TOOL_CALLS_DROPPED,
    INTENT_FAILED,
    INTENT_RESOLVED,
    TraceContext,
    get_logger,
)
from operator_agent.tools import ToolRegistry

log = get_logger(__name__)

# Recorded as the tool result so the model's history stays well-formed.
TOOL_RESULT_ACK = "Capability dispatched."


class IntentRouter:
    """Classifies utterances with a single tool-calling model request."""

    def __init__(
        self,
        llm_client: LLMClient,
        registry: ToolRegistry,
        system_prompt: str = CONVERSATION_SYSTEM_PROMPT,
    ) -> None:
        """Initialize the router.

        Args:
            llm_client: Client used for the classification call.
            registry: Tool registry presented on every call.
            system_prompt: System instruction for the conversation model.
        """
        self.llm_client = llm_client
        self.registry = registry
        self.system_prompt = system_prompt

    async def classify(
        self, session: Session, utterance: str, trace_ctx: TraceContext | None = None
    ) -> IntentResolution:
        """Resolve an utterance into a StructuredCall or FreeText.

        Args:
            session: The operator's session; its conversation is extended.
            utterance: Cleaned operator text.
            trace_ctx: Trace context for log correlation.

        Returns:
            Exactly one of StructuredCall or FreeText.

        Raises:
            ModelUnavailable: If the service fails or returns a malformed call.
                The utterance is withdrawn from the conversation in that case.
        """
        user_message: dict[str, Any] = {"role": "user", "content": utterance}
        session.conversation.append(user_message)

        try:
            response = await self.llm_client.respond(
                role=ModelRole.CONVERSATION,
                messages=list(session.conversation),
                tools=self.registry.get_tool_definitions_for_llm(),
                system_prompt=self.system_prompt,
                trace_ctx=trace_ctx,
            )
            resolution = self._resolve(response["content"], response["tool_calls"])
        except (LLMClientError, ModelUnavailable) as e:
            self._withdraw(session, user_message)
            log.warning(
                INTENT_FAILED,
                operator_id=session.operator_id,
                error_type=type(e).__name__,
                error=str(e),
                trace_id=trace_ctx.trace_id if trace_ctx else None,
            )
            if isinstance(e, ModelUnavailable):
                raise
            raise ModelUnavailable(str(e)) from e

        self._record(session, resolution)
        log.info(
            INTENT_RESOLVED,
            operator_id=session.operator_id,
            kind="structured_call" if isinstance(resolution, StructuredCall) else "free_text",
            tool_name=resolution.name if isinstance(resolution, StructuredCall) else None,
            trace_id=trace_ctx.trace_id if trace_ctx else None,
        )
        return resolution

    def _resolve(self, content: str, tool_calls: list[Any]) -> IntentResolution:
        if not tool_calls:
            return FreeText(text=content or "")

        first, *extra = tool_calls
        if extra:
            log.warning(
                EXTRA_TOOL_CALLS_DROPPED,
                honored=first["name"],
                dropped=[tc["name"] for tc in extra],
            )

        try:
            arguments = json.loads(first["arguments"] or "{}")
        except json.JSONDecodeError as e:
            raise ModelUnavailable(
                f"Malformed arguments for tool call '{first['name']}': {e}"
            ) from e
        if not isinstance(arguments, dict):
            raise ModelUnavailable(
                f"Arguments for tool call '{first['name']}' are not an object"
            )

        return StructuredCall(name=first["name"], arguments=arguments, call_id=first["id"])

    @staticmethod
    def _record(session: Session, resolution: IntentResolution) -> None:
        match resolution:
            case StructuredCall(name=name, arguments=arguments, call_id=call_id):
                call_id = call_id or "call_0"
                session.conversation.append(
                    {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {
                                "id": call_id,
                                "type": "function",
                                "function": {"name": name, "arguments": json.dumps(arguments)},
                            }
                        ],
                    }
                )
                session.conversation.append(
                    {"role": "tool", "tool_call_id": call_id, "content": TOOL_RESULT_ACK}
                )
            case FreeText(text=text):
                session.conversation.append({"role": "assistant", "content": text})

    @staticmethod
    def _withdraw(session: Session, message: dict[str, Any]) -> None:
        # Identity check: a concurrent handler may have appended after us
        for idx in range(len(session.conversation) - 1, -1, -1):
            if session.conversation[idx] is message:
                del session.conversation[idx]
                break
