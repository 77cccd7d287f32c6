"""Per-event orchestration.

One inbound operator message flows through:
  session fetch/refresh -> intent router -> {dispatcher | text reply}
or, when the first attachment is an image, straight to the multimodal query
handler. Every failure is caught here and converted into exactly one reply.
"""

import discord

from operator_agent.errors import AttachmentFetchFailed, ModelUnavailable
from operator_agent.orchestrator.dispatcher import CapabilityDispatcher
from operator_agent.orchestrator.router import IntentRouter
from operator_agent.orchestrator.session import SessionStore
from operator_agent.orchestrator.types import FreeText, StructuredCall
from operator_agent.telemetry import (
    EVENT_HANDLER_FAILED,
    MESSAGE_RECEIVED,
    REPLY_FAILED,
    REPLY_SENT,
    TraceContext,
    get_logger,
)
from operator_agent.vision import IMAGE_FAILURE_REPLY, MultimodalQueryHandler, is_image

log = get_logger(__name__)

INTENT_FAILURE_REPLY = "I'm sorry, I encountered an error while trying to process your request."
MAX_MESSAGE_LENGTH = 2000


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split text into chunks the platform accepts, preferring line breaks."""
    chunks: list[str] = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    if remaining:
        chunks.append(remaining)
    return chunks


class Orchestrator:
    """Routes one operator message to conversation, a capability, or vision."""

    def __init__(
        self,
        client: discord.Client,
        sessions: SessionStore,
        router: IntentRouter,
        dispatcher: CapabilityDispatcher,
        describer: MultimodalQueryHandler,
    ) -> None:
        self.client = client
        self.sessions = sessions
        self.router = router
        self.dispatcher = dispatcher
        self.describer = describer

    async def handle(self, message: discord.Message, utterance: str) -> None:
        """Handle a gated, mention-stripped operator message.

        Never raises: failures are logged and reported with one reply.
        """
        trace_ctx = TraceContext.new_trace(operator_id=str(message.author.id))
        attachment = message.attachments[0] if message.attachments else None
        log.info(
            MESSAGE_RECEIVED,
            guild_id=message.guild.id if message.guild else None,
            has_attachment=attachment is not None,
            **trace_ctx.log_fields(),
        )

        try:
            if attachment is not None and is_image(attachment.content_type):
                await self.handle_image(message, utterance, attachment, trace_ctx)
            elif utterance:
                await self.handle_utterance(message, utterance, trace_ctx)
        except Exception:
            log.exception(EVENT_HANDLER_FAILED, **trace_ctx.log_fields())
            await self._reply(message, INTENT_FAILURE_REPLY)

    async def handle_utterance(
        self, message: discord.Message, utterance: str, trace_ctx: TraceContext
    ) -> None:
        """Classify an utterance in the operator's session and act on it."""
        session = self.sessions.get_or_create(str(message.author.id))
        self.sessions.touch(session)
        turn = self.sessions.append_turn(session, "user", utterance)

        try:
            resolution = await self.router.classify(session, utterance, trace_ctx=trace_ctx)
        except ModelUnavailable:
            # The router has already withdrawn the utterance from the conversation
            self.sessions.withdraw_turn(session, turn)
            await self._reply(message, INTENT_FAILURE_REPLY)
            return

        match resolution:
            case StructuredCall():
                await self.dispatcher.dispatch(
                    resolution, message, client=self.client, trace_ctx=trace_ctx
                )
            case FreeText(text=text):
                self.sessions.append_turn(session, "assistant", text)
                if text.strip():
                    for chunk in split_message(text):
                        await self._reply(message, chunk)

        self.sessions.touch(session)

    async def handle_image(
        self,
        message: discord.Message,
        prompt: str,
        attachment: discord.Attachment,
        trace_ctx: TraceContext,
    ) -> None:
        """Answer a prompt about an image attachment, outside any session."""
        try:
            text = await self.describer.describe(
                attachment.url, attachment.content_type, prompt, trace_ctx=trace_ctx
            )
        except (AttachmentFetchFailed, ModelUnavailable) as e:
            log.warning(
                "image_query_failed",
                error_type=type(e).__name__,
                error=str(e),
                **trace_ctx.log_fields(),
            )
            await self._reply(message, IMAGE_FAILURE_REPLY)
            return

        for chunk in split_message(text) or [IMAGE_FAILURE_REPLY]:
            await self._reply(message, chunk)

    @staticmethod
    async def _reply(message: discord.Message, text: str) -> None:
        try:
            await message.reply(text)
        except discord.HTTPException as e:
            log.warning(REPLY_FAILED, error=str(e))
            return
        log.debug(REPLY_SENT, length=len(text))
