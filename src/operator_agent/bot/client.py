"""Platform client: the discord.py event surface of the agent.

Only the owner may drive the bot, only in a guild, and only by mentioning it.
Everything else is ignored before any session or model work happens.
"""

import contextlib
import re

import discord

from operator_agent.actions import ActionRunner, ActionSynthesizer, ExecutionEngine, SafetyFilter
from operator_agent.config import AppConfig
from operator_agent.llm_client import LLMClient, ModelConfig
from operator_agent.media import MusicPlayer
from operator_agent.orchestrator import (
    CapabilityDispatcher,
    IntentRouter,
    Orchestrator,
    SessionStore,
)
from operator_agent.telemetry import (
    BOT_READY,
    MESSAGE_IGNORED,
    TYPING_INDICATOR_FAILED,
    get_logger,
)
from operator_agent.tools import ToolRegistry, get_default_registry
from operator_agent.vision import MultimodalQueryHandler

log = get_logger(__name__)

MENTION_PATTERN = re.compile(r"<@!?\d+>")


def build_intents() -> discord.Intents:
    """Gateway intents for guild text, voice state, message content, and DMs."""
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    intents.voice_states = True
    intents.message_content = True
    intents.dm_messages = True
    return intents


def clean_utterance(content: str) -> str:
    """Strip user mentions and surrounding whitespace from message text."""
    return MENTION_PATTERN.sub("", content).strip()


def ignore_reason(
    message: discord.Message, bot_user: discord.abc.User | None, owner_id: str
) -> str | None:
    """Return why a message must be ignored, or None if it should be handled."""
    if message.author.bot:
        return "from_bot"
    if str(message.author.id) != owner_id:
        return "not_owner"
    if message.guild is None:
        return "no_guild"
    if bot_user is None or not any(user.id == bot_user.id for user in message.mentions):
        return "not_mentioned"
    return None


class OperatorBot(discord.Client):
    """discord.py client wiring inbound events to the orchestrator."""

    def __init__(
        self,
        config: AppConfig,
        model_config: ModelConfig,
        *,
        registry: ToolRegistry | None = None,
        llm_client: LLMClient | None = None,
        player: MusicPlayer | None = None,
    ) -> None:
        """Build the bot and every collaborator it owns.

        Args:
            config: Validated application configuration (secrets present).
            model_config: Model catalogue keyed by role.
            registry: Tool registry (the default capability catalogue if None).
            llm_client: Language-model client (built from config if None).
            player: Media engine (built from config if None).
        """
        super().__init__(intents=build_intents())
        self.config = config
        self.owner_id = str(config.owner_id)
        self.registry = registry or get_default_registry()

        if llm_client is None:
            api_key = config.llm_api_key.get_secret_value() if config.llm_api_key else ""
            llm_client = LLMClient(
                api_key=api_key,
                base_url=config.llm_base_url,
                model_config=model_config,
                timeout_seconds=config.llm_timeout_seconds,
            )
        self.llm_client = llm_client
        self.player = player or MusicPlayer(
            leave_on_empty_seconds=config.media_leave_on_empty_seconds
        )

        self.sessions = SessionStore(ttl_seconds=config.session_ttl_seconds)
        action_runner = ActionRunner(
            synthesizer=ActionSynthesizer(self.llm_client),
            engine=ExecutionEngine(timeout_seconds=config.execution_timeout_seconds),
            safety_filter=SafetyFilter(),
        )
        self.orchestrator = Orchestrator(
            client=self,
            sessions=self.sessions,
            router=IntentRouter(self.llm_client, self.registry),
            dispatcher=CapabilityDispatcher(
                registry=self.registry,
                player=self.player,
                action_runner=action_runner,
                queue_display_limit=config.queue_display_limit,
            ),
            describer=MultimodalQueryHandler(
                self.llm_client,
                timeout_seconds=config.attachment_timeout_seconds,
                max_bytes=config.attachment_max_bytes,
            ),
        )

    async def on_ready(self) -> None:
        log.info(
            BOT_READY,
            user=str(self.user),
            user_id=self.user.id if self.user else None,
            owner_id=self.owner_id,
            tools=self.registry.list_tool_names(),
        )

    async def on_message(self, message: discord.Message) -> None:
        reason = ignore_reason(message, self.user, self.owner_id)
        if reason is not None:
            if reason != "from_bot":
                log.debug(MESSAGE_IGNORED, reason=reason, author_id=str(message.author.id))
            return

        utterance = clean_utterance(message.content)
        async with contextlib.AsyncExitStack() as stack:
            # The typing indicator is best-effort; the message is handled regardless
            try:
                await stack.enter_async_context(message.channel.typing())
            except discord.HTTPException as e:
                log.warning(TYPING_INDICATOR_FAILED, error=str(e))
            await self.orchestrator.handle(message, utterance)

    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        self.player.handle_voice_state_update(member)

    async def close(self) -> None:
        """Leave voice channels, drop sessions, then disconnect."""
        self.sessions.clear()
        await self.player.shutdown()
        await super().close()
