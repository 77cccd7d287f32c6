"""Capability dispatch: turn a structured call into its side effects.

A StructuredCall is first parsed into one of the closed CapabilityCall
variants; an unknown tool name or a missing required argument is a
DispatchError and produces no side effect. Each variant then has exactly one
handler. Replies are sent as a side effect; nothing is returned.
"""

from typing import Any, assert_never

import discord

from operator_agent.actions import ActionRunner
from operator_agent.errors import DispatchError, PreconditionFailed
from operator_agent.media import MusicPlayer, TrackNotFound, VoiceConnectionFailed
from operator_agent.orchestrator.types import (
    CapabilityCall,
    ExecuteCommand,
    PlayMusic,
    ShowQueue,
    SkipTrack,
    StopPlayback,
    StructuredCall,
    TogglePause,
)
from operator_agent.telemetry import (
    CAPABILITY_DISPATCHED,
    DISPATCH_ERROR,
    PRECONDITION_FAILED,
    REPLY_FAILED,
    TraceContext,
    get_logger,
)
from operator_agent.tools import Capability, ToolRegistry

log = get_logger(__name__)

NOT_IN_VOICE_REPLY = "You need to be in a voice channel to play music!"
SEARCHING_TEMPLATE = "🔎 Searching for **{query}**..."
TRACK_NOT_FOUND_REPLY = "Something went wrong! I couldn't find a track for that query."
NOTHING_TO_SKIP_REPLY = "There is no music playing to skip."
SKIPPED_REPLY = "⏭️ Skipped the current song."
SKIP_FAILED_REPLY = "Something went wrong while skipping."
NOTHING_TO_STOP_REPLY = "There is nothing to stop."
STOPPED_REPLY = "⏹️ Stopped the music and cleared the queue."
NOTHING_PLAYING_REPLY = "There is no music playing right now."
NOTHING_TO_PAUSE_REPLY = "There is no music playing to pause or resume."
PAUSED_REPLY = "⏸️ Paused the music."
RESUMED_REPLY = "▶️ Resumed the music."
DISPATCH_ERROR_TEMPLATE = "I couldn't carry that out: {error}"

QUEUE_EMBED_COLOUR = 0x0099FF
QUEUE_EMBED_TITLE = "Server Queue"
EMPTY_QUEUE_TEXT = "No more songs in the queue."


def parse_call(call: StructuredCall, registry: ToolRegistry) -> CapabilityCall:
    """Parse a structured call into its capability variant.

    Raises:
        DispatchError: If the tool is not registered or a required argument
            is missing or not a non-empty string.
    """
    tool = registry.get_tool(call.name)
    if tool is None:
        raise DispatchError(f"Unknown tool '{call.name}'", tool_name=call.name)

    for name in sorted(tool.required_parameters):
        value = call.arguments.get(name)
        if not isinstance(value, str) or not value.strip():
            raise DispatchError(
                f"Tool '{call.name}' requires a non-empty '{name}' argument",
                tool_name=call.name,
            )

    try:
        capability = Capability(call.name)
    except ValueError as e:
        # Registered, but not one this dispatcher knows how to run
        raise DispatchError(f"No handler for tool '{call.name}'", tool_name=call.name) from e

    args = call.arguments
    match capability:
        case Capability.PLAY_MUSIC:
            return PlayMusic(query=args["query"].strip())
        case Capability.SKIP_TRACK:
            return SkipTrack()
        case Capability.STOP_PLAYBACK:
            return StopPlayback()
        case Capability.SHOW_QUEUE:
            return ShowQueue()
        case Capability.TOGGLE_PAUSE:
            return TogglePause()
        case Capability.EXECUTE_COMMAND:
            return ExecuteCommand(description=args["commandDescription"].strip())
        case _:
            assert_never(capability)


class CapabilityDispatcher:
    """Maps capability variants to media and action handlers."""

    def __init__(
        self,
        registry: ToolRegistry,
        player: MusicPlayer,
        action_runner: ActionRunner,
        queue_display_limit: int = 10,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Registry used to validate incoming calls.
            player: Media engine for the music capabilities.
            action_runner: Synthesize-and-execute pipeline for admin actions.
            queue_display_limit: Upcoming tracks listed by the queue display.
        """
        self.registry = registry
        self.player = player
        self.action_runner = action_runner
        self.queue_display_limit = queue_display_limit

    async def dispatch(
        self,
        call: StructuredCall,
        message: discord.Message,
        *,
        client: discord.Client,
        trace_ctx: TraceContext | None = None,
    ) -> None:
        """Carry out a structured call, replying to the operator as a side effect.

        DispatchError and PreconditionFailed are reported here with one reply.
        """
        trace_id = trace_ctx.trace_id if trace_ctx else None
        try:
            capability = parse_call(call, self.registry)
        except DispatchError as e:
            log.warning(DISPATCH_ERROR, tool_name=e.tool_name, error=str(e), trace_id=trace_id)
            await self._reply(message, DISPATCH_ERROR_TEMPLATE.format(error=e))
            return

        log.info(
            CAPABILITY_DISPATCHED,
            tool_name=call.name,
            capability=type(capability).__name__,
            trace_id=trace_id,
        )

        try:
            match capability:
                case PlayMusic(query=query):
                    await self._play(message, query)
                case SkipTrack():
                    await self._skip(message)
                case StopPlayback():
                    await self._stop(message)
                case ShowQueue():
                    await self._show_queue(message)
                case TogglePause():
                    await self._toggle_pause(message)
                case ExecuteCommand(description=description):
                    await self.action_runner.run(
                        description, client=client, message=message, trace_ctx=trace_ctx
                    )
                case _:
                    assert_never(capability)
        except PreconditionFailed as e:
            log.info(
                PRECONDITION_FAILED,
                capability=type(capability).__name__,
                reason=str(e),
                trace_id=trace_id,
            )
            await self._reply(message, str(e))

    async def _play(self, message: discord.Message, query: str) -> None:
        voice = getattr(message.author, "voice", None)
        voice_channel = voice.channel if voice is not None else None
        if voice_channel is None:
            raise PreconditionFailed(NOT_IN_VOICE_REPLY)

        await self._reply(message, SEARCHING_TEMPLATE.format(query=query))
        try:
            await self.player.play(
                voice_channel,
                query,
                text_channel=message.channel,
                requested_by=message.author.display_name,
            )
        except TrackNotFound as e:
            log.info("track_not_found", query=query, error=str(e))
            await self._send(message.channel, TRACK_NOT_FOUND_REPLY)
        except VoiceConnectionFailed:
            # Already announced in the text channel by the player
            pass

    async def _skip(self, message: discord.Message) -> None:
        queue = self.player.get_queue(self._guild_id(message))
        if queue is None or not queue.is_playing():
            raise PreconditionFailed(NOTHING_TO_SKIP_REPLY)
        await self._reply(message, SKIPPED_REPLY if queue.skip() else SKIP_FAILED_REPLY)

    async def _stop(self, message: discord.Message) -> None:
        if not await self.player.delete(self._guild_id(message)):
            raise PreconditionFailed(NOTHING_TO_STOP_REPLY)
        await self._reply(message, STOPPED_REPLY)

    async def _show_queue(self, message: discord.Message) -> None:
        queue = self.player.get_queue(self._guild_id(message))
        if queue is None or not queue.is_playing() or queue.current is None:
            raise PreconditionFailed(NOTHING_PLAYING_REPLY)

        current = queue.current
        lines = [
            f"{i}. **{track.title}** - `{track.duration}`"
            for i, track in enumerate(queue.upcoming(self.queue_display_limit), start=1)
        ]
        embed = discord.Embed(
            title=QUEUE_EMBED_TITLE,
            description="\n".join(lines) if lines else EMPTY_QUEUE_TEXT,
            colour=QUEUE_EMBED_COLOUR,
            timestamp=discord.utils.utcnow(),
        )
        embed.add_field(
            name="Now Playing", value=f"▶️ **{current.title}** (`{current.duration}`)"
        )
        if current.thumbnail:
            embed.set_thumbnail(url=current.thumbnail)
        await self._reply(message, embed=embed)

    async def _toggle_pause(self, message: discord.Message) -> None:
        queue = self.player.get_queue(self._guild_id(message))
        if queue is None or not queue.is_playing():
            raise PreconditionFailed(NOTHING_TO_PAUSE_REPLY)
        await self._reply(message, PAUSED_REPLY if queue.toggle_pause() else RESUMED_REPLY)

    @staticmethod
    def _guild_id(message: discord.Message) -> int:
        if message.guild is None:
            raise PreconditionFailed(NOTHING_PLAYING_REPLY)
        return message.guild.id

    @staticmethod
    async def _reply(message: discord.Message, content: str | None = None, **kwargs: Any) -> None:
        try:
            await message.reply(content, **kwargs)
        except discord.HTTPException as e:
            log.warning(REPLY_FAILED, error=str(e))

    @staticmethod
    async def _send(channel: Any, content: str) -> None:
        try:
            await channel.send(content)
        except discord.HTTPException as e:
            log.warning(REPLY_FAILED, error=str(e))
