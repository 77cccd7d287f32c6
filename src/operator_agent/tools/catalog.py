"""The agent's capability catalogue.

Capability is the closed set of tool names the model may call. Adding a
capability means adding a member here, a definition below, a variant in
orchestrator.types, and a case in the dispatcher.
"""

from enum import Enum

from operator_agent.tools.registry import ToolRegistry
from operator_agent.tools.types import ToolDefinition, ToolParameter


class Capability(str, Enum):
    """Tool names exposed to the language model."""

    EXECUTE_COMMAND = "executeDiscordCommand"
    PLAY_MUSIC = "playMusic"
    SKIP_TRACK = "skipTrack"
    STOP_PLAYBACK = "stopPlayback"
    SHOW_QUEUE = "showQueue"
    TOGGLE_PAUSE = "togglePauseResume"


execute_command_tool = ToolDefinition(
    name=Capability.EXECUTE_COMMAND.value,
    description=(
        "For any administrative/moderation action on the server "
        "(kick, ban, create channel, manage roles, etc)."
    ),
    parameters=(
        ToolParameter(
            name="commandDescription",
            type="string",
            description="A precise natural-language description of the action to perform.",
        ),
    ),
)

play_music_tool = ToolDefinition(
    name=Capability.PLAY_MUSIC.value,
    description="Plays a song in the user's voice channel from a URL or search query.",
    parameters=(
        ToolParameter(
            name="query",
            type="string",
            description="The song name, YouTube/SoundCloud URL, or search query.",
        ),
    ),
)

skip_track_tool = ToolDefinition(
    name=Capability.SKIP_TRACK.value,
    description="Skips the currently playing song.",
)

stop_playback_tool = ToolDefinition(
    name=Capability.STOP_PLAYBACK.value,
    description="Stops the music, clears the queue, and leaves the voice channel.",
)

show_queue_tool = ToolDefinition(
    name=Capability.SHOW_QUEUE.value,
    description="Shows the current song and the list of upcoming tracks.",
)

toggle_pause_tool = ToolDefinition(
    name=Capability.TOGGLE_PAUSE.value,
    description="Pauses the music if it is playing, or resumes it if it is paused.",
)

CAPABILITY_TOOLS: tuple[ToolDefinition, ...] = (
    execute_command_tool,
    play_music_tool,
    skip_track_tool,
    stop_playback_tool,
    show_queue_tool,
    toggle_pause_tool,
)

_default_registry: ToolRegistry | None = None


def get_default_registry() -> ToolRegistry:
    """Get the process-wide registry holding every capability tool."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ToolRegistry(CAPABILITY_TOOLS)
    return _default_registry
