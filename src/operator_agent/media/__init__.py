"""Media engine: per-guild music queues backing the music capabilities."""

from operator_agent.media.player import (
    CONNECTION_ERROR_REPLY,
    NOW_PLAYING_TEMPLATE,
    PLAYER_ERROR_REPLY,
    GuildQueue,
    MediaError,
    MusicPlayer,
    Track,
    TrackNotFound,
    VoiceConnectionFailed,
    format_duration,
)

__all__ = [
    "MusicPlayer",
    "GuildQueue",
    "Track",
    "MediaError",
    "TrackNotFound",
    "VoiceConnectionFailed",
    "format_duration",
    "NOW_PLAYING_TEMPLATE",
    "PLAYER_ERROR_REPLY",
    "CONNECTION_ERROR_REPLY",
]
