"""Per-guild music queues over discord.py voice connections.

Tracks are resolved with yt-dlp (a URL or a free-text search) in a worker
thread and streamed through FFmpeg. Each guild has at most one queue; a queue
announces each track in its text channel when the track starts, leaves the
voice channel when it runs out of tracks or is stopped, and leaves after the
voice channel has been empty for a configurable cooldown.
"""

import asyncio
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import discord
import yt_dlp

from operator_agent.telemetry import (
    PLAYER_CONNECTION_ERROR,
    PLAYER_ERROR,
    QUEUE_DELETED,
    TRACK_FINISHED,
    TRACK_RESOLVED,
    TRACK_STARTED,
    get_logger,
)

log = get_logger(__name__)

YTDL_OPTIONS: dict[str, Any] = {
    "format": "bestaudio/best",
    "noplaylist": True,
    "quiet": True,
    "no_warnings": True,
    "default_search": "ytsearch",
    "source_address": "0.0.0.0",
}
FFMPEG_BEFORE_OPTIONS = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
FFMPEG_OPTIONS = "-vn"

NOW_PLAYING_TEMPLATE = "▶️ Now playing: **{title}**"
PLAYER_ERROR_REPLY = "A player error occurred! The operation has been cancelled."
CONNECTION_ERROR_REPLY = "Could not connect to the voice channel. Please check my permissions."


class MediaError(Exception):
    """Base exception for media engine failures."""

    pass


class TrackNotFound(MediaError):
    """Raised when a query resolves to no playable track."""

    pass


class VoiceConnectionFailed(MediaError):
    """Raised when the bot cannot join the requested voice channel."""

    pass


def format_duration(seconds: float | int | None) -> str:
    """Format a duration in seconds as m:ss or h:mm:ss ("LIVE" when unknown)."""
    if seconds is None:
        return "LIVE"
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True)
class Track:
    """A resolved, playable track."""

    title: str
    url: str
    stream_url: str
    duration: str
    thumbnail: str | None = None
    requested_by: str | None = None

    @classmethod
    def from_info(cls, info: dict[str, Any], requested_by: str | None = None) -> "Track":
        """Build a Track from a yt-dlp info dict."""
        return cls(
            title=info.get("title") or "Unknown title",
            url=info.get("webpage_url") or info.get("original_url") or info.get("url", ""),
            stream_url=info["url"],
            duration=format_duration(info.get("duration")),
            thumbnail=info.get("thumbnail"),
            requested_by=requested_by,
        )


def _default_source_factory(track: Track) -> discord.AudioSource:
    return discord.FFmpegPCMAudio(
        track.stream_url, before_options=FFMPEG_BEFORE_OPTIONS, options=FFMPEG_OPTIONS
    )


class GuildQueue:
    """Playback state for one guild."""

    def __init__(
        self,
        guild_id: int,
        voice_client: discord.VoiceClient,
        text_channel: discord.abc.Messageable,
    ) -> None:
        self.guild_id = guild_id
        self.voice_client = voice_client
        self.text_channel = text_channel
        self.tracks: deque[Track] = deque()
        self.current: Track | None = None

    def is_playing(self) -> bool:
        """True while a track is loaded, whether audible or paused."""
        return self.current is not None and (
            self.voice_client.is_playing() or self.voice_client.is_paused()
        )

    def is_paused(self) -> bool:
        return self.current is not None and self.voice_client.is_paused()

    def skip(self) -> bool:
        """Stop the current track; the after-callback advances the queue.

        Returns:
            True if a track was playing.
        """
        if not self.is_playing():
            return False
        self.voice_client.stop()
        return True

    def toggle_pause(self) -> bool:
        """Pause if playing, resume if paused.

        Returns:
            True if playback is now paused.
        """
        if self.voice_client.is_paused():
            self.voice_client.resume()
            return False
        self.voice_client.pause()
        return True

    def upcoming(self, limit: int) -> list[Track]:
        """The next tracks to play, at most limit of them."""
        return list(self.tracks)[:limit]


class MusicPlayer:
    """Media engine: resolves queries and manages guild queues."""

    def __init__(
        self,
        *,
        leave_on_empty_seconds: float = 300.0,
        ytdl_options: dict[str, Any] | None = None,
        source_factory: Callable[[Track], discord.AudioSource] | None = None,
    ) -> None:
        """Initialize the player.

        Args:
            leave_on_empty_seconds: Cooldown before leaving an empty voice channel.
            ytdl_options: Overrides for the yt-dlp options.
            source_factory: Builds the audio source for a track (FFmpeg by default).
        """
        self.leave_on_empty_seconds = leave_on_empty_seconds
        self.ytdl_options = {**YTDL_OPTIONS, **(ytdl_options or {})}
        self._source_factory = source_factory or _default_source_factory
        self._queues: dict[int, GuildQueue] = {}
        self._connect_locks: dict[int, asyncio.Lock] = {}
        self._empty_timers: dict[int, asyncio.TimerHandle] = {}
        self._background: set[asyncio.Task[Any]] = set()

    def get_queue(self, guild_id: int) -> GuildQueue | None:
        """Return the guild's queue, or None if nothing is loaded."""
        return self._queues.get(guild_id)

    async def resolve(self, query: str, requested_by: str | None = None) -> Track:
        """Resolve a URL or search query to a playable track.

        Raises:
            TrackNotFound: If nothing playable matches.
        """
        try:
            info = await asyncio.to_thread(self._extract_info, query)
        except yt_dlp.utils.DownloadError as e:
            raise TrackNotFound(f"No track found for {query!r}: {e}") from e
        if not info or not info.get("url"):
            raise TrackNotFound(f"No track found for {query!r}")

        track = Track.from_info(info, requested_by=requested_by)
        log.info(TRACK_RESOLVED, query=query, title=track.title, duration=track.duration)
        return track

    def _extract_info(self, query: str) -> dict[str, Any] | None:
        with yt_dlp.YoutubeDL(self.ytdl_options) as ydl:
            info = ydl.extract_info(query, download=False)
        if info and "entries" in info:
            entries = [entry for entry in info["entries"] if entry]
            return entries[0] if entries else None
        return info

    async def play(
        self,
        voice_channel: discord.VoiceChannel | discord.StageChannel,
        query: str,
        *,
        text_channel: discord.abc.Messageable,
        requested_by: str | None = None,
    ) -> Track:
        """Resolve a query and play it now, or enqueue it behind the current track.

        Args:
            voice_channel: Channel to join (the operator's voice channel).
            query: URL or search text.
            text_channel: Channel for now-playing and error announcements.
            requested_by: Display name of the requester.

        Returns:
            The resolved track.

        Raises:
            TrackNotFound: If the query resolves to nothing.
            VoiceConnectionFailed: If the voice channel cannot be joined.
        """
        track = await self.resolve(query, requested_by=requested_by)
        queue = await self._ensure_queue(voice_channel, text_channel)
        queue.tracks.append(track)
        if queue.current is None:
            await self._play_next(queue)
        return track

    async def delete(self, guild_id: int) -> bool:
        """Stop playback, clear the queue, and leave the voice channel.

        Returns:
            True if the guild had a queue.
        """
        queue = self._queues.pop(guild_id, None)
        self._cancel_empty_timer(guild_id)
        if queue is None:
            return False

        queue.tracks.clear()
        queue.current = None
        if queue.voice_client.is_playing() or queue.voice_client.is_paused():
            queue.voice_client.stop()
        try:
            await queue.voice_client.disconnect(force=True)
        except discord.DiscordException as e:
            log.warning("voice_disconnect_failed", guild_id=guild_id, error=str(e))
        log.info(QUEUE_DELETED, guild_id=guild_id)
        return True

    async def shutdown(self) -> None:
        """Leave every voice channel."""
        for guild_id in list(self._queues):
            await self.delete(guild_id)

    def handle_voice_state_update(self, member: discord.Member) -> None:
        """Arm or cancel the leave-on-empty timer for the member's guild."""
        queue = self._queues.get(member.guild.id)
        if queue is None or queue.voice_client.channel is None:
            return

        listeners = [m for m in queue.voice_client.channel.members if not m.bot]
        if listeners:
            self._cancel_empty_timer(queue.guild_id)
        elif queue.guild_id not in self._empty_timers:
            loop = asyncio.get_running_loop()
            self._empty_timers[queue.guild_id] = loop.call_later(
                self.leave_on_empty_seconds, self._leave_if_empty, queue.guild_id
            )

    def _leave_if_empty(self, guild_id: int) -> None:
        self._empty_timers.pop(guild_id, None)
        self._spawn(self.delete(guild_id))

    def _cancel_empty_timer(self, guild_id: int) -> None:
        timer = self._empty_timers.pop(guild_id, None)
        if timer is not None:
            timer.cancel()

    def _spawn(self, coro: Any) -> None:
        task = asyncio.ensure_future(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _ensure_queue(
        self,
        voice_channel: discord.VoiceChannel | discord.StageChannel,
        text_channel: discord.abc.Messageable,
    ) -> GuildQueue:
        guild_id = voice_channel.guild.id
        # Concurrent requests for the same guild share the first connection
        lock = self._connect_locks.setdefault(guild_id, asyncio.Lock())
        async with lock:
            return await self._connect_queue(guild_id, voice_channel, text_channel)

    async def _connect_queue(
        self,
        guild_id: int,
        voice_channel: discord.VoiceChannel | discord.StageChannel,
        text_channel: discord.abc.Messageable,
    ) -> GuildQueue:
        queue = self._queues.get(guild_id)
        if queue is not None and queue.voice_client.is_connected():
            queue.text_channel = text_channel
            if queue.voice_client.channel != voice_channel:
                await queue.voice_client.move_to(voice_channel)
            return queue

        try:
            voice_client = await voice_channel.connect(self_deaf=True)
        except (discord.DiscordException, asyncio.TimeoutError) as e:
            log.error(
                PLAYER_CONNECTION_ERROR,
                guild_id=guild_id,
                channel_id=voice_channel.id,
                error=str(e),
            )
            await self._notify(text_channel, CONNECTION_ERROR_REPLY)
            raise VoiceConnectionFailed(str(e)) from e

        queue = GuildQueue(guild_id, voice_client, text_channel)
        self._queues[guild_id] = queue
        return queue

    async def _play_next(self, queue: GuildQueue) -> None:
        if not queue.tracks:
            # Leave on end
            queue.current = None
            await self.delete(queue.guild_id)
            return

        track = queue.tracks.popleft()
        queue.current = track
        loop = asyncio.get_running_loop()

        def after(error: Exception | None) -> None:
            # Runs on the voice thread
            asyncio.run_coroutine_threadsafe(self._after_track(queue, track, error), loop)

        try:
            queue.voice_client.play(self._source_factory(track), after=after)
        except discord.DiscordException as e:
            log.error(PLAYER_ERROR, guild_id=queue.guild_id, title=track.title, error=str(e))
            await self._notify(queue.text_channel, PLAYER_ERROR_REPLY)
            await self.delete(queue.guild_id)
            return

        log.info(TRACK_STARTED, guild_id=queue.guild_id, title=track.title)
        await self._notify(queue.text_channel, NOW_PLAYING_TEMPLATE.format(title=track.title))

    async def _after_track(self, queue: GuildQueue, track: Track, error: Exception | None) -> None:
        if self._queues.get(queue.guild_id) is not queue or queue.current is not track:
            # Queue was stopped or replaced
            return
        if error is not None:
            log.error(PLAYER_ERROR, guild_id=queue.guild_id, title=track.title, error=str(error))
            await self._notify(queue.text_channel, PLAYER_ERROR_REPLY)
        else:
            log.info(TRACK_FINISHED, guild_id=queue.guild_id, title=track.title)
        await self._play_next(queue)

    @staticmethod
    async def _notify(channel: discord.abc.Messageable, text: str) -> None:
        try:
            await channel.send(text)
        except discord.HTTPException as e:
            log.warning("media_notification_failed", error=str(e))
