"""
Voice session management module.
Wraps discord.py voice clients with per-guild serialization of join/leave/play.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Optional

import discord

from trackbot.audio_processor import create_audio_source
from trackbot.exceptions import AudioSourceError, VoiceConnectError
from trackbot.metrics import metric_inc
from trackbot.utils import truncate

logger = logging.getLogger("TrackBot.VoiceManager")


class _TrackEnd:
    """``after`` callback for one track; remembers if it was cut short on purpose."""

    def __init__(self, notifier: "TrackErrorNotifier", title: str) -> None:
        self.notifier = notifier
        self.title = title
        self.preempted = False

    def __call__(self, error: Optional[Exception] = None) -> None:
        self.notifier.track_ended(self.title, error, self.preempted)


class TrackErrorNotifier:
    """Playback callbacks registered for a guild's voice session.

    discord.py invokes a track's ``after`` from the audio player thread once
    it ends, passing the exception that stopped it (or None). Errors are only
    logged. A track stopped by a new play request or a disconnect is counted
    as preempted, not finished.
    """

    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        self._current: Optional[_TrackEnd] = None

    def for_track(self, title: str) -> _TrackEnd:
        self._current = _TrackEnd(self, title)
        return self._current

    def preempt(self) -> None:
        """Flag the current track before the voice client stops it."""
        if self._current is not None:
            self._current.preempted = True

    def track_ended(self, title: str, error: Optional[Exception], preempted: bool) -> None:
        if error is not None:
            metric_inc("playback_error")
            logger.error("Track %s encountered an error (guild=%s): %s", truncate(title, 80), self.guild_id, error)
        elif preempted:
            metric_inc("playback_preempted")
            logger.info("Stopped playback guild=%s title=%s (interrupted)", self.guild_id, truncate(title, 80))
        else:
            metric_inc("playback_finish")
            logger.info("Finish playback guild=%s title=%s", self.guild_id, truncate(title, 80))


class VoiceSessions:
    """Per-guild voice session access through the client's voice clients.

    Every check-then-act sequence runs under the guild's lock so concurrent
    join/leave/play requests for one server cannot interleave.
    """

    def __init__(self, client: discord.Client, volume: float = 1.0, ffmpeg_options: str = "-vn") -> None:
        self.client = client
        self.volume = volume
        self.ffmpeg_options = ffmpeg_options
        self._locks: Dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._notifiers: Dict[int, TrackErrorNotifier] = {}

    def lock_for(self, guild_id: int) -> asyncio.Lock:
        return self._locks[guild_id]

    def get(self, guild: discord.Guild) -> Optional[discord.VoiceClient]:
        """Voice client for ``guild`` or None when there is no session."""
        if guild is None:
            return None
        return discord.utils.get(self.client.voice_clients, guild=guild)

    def notifier_for(self, guild_id: int) -> Optional[TrackErrorNotifier]:
        return self._notifiers.get(guild_id)

    async def join(self, guild: discord.Guild, channel: discord.VoiceChannel) -> discord.VoiceClient:
        """Connect to ``channel``, moving an existing session if needed.

        Raises VoiceConnectError when the platform refuses; nothing is retried.
        """
        async with self.lock_for(guild.id):
            vc = self.get(guild)
            try:
                if vc is not None:
                    if vc.channel is None or vc.channel.id != channel.id:
                        await vc.move_to(channel)
                else:
                    vc = await channel.connect()
            except (discord.DiscordException, OSError, asyncio.TimeoutError, RuntimeError) as e:
                metric_inc("voice_connect_failures")
                logger.warning("Voice connect failed guild=%s channel=%s: %s", guild.id, channel.id, e)
                raise VoiceConnectError(str(e) or type(e).__name__, guild.id, channel.id) from e
            # a move keeps the notifier tracking the current track
            self._notifiers.setdefault(guild.id, TrackErrorNotifier(guild.id))
            metric_inc("voice_connect_success")
            logger.info("Connected to voice channel: %s (guild: %s)", channel.name, guild.id)
            return vc

    async def leave(self, guild: discord.Guild) -> bool:
        """Disconnect the guild's session. Returns False when there is none.

        Platform errors from the disconnect propagate to the caller.
        """
        async with self.lock_for(guild.id):
            vc = self.get(guild)
            if vc is None:
                return False
            notifier = self._notifiers.pop(guild.id, None)
            if notifier is not None:
                notifier.preempt()
            await vc.disconnect()
            metric_inc("voice_disconnects")
            logger.info("Left voice channel (guild: %s)", guild.id)
            return True

    async def play(self, guild: discord.Guild, path: str, title: Optional[str] = None) -> bool:
        """Stop whatever is playing and stream ``path``.

        Returns False when the guild has no session. Raises AudioSourceError
        when FFmpeg cannot be started or the voice client rejects the source.
        """
        title = title or path
        async with self.lock_for(guild.id):
            vc = self.get(guild)
            if vc is None:
                return False
            source = create_audio_source(path, self.volume, self.ffmpeg_options)
            notifier = self._notifiers.setdefault(guild.id, TrackErrorNotifier(guild.id))
            notifier.preempt()
            vc.stop()
            try:
                vc.play(source, after=notifier.for_track(title))
            except discord.ClientException as e:
                source.cleanup()
                raise AudioSourceError(path, str(e)) from e
            metric_inc("playback_start")
            logger.info("Start playback guild=%s title=%s path=%s", guild.id, truncate(title, 80), path)
            return True

    async def disconnect_all(self) -> None:
        """Best-effort disconnect of every voice client (shutdown path)."""
        for notifier in self._notifiers.values():
            notifier.preempt()
        for vc in list(self.client.voice_clients):
            try:
                await vc.disconnect(force=True)
            except (discord.DiscordException, asyncio.TimeoutError) as e:
                logger.debug("Disconnect during shutdown failed: %s", e)
        self._notifiers.clear()
