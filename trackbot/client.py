"""
Discord client wiring gateway events to the message router.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

import discord

from trackbot.audio_processor import find_ffmpeg
from trackbot.catalog import TrackCatalog
from trackbot.metrics import metrics_snapshot
from trackbot.router import MessageRouter, Triggers
from trackbot.voice_manager import VoiceSessions

logger = logging.getLogger("TrackBot")


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.message_content = True
    intents.voice_states = True
    return intents


class TrackBot(discord.Client):
    """Client owning the router, the track catalog and the voice sessions.

    Every message event runs in its own task (discord.py schedules one per
    event); those tasks are tracked so shutdown can let them finish.
    """

    def __init__(self, config: Dict[str, Any], catalog: Optional[TrackCatalog] = None) -> None:
        super().__init__(intents=build_intents())
        self.config = config
        self.catalog = catalog if catalog is not None else TrackCatalog.from_config(config)
        self.sessions = VoiceSessions(self, volume=float(config.get("volume", 1.0)),
                                      ffmpeg_options=config.get("ffmpeg_options", "-vn"))
        self.router = MessageRouter(self, self.catalog, self.sessions,
                                    triggers=Triggers.from_config(config),
                                    log_channel_id=int(config["log_channel_id"]))
        self._inflight: Set[asyncio.Task] = set()
        self._closing = False

    async def on_ready(self):
        logger.info("%s is connected! (ID: %s)", self.user.name, self.user.id)
        ffmpeg_path = find_ffmpeg()
        if not ffmpeg_path:
            logger.error("CRITICAL: FFmpeg not found in PATH! Audio playback will fail.")
        else:
            logger.info("FFmpeg found at: %s", ffmpeg_path)

    async def on_message(self, message: discord.Message):
        if self._closing:
            return
        task = asyncio.current_task()
        self._inflight.add(task)
        try:
            await self.router.handle(message)
        finally:
            self._inflight.discard(task)

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        logger.exception("Unhandled error in %s", event_method)

    async def shutdown(self) -> None:
        """Stop taking messages, drain in-flight handlers, then close.

        Idempotent: later calls return immediately.
        """
        if self._closing:
            return
        self._closing = True
        current = asyncio.current_task()
        pending = [t for t in self._inflight if t is not current and not t.done()]
        if pending:
            grace = float(self.config.get("shutdown_grace_seconds", 5))
            logger.info("Waiting up to %.1fs for %s in-flight handler(s)", grace, len(pending))
            _, still_running = await asyncio.wait(pending, timeout=grace)
            if still_running:
                logger.warning("%s handler(s) still running at shutdown", len(still_running))
        await self.sessions.disconnect_all()
        await self.close()
        logger.info("Final metrics: %s", metrics_snapshot())
