import logging

import discord

from trackbot.exceptions import AudioSourceError
from trackbot.messages import msg
from trackbot.metrics import metric_inc
from trackbot.utils import send_safe

logger = logging.getLogger("TrackBot.Commands.Playback")


async def handle_play(runtime, message: discord.Message, name: str) -> None:
    """Resolve ``name`` in the catalog and stream it in the guild's session.

    The lookup happens first, so an unknown track is reported even when the
    bot is not in a voice channel.
    """
    path = runtime.catalog.lookup(name)
    if path is None:
        metric_inc("track_not_found")
        logger.info("Unknown track requested guild=%s name=%r", message.guild.id, name)
        await send_safe(message.channel.send(msg("TRACK_NOT_FOUND")))
        return
    try:
        started = await runtime.sessions.play(message.guild, path, title=name)
    except AudioSourceError as e:
        logger.error("Could not start %s guild=%s: %s", path, message.guild.id, e)
        await send_safe(message.channel.send(msg("SOURCE_CREATION_ERROR")))
        return
    if started:
        await send_safe(message.channel.send(msg("PLAYING")))
    else:
        await send_safe(message.channel.send(msg("NO_SESSION_TO_PLAY")))
