import asyncio
import logging

import discord

from trackbot.exceptions import VoiceConnectError
from trackbot.messages import msg
from trackbot.utils import send_safe

logger = logging.getLogger("TrackBot.Commands.Voice")


async def handle_summon(runtime, message: discord.Message) -> None:
    """Join the voice channel the author is sitting in."""
    voice = getattr(message.author, "voice", None)
    channel = getattr(voice, "channel", None)
    if channel is None:
        await send_safe(message.reply(msg("NOT_IN_VOICE")))
        return
    try:
        await runtime.sessions.join(message.guild, channel)
    except VoiceConnectError as e:
        logger.warning("Summon failed guild=%s: %s", message.guild.id, e)
        await send_safe(message.reply(msg("VOICE_CONNECT_FAIL")))
        return
    await send_safe(runtime.status_channel().send(msg("VOICE_CONNECTED")))


async def handle_dismiss(runtime, message: discord.Message) -> None:
    """Leave the guild's voice channel, if the bot is in one."""
    try:
        left = await runtime.sessions.leave(message.guild)
    except (discord.DiscordException, OSError, asyncio.TimeoutError) as e:
        logger.warning("Disconnect failed guild=%s: %s", message.guild.id, e)
        await send_safe(message.channel.send(msg("VOICE_LEAVE_FAIL", error=e)))
        left = True
    if left:
        await send_safe(message.channel.send(msg("VOICE_LEFT")))
    else:
        await send_safe(message.reply(msg("NOT_IN_VOICE")))
