import discord

from trackbot.messages import msg
from trackbot.utils import send_safe


async def handle_ping(runtime, message: discord.Message) -> None:
    # always answered in the status channel, wherever the ping came from
    await send_safe(runtime.status_channel().send(msg("PONG")))
