"""
Utility functions for TrackBot
"""
import asyncio
import logging
from typing import Any, Awaitable, Optional

import discord

from trackbot.metrics import metric_inc

logger = logging.getLogger("TrackBot.Utils")

# discord.py re-raises aiohttp transport failures as bare OSError, and
# request timeouts surface as asyncio.TimeoutError
SEND_ERRORS = (discord.DiscordException, OSError, asyncio.TimeoutError)

def truncate(text: Optional[str], n: int = 60) -> str:
    """Truncate text to specified length with ellipsis."""
    if not text:
        return ""
    return text if len(text) <= n else text[: n - 1].rstrip() + "…"

async def send_safe(pending: Awaitable[Any]) -> Optional[Any]:
    """Await an outbound send; on failure log it and carry on.

    Replies are best-effort and never retried.
    """
    try:
        return await pending
    except SEND_ERRORS as e:
        metric_inc("reply_failures")
        logger.warning("Error sending message: %s", e)
        return None
