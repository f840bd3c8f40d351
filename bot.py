#!/usr/bin/env python3

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
import time
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

import discord

from trackbot import __version__
from trackbot.client import TrackBot
from trackbot.config import get_token, load_config, load_env_file
from trackbot.exceptions import TrackBotError
from trackbot.messages import set_language

logger = logging.getLogger("TrackBot")


class _JsonFmt(logging.Formatter):
    def format(self, record):
        base = {
            "ts": time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime(record.created)),
            "lvl": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def setup_logging(config: Dict[str, Any]) -> None:
    """Attach console (and, unless structured, rotating file) handlers."""
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            try:
                stream.reconfigure(encoding="utf-8")
            except ValueError:
                logger.debug("Failed to reconfigure stdio encoding", exc_info=True)
    if logger.handlers:
        return
    structured = bool(config.get("structured_logging"))
    trace_on = bool(config.get("trace_logging"))
    if structured:
        fmt_console = _JsonFmt()
    else:
        fmt_console = logging.Formatter("%(asctime)s:%(levelname)s:%(name)s: %(message)s")
    logger.setLevel(logging.DEBUG if trace_on else logging.INFO)
    ch = logging.StreamHandler(); ch.setFormatter(fmt_console); logger.addHandler(ch)
    log_file = config.get("log_file")
    if log_file and not structured:
        fh = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        fh.setFormatter(fmt_console); logger.addHandler(fh)
    # discord.py's own gateway/voice logs go through the same handlers
    discord_logger = logging.getLogger("discord")
    discord_logger.setLevel(logging.INFO)
    for h in logger.handlers:
        discord_logger.addHandler(h)
    logger.info("Logger initialized (structured=%s trace=%s)", structured, trace_on)


async def _run(client: TrackBot, token: str) -> None:
    """Run the gateway until it ends or SIGINT/SIGTERM asks for a graceful stop."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # Windows has no loop signal handlers; Ctrl-C raises KeyboardInterrupt instead
            pass

    async with client:
        runner = asyncio.create_task(client.start(token), name="gateway")
        waiter = asyncio.create_task(stop.wait(), name="shutdown-signal")
        done, _ = await asyncio.wait({runner, waiter}, return_when=asyncio.FIRST_COMPLETED)
        if waiter in done:
            logger.info("Received shutdown signal, shutting down.")
            await client.shutdown()
        else:
            waiter.cancel()
        await runner


def main() -> int:
    load_env_file()
    config = load_config()
    setup_logging(config)
    set_language(config.get("language", "ru"))
    logger.info("TrackBot %s starting", __version__)

    try:
        token = get_token()
        client = TrackBot(config)
    except TrackBotError as e:
        logger.critical("Startup failed: %s", e)
        return 1

    try:
        asyncio.run(_run(client, token))
    except discord.LoginFailure as e:
        logger.critical("Login failed, check DISCORD_TOKEN: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting.")
    except discord.DiscordException as e:
        logger.exception("Client ended: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
