"""
Message router: maps inbound message text to one of the bot's actions.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import discord

from trackbot.catalog import TrackCatalog
from trackbot.commands import playback as cmd_playback
from trackbot.commands import status as cmd_status
from trackbot.commands import voice as cmd_voice
from trackbot.metrics import metric_inc
from trackbot.utils import truncate
from trackbot.voice_manager import VoiceSessions

logger = logging.getLogger("TrackBot.Router")


class Action(enum.Enum):
    PING = "ping"
    SUMMON = "summon"
    DISMISS = "dismiss"
    PLAY = "play"


@dataclass(frozen=True)
class Triggers:
    """Trigger phrases, stored lowercased."""

    ping: str = "!ping"
    summon: str = "бот я призываю тебя"
    dismiss: str = "бот ты свободен"
    play: str = "бот вруби"

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Triggers":
        phrases = cfg.get("triggers") or {}
        defaults = cls()
        return cls(**{
            name: lowered(str(phrases.get(name) or getattr(defaults, name)).strip())[0]
            for name in ("ping", "summon", "dismiss", "play")
        })


def lowered(content: str) -> Tuple[str, List[int]]:
    """Lowercase ``content`` one character at a time.

    Returns the text and, for each of its positions (plus one past the end),
    the index of the ``content`` character it came from. Some characters
    ("İ") lowercase to more than one code point, so positions can drift.
    """
    chars: List[str] = []
    origin: List[int] = []
    for i, ch in enumerate(content):
        low = ch.lower()
        chars.append(low)
        origin.extend([i] * len(low))
    origin.append(len(content))
    return "".join(chars), origin


def extract_track_name(content: str, phrase: str) -> str:
    """Cut every occurrence of the play phrase (any case) out of ``content``."""
    text, origin = lowered(content)
    pieces: List[str] = []
    start = 0
    pos = text.find(phrase)
    while pos != -1 and phrase:
        end = pos + len(phrase)
        pieces.append(content[start:origin[pos]])
        start = origin[end - 1] + 1
        pos = text.find(phrase, end)
    pieces.append(content[start:])
    return "".join(pieces).strip()


def parse(content: Optional[str], triggers: Triggers) -> Optional[Tuple[Action, Optional[str]]]:
    """Match message text against the triggers in priority order.

    Returns ``(action, track_name)``; track_name is only set for PLAY.
    None means the message is not addressed to the bot.
    """
    text = lowered(content or "")[0]
    if text == triggers.ping:
        return Action.PING, None
    if text == triggers.summon:
        return Action.SUMMON, None
    if text == triggers.dismiss:
        return Action.DISMISS, None
    if triggers.play in text:
        return Action.PLAY, extract_track_name(content, triggers.play)
    return None


class MessageRouter:
    """Dispatches each message to at most one command handler.

    Holds no mutable state of its own; the catalog and voice sessions are
    injected at startup.
    """

    def __init__(self, client: discord.Client, catalog: TrackCatalog, sessions: VoiceSessions,
                 triggers: Optional[Triggers] = None, log_channel_id: int = 0) -> None:
        self.client = client
        self.catalog = catalog
        self.sessions = sessions
        self.triggers = triggers or Triggers()
        self.log_channel_id = log_channel_id

    def status_channel(self) -> discord.PartialMessageable:
        """The fixed channel used for pings and voice status notices."""
        return self.client.get_partial_messageable(self.log_channel_id)

    async def handle(self, message: discord.Message) -> Optional[Action]:
        """Run the action matching ``message``; returns it, or None if ignored."""
        me = self.client.user
        if me is not None and message.author.id == me.id:
            return None
        metric_inc("messages_seen")
        parsed = parse(message.content, self.triggers)
        if parsed is None:
            return None
        action, track_name = parsed
        if action is not Action.PING and message.guild is None:
            logger.debug("Ignoring %s outside a guild (author=%s)", action.value, message.author.id)
            return None

        metric_inc(f"commands_{action.value}")
        logger.info("Command %s guild=%s channel=%s author=%s text=%s", action.value,
                    getattr(message.guild, "id", None), message.channel.id, message.author.id,
                    truncate(message.content, 80))
        if action is Action.PING:
            await cmd_status.handle_ping(self, message)
        elif action is Action.SUMMON:
            await cmd_voice.handle_summon(self, message)
        elif action is Action.DISMISS:
            await cmd_voice.handle_dismiss(self, message)
        else:
            await cmd_playback.handle_play(self, message, track_name)
        return action
