"""
Exception hierarchy for TrackBot
"""
from typing import Optional


class TrackBotError(Exception):
    """Base class; main() treats any of these during startup as fatal."""


class ConfigurationError(TrackBotError):
    """Missing or unusable configuration, e.g. no DISCORD_TOKEN."""


class VoiceConnectError(TrackBotError):
    """The platform refused to connect or move the bot into a voice channel."""

    def __init__(self, reason: str, guild_id: Optional[int] = None, channel_id: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.guild_id = guild_id
        self.channel_id = channel_id


class AudioSourceError(TrackBotError):
    """A track could not be turned into a playing audio source."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
