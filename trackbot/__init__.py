"""TrackBot: a Discord bot that plays local tracks on trigger phrases."""

__version__ = "1.2.0"
