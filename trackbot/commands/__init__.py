"""Command handlers for TrackBot.

Each handler receives the router (``runtime``) that owns the client, the
track catalog and the voice sessions, plus the triggering message.
"""

__all__ = [
    "playback",
    "status",
    "voice",
]
