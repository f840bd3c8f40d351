"""
Audio processing and FFmpeg configuration module.
Handles FFmpeg discovery and audio source creation for local files.
"""

import logging
import shutil
from typing import Optional

import discord

from trackbot.exceptions import AudioSourceError

logger = logging.getLogger("TrackBot.AudioProcessor")

# local files never need reconnect flags; keep stdin detached
BEFORE_OPTIONS = "-nostdin"


def find_ffmpeg() -> Optional[str]:
    """Return the FFmpeg executable path, or None when it is not on PATH."""
    return shutil.which("ffmpeg") or shutil.which("ffmpeg.exe")


def create_audio_source(path: str, volume: float = 1.0, ffmpeg_options: str = "-vn") -> discord.AudioSource:
    """Create a Discord audio source streaming ``path`` through FFmpeg.

    At unity volume the file is handed to FFmpegOpusAudio; any other volume
    needs PCM frames so it can be wrapped in a PCMVolumeTransformer.
    """
    kwargs = {"before_options": BEFORE_OPTIONS, "options": ffmpeg_options}
    try:
        if volume == 1.0:
            return discord.FFmpegOpusAudio(path, **kwargs)
        return discord.PCMVolumeTransformer(discord.FFmpegPCMAudio(path, **kwargs), volume=volume)
    except discord.ClientException as e:
        # raised when the ffmpeg process cannot be spawned
        raise AudioSourceError(path, str(e)) from e
