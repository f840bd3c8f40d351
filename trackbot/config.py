"""
Configuration management for TrackBot
"""
import os
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from trackbot.exceptions import ConfigurationError

logger = logging.getLogger("TrackBot.Config")

ENV_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")

def _parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    """``KEY=value`` / ``export KEY="value"`` -> (key, value); None for anything else."""
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if key.startswith("export "):
        key = key[len("export "):].strip()
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return (key, value) if key else None

def load_env_file(env_path: Optional[str] = None) -> List[str]:
    """Copy ``.env`` entries into os.environ without overriding existing ones.

    Returns the keys that were actually set. The DISCORD_TOKEN read by
    get_token() normally arrives this way.
    """
    env_path = env_path or ENV_PATH
    applied: List[str] = []
    if not os.path.exists(env_path):
        return applied
    try:
        with open(env_path, "r", encoding="utf-8") as f:
            for line in f:
                parsed = _parse_env_line(line)
                if parsed is None:
                    continue
                key, value = parsed
                if not os.getenv(key):
                    os.environ[key] = value
                    applied.append(key)
    except OSError as e:
        logger.warning("Could not load %s: %s", env_path, e)
    logger.debug("Loaded %s key(s) from %s", len(applied), env_path)
    return applied

CONFIG_PATH = os.getenv("TRACKBOT_CONFIG", "config.json")
DEFAULT_CONFIG = {
    # Token should NEVER be in config file - use environment variables only
    "log_channel_id": 1385405814440988694,
    "language": "ru",
    "triggers": {
        "ping": "!ping",
        "summon": "бот я призываю тебя",
        "dismiss": "бот ты свободен",
        "play": "бот вруби",
    },
    # relative paths resolve against assets_dir
    "assets_dir": "assets",
    "tracks": {
        "Летова": "letov1.mp3",
        "генгаозо": "G e n g a o z o -Noize of Nocent-.mp3",
        "че-нить пушистое": "fluff.mp3",
    },
    "volume": 1.0,
    "ffmpeg_options": "-vn",
    "shutdown_grace_seconds": 5,
    "trace_logging": False,
    "structured_logging": False,
    "log_file": "TrackBot.log",
}

def load_config(path: str = None) -> Dict[str, Any]:
    """Load configuration from config.json, merged with defaults."""
    path = path or CONFIG_PATH
    config = json.loads(json.dumps(DEFAULT_CONFIG))
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                user_conf = json.load(f)
            if not isinstance(user_conf, dict):
                raise ValueError("top-level value must be an object")
            # Remove token from user config if it exists (security measure)
            if "token" in user_conf:
                logger.warning("Token found in %s - this is insecure. Please use DISCORD_TOKEN environment variable instead.", path)
                del user_conf["token"]
            config.update(user_conf)
        except (OSError, ValueError) as e:
            logger.warning("Could not load %s: %s", path, e)
    assets_override = os.getenv("TRACKBOT_ASSETS_DIR")
    if assets_override:
        config["assets_dir"] = assets_override
    return validate_config(config)

def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and sanitize configuration values (non-destructive fallback).

    Invalid values are replaced by their defaults with a warning; unknown keys
    are kept untouched.
    """
    def fallback(key):
        logger.warning("Config '%s' invalid (%r); fallback to %r", key, cfg.get(key), DEFAULT_CONFIG[key])
        cfg[key] = json.loads(json.dumps(DEFAULT_CONFIG[key]))

    try:
        cfg["log_channel_id"] = int(cfg.get("log_channel_id"))
    except (TypeError, ValueError):
        fallback("log_channel_id")
    if str(cfg.get("language", "")).lower()[:2] not in ("ru", "en"):
        fallback("language")

    triggers = cfg.get("triggers")
    if not isinstance(triggers, dict):
        fallback("triggers")
    else:
        merged = dict(DEFAULT_CONFIG["triggers"])
        for name, phrase in triggers.items():
            if name not in merged:
                logger.warning("Unknown trigger '%s' ignored", name)
                continue
            if not isinstance(phrase, str) or not phrase.strip():
                logger.warning("Trigger '%s' must be a non-empty string; keeping %r", name, merged[name])
                continue
            # case folding happens in router.Triggers.from_config
            merged[name] = phrase.strip()
        cfg["triggers"] = merged

    tracks = cfg.get("tracks")
    if not isinstance(tracks, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in tracks.items()):
        fallback("tracks")
    if not isinstance(cfg.get("assets_dir"), str):
        fallback("assets_dir")

    try:
        volume = float(cfg.get("volume"))
        if not 0.0 < volume <= 2.0:
            raise ValueError(volume)
        cfg["volume"] = volume
    except (TypeError, ValueError):
        fallback("volume")
    if not isinstance(cfg.get("ffmpeg_options"), str):
        fallback("ffmpeg_options")
    try:
        if float(cfg.get("shutdown_grace_seconds")) < 0:
            raise ValueError
    except (TypeError, ValueError):
        fallback("shutdown_grace_seconds")
    return cfg

def get_token() -> str:
    """Get Discord token from environment variables only."""
    token = os.getenv("DISCORD_TOKEN")
    if not token:
        raise ConfigurationError("DISCORD_TOKEN environment variable is required!")
    return token
