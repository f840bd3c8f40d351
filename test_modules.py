"""Smoke tests: every module imports and the entrypoint wiring is sane."""
import importlib
import logging

import pytest

MODULES = [
    "bot",
    "trackbot",
    "trackbot.config",
    "trackbot.messages",
    "trackbot.metrics",
    "trackbot.utils",
    "trackbot.catalog",
    "trackbot.audio_processor",
    "trackbot.voice_manager",
    "trackbot.router",
    "trackbot.client",
    "trackbot.commands.playback",
    "trackbot.commands.status",
    "trackbot.commands.voice",
]


@pytest.mark.parametrize("name", MODULES)
def test_module_imports(name):
    assert importlib.import_module(name)


def test_messages_language_switch():
    from trackbot.messages import msg, set_language
    set_language("en")
    assert msg("TRACK_NOT_FOUND") == "I don't know that track"
    assert msg("VOICE_LEAVE_FAIL", error="x") == "Failed: x"
    assert msg("NO_SUCH_KEY") == "NO_SUCH_KEY"
    set_language("ru")
    assert msg("PONG") == "Pong!"


def test_main_fails_fast_without_token(monkeypatch, tmp_path):
    import bot
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    monkeypatch.setattr(bot, "load_env_file", lambda: None)
    monkeypatch.setattr(bot, "setup_logging", lambda config: None)
    assert bot.main() == 1


def test_json_formatter():
    import json
    from bot import _JsonFmt
    record = logging.LogRecord("TrackBot", logging.INFO, __file__, 1, "hello %s", ("мир",), None)
    out = json.loads(_JsonFmt().format(record))
    assert out["msg"] == "hello мир"
    assert out["lvl"] == "INFO"
