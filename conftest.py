"""Stand-ins for the discord.py objects the router and voice sessions touch."""
import asyncio
from types import SimpleNamespace

import discord
import pytest

from trackbot.catalog import TrackCatalog
from trackbot.messages import set_language
from trackbot.metrics import metrics_reset
from trackbot.router import MessageRouter, Triggers
from trackbot.voice_manager import VoiceSessions

LOG_CHANNEL_ID = 4242


class DummyText:
    def __init__(self, id, fail=False):
        self.id = id
        self.sent = []
        self.fail = fail

    async def send(self, content, **kwargs):
        if isinstance(self.fail, BaseException):
            raise self.fail
        if self.fail:
            raise discord.ClientException("send failed")
        self.sent.append(content)


class DummyVoiceClient:
    def __init__(self, client, guild, channel):
        self.client = client
        self.guild = guild
        self.channel = channel
        self.calls = []
        self.after = None
        self.fail_disconnect = False

    def is_connected(self):
        return True

    async def move_to(self, channel):
        self.calls.append(("move", channel.id))
        self.channel = channel

    async def disconnect(self, force=False):
        self.calls.append("disconnect")
        await asyncio.sleep(0)
        if self.fail_disconnect:
            raise discord.ClientException("disconnect failed")
        self.client.voice_clients.remove(self)

    def stop(self):
        self.calls.append("stop")

    def play(self, source, after=None):
        self.calls.append(("play", source))
        self.after = after


class DummyVoiceChannel:
    def __init__(self, client, guild, id, fail=False):
        self.client = client
        self.guild = guild
        self.id = id
        self.name = f"voice-{id}"
        self.fail = fail
        self.connect_calls = 0

    async def connect(self):
        self.connect_calls += 1
        await asyncio.sleep(0)
        if self.fail:
            raise discord.ClientException("Already connected to a voice channel.")
        vc = DummyVoiceClient(self.client, self.guild, self)
        self.client.voice_clients.append(vc)
        return vc


class DummyClient:
    def __init__(self):
        self.user = SimpleNamespace(id=1, name="TrackBot")
        self.voice_clients = []
        self.channels = {}

    def get_partial_messageable(self, id):
        return self.channels.setdefault(id, DummyText(id))


class DummyMessage:
    def __init__(self, content, guild, channel, author, fail_reply=False):
        self.content = content
        self.guild = guild
        self.channel = channel
        self.author = author
        self.replies = []
        self.fail_reply = fail_reply

    async def reply(self, content, **kwargs):
        if self.fail_reply:
            raise discord.ClientException("reply failed")
        self.replies.append(content)


@pytest.fixture(autouse=True)
def _fresh_state():
    set_language("ru")
    metrics_reset()
    yield


@pytest.fixture
def client():
    return DummyClient()


@pytest.fixture
def guild():
    return SimpleNamespace(id=10, name="guild")


@pytest.fixture
def text_channel():
    return DummyText(20)


@pytest.fixture
def voice_channel(client, guild):
    return DummyVoiceChannel(client, guild, 30)


@pytest.fixture
def catalog():
    return TrackCatalog({
        "Летова": "letov1.mp3",
        "генгаозо": "G e n g a o z o -Noize of Nocent-.mp3",
        "че-нить пушистое": "fluff.mp3",
    }, base_dir="/srv/assets")


@pytest.fixture
def sources(monkeypatch):
    """Replace FFmpeg source creation; returns the list of opened paths."""
    opened = []

    def fake_create(path, volume=1.0, ffmpeg_options="-vn"):
        opened.append(path)
        return SimpleNamespace(path=path, cleanup=lambda: None)

    monkeypatch.setattr("trackbot.voice_manager.create_audio_source", fake_create)
    return opened


@pytest.fixture
def sessions(client):
    return VoiceSessions(client)


@pytest.fixture
def router(client, catalog, sessions):
    return MessageRouter(client, catalog, sessions, Triggers(), log_channel_id=LOG_CHANNEL_ID)


@pytest.fixture
def make_message(guild, text_channel):
    def _make(content, author_voice=None, author_id=7, guild_override=..., **kwargs):
        voice = SimpleNamespace(channel=author_voice) if author_voice is not None else None
        author = SimpleNamespace(id=author_id, voice=voice)
        g = guild if guild_override is ... else guild_override
        return DummyMessage(content, g, text_channel, author, **kwargs)
    return _make
