# tests/fakes.py – stand-ins for the discord objects the bot touches
import sys
from pathlib import Path
from types import SimpleNamespace

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import discord

BOT_ID = 999


class FakeRole(SimpleNamespace):
    """Mimic discord.Role (id + name)."""


class FakeChannel(SimpleNamespace):
    """Mimic a guild channel with id, name and type."""


def text_channel(cid: int, name: str = "general") -> FakeChannel:
    return FakeChannel(id=cid, name=name, type=discord.ChannelType.text)


def voice_channel(cid: int, name: str = "voice") -> FakeChannel:
    return FakeChannel(id=cid, name=name, type=discord.ChannelType.voice)


class FakeGuild:
    """
    Mimic discord.Guild: ``roles`` is the local cache, ``remote_roles`` what
    fetch_roles() returns (defaults to the cache).
    """

    def __init__(self, guild_id=1, roles=(), channels=(), remote_roles=None):
        self.id = guild_id
        self.name = f"guild {guild_id}"
        self.default_role = FakeRole(id=guild_id, name="@everyone")
        self.roles = [self.default_role, *roles]
        self._remote_roles = self.roles if remote_roles is None else [self.default_role, *remote_roles]
        self.channels = list(channels)
        self.fetch_calls = 0

    def get_role(self, role_id):
        return next((r for r in self.roles if r.id == role_id), None)

    async def fetch_roles(self):
        self.fetch_calls += 1
        return list(self._remote_roles)

    def get_channel(self, channel_id):
        return next((c for c in self.channels if c.id == channel_id), None)


class FakeMessage:
    """Mimic discord.Message; replies are collected instead of sent."""

    def __init__(self, content, guild=None, author_id=42, channel_id=7):
        self.id = 1
        self.content = content
        self.guild = guild
        self.author = SimpleNamespace(id=author_id)
        self.channel = SimpleNamespace(id=channel_id)
        self.replies: list[str] = []

    async def reply(self, text, **kwargs):
        self.replies.append(text)


BOT_USER = SimpleNamespace(id=BOT_ID)
