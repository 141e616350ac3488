# tests/test_resolvers.py – role and channel reference parsing
import asyncio

import pytest

from fakes import FakeChannel, FakeGuild, FakeRole, text_channel, voice_channel
from guild_store import EVERYONE
from resolvers import resolve_role, resolve_text_channel

import discord

MODS = FakeRole(id=123, name="Mods")


def _role(identifier, guild):
    return asyncio.run(resolve_role(identifier, guild))


# ---------------------------------------------------------------------------
# resolve_role
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "identifier,expected",
    [
        ("<@&123>", "123"),  # mention
        ("123", "123"),  # bare id
        ("Mods", "123"),  # exact name
        ("<@&999>", None),  # mention of a role that doesn't exist
        ("Administrators", None),
        ("mods", None),  # names are case-sensitive
        ("<@&123", None),
    ],
)
def test_resolve_role(identifier, expected):
    guild = FakeGuild(roles=[MODS])
    assert _role(identifier, guild) == expected


def test_role_name_with_spaces():
    guild = FakeGuild(roles=[MODS, FakeRole(id=5, name="Event Team")])
    assert _role("Event Team", guild) == "5"


def test_numeric_name_falls_through_to_name_match():
    guild = FakeGuild(roles=[FakeRole(id=77, name="2024")])
    assert _role("2024", guild) == "77"


def test_uncached_role_is_fetched():
    guild = FakeGuild(roles=[], remote_roles=[FakeRole(id=555, name="New")])
    assert _role("<@&555>", guild) == "555"
    assert guild.fetch_calls == 1


def test_cached_role_needs_no_fetch():
    guild = FakeGuild(roles=[MODS])
    _role("<@&123>", guild)
    assert guild.fetch_calls == 0


def test_name_match_uses_cache_only():
    # a role known remotely but not cached can't be matched by name
    guild = FakeGuild(roles=[], remote_roles=[FakeRole(id=555, name="New")])
    assert _role("New", guild) is None


@pytest.mark.parametrize("identifier", ["@everyone", "<@&1>", "1"])
def test_default_role_maps_to_everyone(identifier):
    guild = FakeGuild(guild_id=1, roles=[MODS])
    assert _role(identifier, guild) == EVERYONE


# ---------------------------------------------------------------------------
# resolve_text_channel
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "identifier,expected",
    [
        ("<#10>", "10"),
        ("10", "10"),
        ("<#11>", None),  # voice channel
        ("11", None),
        ("<#404>", None),  # unknown
        ("#general", None),
        ("", None),
    ],
)
def test_resolve_text_channel(identifier, expected):
    guild = FakeGuild(channels=[text_channel(10), voice_channel(11)])
    assert resolve_text_channel(identifier, guild) == expected


def test_channels_are_never_resolved_by_name():
    guild = FakeGuild(channels=[text_channel(1, "general"), text_channel(2, "general")])
    assert resolve_text_channel("general", guild) is None


def test_category_is_not_a_text_channel():
    category = FakeChannel(id=30, name="info", type=discord.ChannelType.category)
    guild = FakeGuild(channels=[category])
    assert resolve_text_channel("30", guild) is None
