# resolvers.py – turn user-typed role and channel references into ids
# roles: <@&id> mention, numeric id, or exact role name
# channels: <#id> mention or numeric id, never by name

import logging
import re

import discord

from guild_store import EVERYONE

log = logging.getLogger(__name__)

_ROLE_MENTION = re.compile(r"<@&([0-9]+)>")
_CHANNEL_MENTION = re.compile(r"<#([0-9]+)>")
_NUMERIC = re.compile(r"[0-9]+")


def _role_result(role, guild) -> str:
    default_role = getattr(guild, "default_role", None)
    if default_role is not None and role.id == default_role.id:
        return EVERYONE
    return str(role.id)


# look a role id up in the cache first, then ask discord once


async def _find_role(role_id: int, guild):
    role = guild.get_role(role_id)
    if role is not None:
        return role
    try:
        roles = await guild.fetch_roles()
    except discord.HTTPException as exc:
        log.warning("fetching roles for guild %s failed: %s", guild.id, exc)
        return None
    return next((r for r in roles if r.id == role_id), None)


async def resolve_role(identifier: str, guild) -> str | None:
    """
    Resolve a role reference to a role id, or None.

    Tried in order: a role mention, a bare numeric role id, then an exact
    (case-sensitive) role name from the cached role list. Ids are only
    accepted when the guild actually has that role. The guild's default role
    resolves to EVERYONE.
    """
    if m := _ROLE_MENTION.fullmatch(identifier):
        role = await _find_role(int(m[1]), guild)
        return _role_result(role, guild) if role is not None else None

    if _NUMERIC.fullmatch(identifier):
        role = await _find_role(int(identifier), guild)
        if role is not None:
            return _role_result(role, guild)
        # not an id, it may still be a role called e.g. "2024"

    for role in guild.roles:
        if role.name == identifier:
            return _role_result(role, guild)
    return None


def resolve_text_channel(identifier: str, guild) -> str | None:
    # names are not unique inside a guild, so only ids are accepted
    if m := _CHANNEL_MENTION.fullmatch(identifier):
        channel_id = m[1]
    else:
        channel_id = identifier

    if not _NUMERIC.fullmatch(channel_id):
        return None

    channel = guild.get_channel(int(channel_id))
    if channel is None or channel.type != discord.ChannelType.text:
        return None
    return str(channel.id)
