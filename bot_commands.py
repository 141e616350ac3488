# bot_commands.py – text commands for the calendar bot
# <prefix>ping                              – check the bot is alive
# <prefix>prefix                            – show this server's prefix
# <prefix>setprefix <new prefix>            – change it
# <prefix>calendars                         – list registered calendars
# <prefix>addcalendar <url> <channel> <role> – register a calendar feed
# every command can also be invoked by mentioning the bot instead of the prefix

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import discord

from calendar_registration import (
    ADD_CALENDAR_USAGE,
    INTERNAL_ERROR_REPLY,
    register_calendar,
)
from guild_store import EVERYONE, GuildNotFound, GuildStore

log = logging.getLogger(__name__)

GUILD_ONLY_REPLY = "This command can only be used within a server."
INVALID_COMMAND_REPLY = "invalid command!"
NO_CALENDARS_REPLY = "this server doesn't have any calendars registered yet."


@dataclass
class CommandContext:
    message: discord.Message
    store: GuildStore
    args: list[str]

    @property
    def guild(self):
        return self.message.guild

    @property
    def prefix(self) -> str:
        # read fresh every time, a concurrent setprefix may have changed it
        if self.guild is None:
            return ""
        prefix = self.store.prefix_for(self.guild.id)
        return self.store.default_prefix if prefix is None else prefix

    async def reply(self, text: str) -> None:
        # echoed role mentions must not ping anyone
        await self.message.reply(text, allowed_mentions=discord.AllowedMentions.none())


@dataclass(frozen=True)
class Command:
    name: str
    handler: Callable[[CommandContext], Awaitable[None]]
    usage: str
    min_args: int = 0
    max_args: int | None = 0  # None means any number
    guild_only: bool = False

    def accepts(self, n_args: int) -> bool:
        if n_args < self.min_args:
            return False
        return self.max_args is None or n_args <= self.max_args


def _describe(message) -> str:
    guild = message.guild
    where = f"guild {guild.id}" if guild is not None else f"DM {message.author.id}"
    return f"{where} channel {message.channel.id} author {message.author.id}"


# command bodies; arity and guild context are already checked


async def _ping(ctx: CommandContext):
    await ctx.reply("pong!")


async def _prefix(ctx: CommandContext):
    if ctx.args:
        await ctx.reply(f"the current prefix is `{ctx.prefix}`. Did you mean `{ctx.prefix}setprefix`?")
    else:
        await ctx.reply(f"the current prefix is `{ctx.prefix}`")


async def _setprefix(ctx: CommandContext):
    new_prefix = ctx.args[0]
    try:
        ctx.store.set_prefix(ctx.guild.id, new_prefix)
    except GuildNotFound:
        log.error("setprefix: guild %s missing from the store", ctx.guild.id)
        await ctx.reply(INTERNAL_ERROR_REPLY)
        return
    await ctx.store.persist()
    log.info("guild %s prefix set to %r", ctx.guild.id, new_prefix)
    await ctx.reply(f"done! New prefix is `{new_prefix}`.")


def _format_calendar(cal) -> str:
    role = "everyone" if cal.role_id == EVERYONE else f"<@&{cal.role_id}>"
    return f"{cal.feed_url} → <#{cal.channel_id}> ({role})"


async def _calendars(ctx: CommandContext):
    try:
        calendars = ctx.store.calendars(ctx.guild.id)
    except GuildNotFound:
        log.error("calendars: guild %s missing from the store", ctx.guild.id)
        await ctx.reply(INTERNAL_ERROR_REPLY)
        return
    if not calendars:
        await ctx.reply(NO_CALENDARS_REPLY)
        return
    lines = "\n".join(_format_calendar(c) for c in calendars)
    await ctx.reply(f"The calendars currently registered in this guild are:\n{lines}")


async def _addcalendar(ctx: CommandContext):
    result = await register_calendar(ctx.store, ctx.guild, ctx.args, ctx.prefix)
    await ctx.reply(result.reply)


COMMANDS: dict[str, Command] = {
    cmd.name: cmd
    for cmd in (
        Command("ping", _ping, "ping", max_args=None),
        Command("prefix", _prefix, "prefix", max_args=1, guild_only=True),
        Command("setprefix", _setprefix, "setprefix <new prefix>", min_args=1, max_args=1, guild_only=True),
        Command("calendars", _calendars, "calendars", guild_only=True),
        Command("addcalendar", _addcalendar, ADD_CALENDAR_USAGE, min_args=3, max_args=None, guild_only=True),
    )
}


async def handle_command(tokens: list[str], message, store: GuildStore) -> None:
    """Run the command named by ``tokens[0]`` with the remaining tokens as arguments."""
    name = tokens[0].lower()
    ctx = CommandContext(message=message, store=store, args=tokens[1:])
    where = _describe(message)

    cmd = COMMANDS.get(name)
    if cmd is None:
        log.debug("%s: unknown command %r", where, name)
        await ctx.reply(INVALID_COMMAND_REPLY)
        return
    if cmd.guild_only and message.guild is None:
        log.debug("%s: %s needs a server", where, name)
        await ctx.reply(GUILD_ONLY_REPLY)
        return
    if not cmd.accepts(len(ctx.args)):
        log.debug("%s: bad usage of %s %r", where, name, ctx.args)
        await ctx.reply(f"the usage of this command is `{ctx.prefix}{cmd.usage}`")
        return

    log.debug("%s: running %s", where, name)
    await cmd.handler(ctx)


# message routing


def match_command(content: str, prefix: str, bot_user_id=None) -> list[str] | None:
    """
    Return the command tokens of ``content`` or None if it is not a command.

    A command starts with the bot's mention (``<@id>`` or ``<@!id>``) or with
    ``prefix``. The mention token is dropped; the prefix is cut off the first
    token.
    """
    tokens = content.split()
    if not tokens:
        return None

    if bot_user_id is not None:
        mentions = (f"<@{bot_user_id}>", f"<@!{bot_user_id}>")
        if tokens[0] in mentions and content.startswith(tokens[0]):
            return tokens[1:] or None

    if content.startswith(prefix):
        tokens[0] = tokens[0][len(prefix):]
        return tokens
    return None


async def route_message(message, store: GuildStore, bot_user) -> None:
    if bot_user is not None and message.author.id == bot_user.id:
        return

    if message.guild is None:
        prefix = ""
    else:
        prefix = store.prefix_for(message.guild.id)
        if prefix is None:
            log.warning("guild %s has no stored prefix, using the default", message.guild.id)
            prefix = store.default_prefix

    tokens = match_command(message.content, prefix, getattr(bot_user, "id", None))
    if tokens is None:
        return
    await handle_command(tokens, message, store)
