# event_handlers.py – gateway listeners for the calendar bot
# keeps the store in step with the guilds the bot is in and routes messages

import logging

import discord

from bot_commands import route_message
from bot_setup import bot, store

log = logging.getLogger(__name__)


# add any guild joined while the bot was offline


@bot.event
async def on_ready():
    added = await store.sync_and_persist(g.id for g in bot.guilds)
    if added:
        log.info("added default config for %d new guilds: %s", len(added), added)
    log.info("bot is online as %s in %d guilds", bot.user, len(bot.guilds))


@bot.event
async def on_guild_join(guild: discord.Guild):
    await store.guild_joined(guild.id)
    log.info("joined guild %s (%s)", guild.id, guild.name)


@bot.event
async def on_message(message: discord.Message):
    try:
        await route_message(message, store, bot.user)
    except discord.HTTPException as exc:
        log.warning("could not reply to message %s: %s", message.id, exc)
    except Exception:
        log.exception("error handling message %s", message.id)
