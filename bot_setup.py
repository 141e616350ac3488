"""bot_setup.py – create and export the Discord client and the guild store."""

import discord

from config import DEFAULT_PREFIX, SAVE_FILE
from guild_store import GuildStore

# guild list, guild messages (with their content) and DMs
intents = discord.Intents.default()
intents.guilds = True
intents.messages = True
intents.message_content = True

# The bot instance used throughout the project
bot = discord.Client(intents=intents)

# Every guild's prefix and calendars; filled by store.load() in main.py
store = GuildStore(SAVE_FILE, DEFAULT_PREFIX)
