# config.py – central settings for the bot
# loads values from .env, validates the log level, and sets up logging

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# read .env file if present
load_dotenv()

# discord bot token
TOKEN = os.getenv("DISCORD_TOKEN", "").strip()
if not TOKEN:
    raise RuntimeError("DISCORD_TOKEN env var is required")

# json snapshot holding every guild's prefix and calendars
SAVE_FILE = Path(os.getenv("SAVE_FILE", "./data.json"))

# prefix given to guilds the bot has just joined
DEFAULT_PREFIX = os.getenv("DEFAULT_PREFIX", "~")

# minimum log level, falls back to WARNING if the name is unknown
DEFAULT_LOG_LEVEL = "WARNING"
_level_name = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
_level = logging.getLevelName(_level_name)
_level_ok = isinstance(_level, int)
LOG_LEVEL = _level if _level_ok else logging.getLevelName(DEFAULT_LOG_LEVEL)

# basic logging config
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

if not _level_ok:
    logging.getLogger(__name__).warning(
        "invalid LOG_LEVEL %r, using %s", _level_name, DEFAULT_LOG_LEVEL
    )

# silence overly-verbose logs from dependencies
logging.getLogger("discord.gateway").setLevel(logging.WARNING)
logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
