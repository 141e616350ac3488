# main.py – launches the bot
# loads the guild snapshot, imports the listeners so they are registered, then runs

import logging
import sys

from config import TOKEN
from bot_setup import bot, store  # shared bot instance and guild store
from guild_store import SnapshotError

# import side-effect module that adds the gateway listeners
import event_handlers

log = logging.getLogger("main")


def main():
    try:
        store.load()
    except SnapshotError as exc:
        log.critical("failed to start up: %s", exc)
        sys.exit(1)

    log.info("starting calendar bot with %d known guilds", len(store))
    bot.run(TOKEN)


if __name__ == "__main__":
    main()
