# calendar_registration.py – the addcalendar pipeline
# resolves role, feed and channel together and only stores the calendar
# when all three worked

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from calendar_feeds import fetch_calendar
from guild_store import EVERYONE, CalendarRegistration, GuildNotFound, GuildStore
from resolvers import resolve_role, resolve_text_channel

log = logging.getLogger(__name__)

INTERNAL_ERROR_REPLY = "there was an internal error executing your command."
ADD_CALENDAR_USAGE = "addcalendar <calendar url> <channel> <role>"


class RegistrationState(enum.Enum):
    PARSING = "parsing"
    RESOLVING = "resolving"
    COMMITTING = "committing"
    DONE = "done"
    REJECTED = "rejected"


@dataclass
class RegistrationResult:
    state: RegistrationState
    reply: str
    registration: CalendarRegistration | None = None

    @property
    def ok(self) -> bool:
        return self.state is RegistrationState.DONE


def usage(prefix: str) -> str:
    return f"the usage of this command is `{prefix}{ADD_CALENDAR_USAGE}`"


def _rejected(reply: str) -> RegistrationResult:
    return RegistrationResult(RegistrationState.REJECTED, reply)


def _role_text(role_id: str) -> str:
    return "everyone" if role_id == EVERYONE else f"<@&{role_id}>"


async def register_calendar(
    store: GuildStore,
    guild,
    args: list[str],
    prefix: str,
    fetch: Callable[[str], Awaitable] | None = None,
) -> RegistrationResult:
    """
    Register a calendar feed for ``guild``.

    ``args`` are the command arguments: feed url, channel, then the role
    (which may span several tokens when it is a name with spaces). Role
    lookup and feed download run concurrently and both are awaited to the
    end; failures are reported in the order role, feed, channel. Nothing is
    stored unless all three resolved.
    """
    state = RegistrationState.PARSING
    log.debug("guild %s addcalendar: %s", guild.id, state.value)
    if len(args) < 3:
        return _rejected(usage(prefix))

    feed_url, channel_identifier = args[0], args[1]
    role_identifier = " ".join(args[2:])

    fetch = fetch or fetch_calendar
    state = RegistrationState.RESOLVING
    log.debug("guild %s addcalendar: %s %s", guild.id, state.value, feed_url)
    role_result, feed_result = await asyncio.gather(
        resolve_role(role_identifier, guild),
        fetch(feed_url),
        return_exceptions=True,
    )
    channel_id = resolve_text_channel(channel_identifier, guild)

    if isinstance(role_result, BaseException):
        log.warning("role lookup for %r in guild %s raised: %s", role_identifier, guild.id, role_result)
        role_result = None

    if role_result is None:
        return _rejected(
            f"I couldn't find the role `{role_identifier}`. "
            "Use a role mention, a role ID or the exact role name."
        )
    if isinstance(feed_result, BaseException):
        return _rejected(
            f"I couldn't load a calendar from `{feed_url}`. "
            "Make sure the link points to a public .ics feed."
        )
    if channel_id is None:
        return _rejected(
            f"I couldn't find a text channel matching `{channel_identifier}`. "
            "Use a channel mention or a channel ID."
        )

    state = RegistrationState.COMMITTING
    log.debug("guild %s addcalendar: %s", guild.id, state.value)
    registration = CalendarRegistration(feed_url=feed_url, role_id=role_result, channel_id=channel_id)
    try:
        store.add_calendar(guild.id, registration)
    except GuildNotFound:
        log.error("guild %s missing from the store during addcalendar", guild.id)
        return _rejected(INTERNAL_ERROR_REPLY)
    await store.persist()

    log.info("guild %s registered %s -> channel %s, role %s", guild.id, feed_url, channel_id, role_result)
    return RegistrationResult(
        RegistrationState.DONE,
        f"done! Events from `{feed_url}` will be announced in <#{channel_id}> for {_role_text(role_result)}.",
        registration,
    )
