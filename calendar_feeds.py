# calendar_feeds.py – downloads and parses remote .ics feeds
# webcal:// links are fetched over https

import logging

import aiohttp
from ics import Calendar

log = logging.getLogger(__name__)


class FeedError(Exception):
    """A calendar feed could not be downloaded or parsed."""


def normalise_feed_url(url: str) -> str:
    if url.lower().startswith("webcal://"):
        return "https://" + url[len("webcal://"):]
    return url


async def _download(session: aiohttp.ClientSession, url: str) -> str:
    async with session.get(url) as resp:
        resp.raise_for_status()
        return await resp.text()


async def fetch_calendar(url: str, session: aiohttp.ClientSession | None = None) -> Calendar:
    """
    Fetch ``url`` and parse it as an iCalendar document.

    Every failure, whether network, HTTP status or parsing, is raised as
    FeedError so callers can treat the feed as simply unusable.
    """
    target = normalise_feed_url(url)
    try:
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                text = await _download(own_session, target)
        else:
            text = await _download(session, target)
        cal = Calendar(text)
    except Exception as exc:
        log.info("feed %s unusable: %s", url, exc)
        raise FeedError(f"could not load calendar from {url}") from exc

    log.debug("feed %s parsed (%d events)", url, len(cal.events))
    return cal
