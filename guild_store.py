# guild_store.py – reads and writes guild data
# one GuildConfig per guild, kept in memory and mirrored to a json snapshot

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

log = logging.getLogger(__name__)

# role_id used when a calendar should notify every member
EVERYONE = "everyone"

EMPTY_SNAPSHOT = {"guilds": []}


class SnapshotError(RuntimeError):
    """The snapshot file exists but could not be read or parsed."""


class GuildNotFound(KeyError):
    """A guild id has no GuildConfig in the store."""


@dataclass(frozen=True)
class CalendarRegistration:
    feed_url: str
    role_id: str
    channel_id: str

    def to_json(self) -> dict:
        return {"url": self.feed_url, "roleId": self.role_id, "channelId": self.channel_id}

    @classmethod
    def from_json(cls, data: dict) -> "CalendarRegistration":
        return cls(
            feed_url=str(data["url"]),
            role_id=str(data["roleId"]),
            channel_id=str(data["channelId"]),
        )


@dataclass
class GuildConfig:
    guild_id: str
    prefix: str
    calendars: list[CalendarRegistration] = field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "id": self.guild_id,
            "prefix": self.prefix,
            "calendars": [c.to_json() for c in self.calendars],
        }

    @classmethod
    def from_json(cls, data: dict) -> "GuildConfig":
        return cls(
            guild_id=str(data["id"]),
            prefix=str(data["prefix"]),
            calendars=[CalendarRegistration.from_json(c) for c in data.get("calendars", [])],
        )


class GuildStore:
    """
    In-memory guild configuration, persisted as a whole-file json snapshot.

    Keeps a prefix index next to the configs so the router can look up a
    guild's prefix on every message; both maps are only changed here.
    """

    def __init__(self, path: Path | str, default_prefix: str):
        self.path = Path(path)
        self.default_prefix = default_prefix
        self._guilds: dict[str, GuildConfig] = {}
        self._prefixes: dict[str, str] = {}
        self._write_lock = asyncio.Lock()

    # loading

    @classmethod
    def open(cls, path: Path | str, default_prefix: str) -> "GuildStore":
        return cls(path, default_prefix).load()

    def load(self) -> "GuildStore":
        """
        Replace the store's contents with the snapshot on disk.

        A missing file is a fresh deployment: an empty snapshot is written
        straight away. Any other problem raises SnapshotError.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.warning("no snapshot at %s, starting empty", self.path)
            try:
                self.path.write_text(json.dumps(EMPTY_SNAPSHOT), encoding="utf-8")
            except OSError as exc:
                raise SnapshotError(f"could not create {self.path}: {exc}") from exc
            self.from_snapshot(EMPTY_SNAPSHOT)
            return self
        except OSError as exc:
            raise SnapshotError(f"could not read {self.path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise SnapshotError(f"{self.path} is not valid utf-8: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"{self.path} is not valid json: {exc}") from exc

        self.from_snapshot(data)
        log.info("loaded %d guilds from %s", len(self._guilds), self.path)
        return self

    def from_snapshot(self, data: dict) -> None:
        try:
            pairs = data["guilds"]
            guilds = {str(gid): GuildConfig.from_json(cfg) for gid, cfg in pairs}
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"malformed snapshot: {exc!r}") from exc

        self._guilds = guilds
        self._prefixes = {gid: cfg.prefix for gid, cfg in guilds.items()}

    def snapshot(self) -> dict:
        return {"guilds": [[gid, cfg.to_json()] for gid, cfg in self._guilds.items()]}

    # reads

    def __contains__(self, guild_id) -> bool:
        return str(guild_id) in self._guilds

    def __len__(self) -> int:
        return len(self._guilds)

    def guild_ids(self) -> list[str]:
        return list(self._guilds)

    def get(self, guild_id) -> GuildConfig | None:
        return self._guilds.get(str(guild_id))

    def prefix_for(self, guild_id) -> str | None:
        return self._prefixes.get(str(guild_id))

    def calendars(self, guild_id) -> list[CalendarRegistration]:
        cfg = self._guilds.get(str(guild_id))
        if cfg is None:
            raise GuildNotFound(str(guild_id))
        return list(cfg.calendars)

    # mutations

    def ensure_guild(self, guild_id) -> GuildConfig:
        gid = str(guild_id)
        cfg = self._guilds.get(gid)
        if cfg is None:
            cfg = GuildConfig(guild_id=gid, prefix=self.default_prefix)
            self._guilds[gid] = cfg
            self._prefixes[gid] = cfg.prefix
            log.debug("created default config for guild %s", gid)
        return cfg

    def sync_guilds(self, live_ids: Iterable) -> list[str]:
        # make sure every guild the bot is in has a config
        added = []
        for guild_id in live_ids:
            if guild_id not in self:
                self.ensure_guild(guild_id)
                added.append(str(guild_id))
        return added

    def set_prefix(self, guild_id, prefix: str) -> None:
        gid = str(guild_id)
        cfg = self._guilds.get(gid)
        if cfg is None:
            raise GuildNotFound(gid)
        cfg.prefix = prefix
        self._prefixes[gid] = prefix

    def add_calendar(self, guild_id, registration: CalendarRegistration) -> None:
        gid = str(guild_id)
        cfg = self._guilds.get(gid)
        if cfg is None:
            raise GuildNotFound(gid)
        cfg.calendars.append(registration)

    # persistence

    async def persist(self) -> bool:
        """
        Write the whole store to the snapshot path.

        Failures are logged and reported through the return value only; the
        in-memory state stays as it is.
        """
        # one write at a time, each with the state current when it starts
        async with self._write_lock:
            payload = json.dumps(self.snapshot())
            try:
                await asyncio.to_thread(_replace_file, self.path, payload)
            except OSError as exc:
                log.error("could not write snapshot to %s: %s", self.path, exc)
                return False
        log.debug("snapshot written to %s (%d guilds)", self.path, len(self._guilds))
        return True

    async def guild_joined(self, guild_id) -> GuildConfig:
        # a newly joined guild always rewrites the snapshot
        cfg = self.ensure_guild(guild_id)
        await self.persist()
        return cfg

    async def sync_and_persist(self, live_ids: Iterable) -> list[str]:
        added = self.sync_guilds(live_ids)
        await self.persist()
        return added


def _replace_file(path: Path, payload: str) -> None:
    # write beside the snapshot and swap it in, the old file stays whole on failure
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
