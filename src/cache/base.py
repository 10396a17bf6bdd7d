"""
Cache store interface shared by the feed aggregator, adapters and token broker.

The store is a plain key/value table: one JSON payload plus the time it was
written. Nothing in the storage layer knows about expiry. Entries that need
a freshness window carry it inside the payload as ``ttlSec`` and readers
judge freshness with ``is_fresh``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

TTL_FIELD = "ttlSec"
TWITCH_TOKEN_KEY = "twitch_token"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def is_fresh(written_at: datetime, ttl_seconds: float, now: datetime) -> bool:
    """True while less than ``ttl_seconds`` have passed since ``written_at``."""
    return now - written_at < timedelta(seconds=ttl_seconds)


def _normalize_handle(handle: str) -> str:
    return handle.strip().lower()


def feed_cache_key(user_id: str) -> str:
    """Whole-feed entry for one user."""
    return f"feed:{user_id}"


def channel_cache_key(platform: str, handle: str) -> str:
    """Per-channel adapter output, shared by every user tracking the handle."""
    return f"{platform}:channel:{_normalize_handle(handle)}"


def uploads_cache_key(platform: str, handle: str) -> str:
    """Resolved uploads collection id for a channel."""
    return f"{platform}:uploads:{_normalize_handle(handle)}"


@dataclass(frozen=True)
class CacheEntry:
    """A single cache row."""

    key: str
    payload: dict[str, Any]
    written_at: datetime

    @property
    def ttl_seconds(self) -> float | None:
        ttl = self.payload.get(TTL_FIELD)
        if isinstance(ttl, (int, float)) and not isinstance(ttl, bool):
            return float(ttl)
        return None


class CacheStore(ABC):
    """
    Abstract key/value cache with last-write-wins upserts.

    Subclasses implement the storage primitives (``read``, ``_put``,
    ``delete``). TTL embedding and freshness checks live here so every
    backend judges staleness the same way.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock()

    @abstractmethod
    async def read(self, key: str) -> CacheEntry | None:
        """Return the row for ``key`` or None when absent."""
        ...

    @abstractmethod
    async def _put(self, key: str, payload: dict[str, Any], written_at: datetime) -> None:
        """Upsert the row for ``key``."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the row for ``key``. Returns True if a row existed."""
        ...

    async def write(
        self,
        key: str,
        payload: dict[str, Any],
        ttl_seconds: int | None = None,
    ) -> None:
        """
        Upsert ``payload`` under ``key`` stamped with the current time.

        When ``ttl_seconds`` is given it is embedded in the stored payload
        as ``ttlSec``.
        """
        body = dict(payload)
        if ttl_seconds is not None:
            body[TTL_FIELD] = ttl_seconds
        await self._put(key, body, self.now())

    async def read_fresh(self, key: str) -> dict[str, Any] | None:
        """Return the payload for ``key`` if it carries a TTL that has not lapsed."""
        entry = await self.read(key)
        if entry is None:
            return None
        ttl = entry.ttl_seconds
        if ttl is None:
            return None
        if not is_fresh(entry.written_at, ttl, self.now()):
            return None
        return entry.payload

    async def close(self) -> None:
        """Release backend resources. Default is a no-op."""
        return None
