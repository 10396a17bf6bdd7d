"""Redis-backed cache store."""

import json
import logging
from datetime import datetime
from typing import Any

import redis.asyncio as redis

from src.cache.base import CacheEntry, CacheStore, Clock

logger = logging.getLogger(__name__)


class RedisCacheStore(CacheStore):
    """
    Cache rows stored as JSON strings ``{"payload": ..., "writtenAt": ...}``.

    No Redis expiry is set; freshness is judged from the embedded TTL like
    every other backend.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key_prefix: str = "stream_feed:",
        clock: Clock | None = None,
    ) -> None:
        super().__init__(clock)
        self._redis = redis_client
        self._prefix = key_prefix

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def read(self, key: str) -> CacheEntry | None:
        raw = await self._redis.get(self._redis_key(key))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return CacheEntry(
                key=key,
                payload=data["payload"],
                written_at=datetime.fromisoformat(data["writtenAt"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring corrupt cache row {key}: {e}")
            return None

    async def _put(self, key: str, payload: dict[str, Any], written_at: datetime) -> None:
        await self._redis.set(
            self._redis_key(key),
            json.dumps({"payload": payload, "writtenAt": written_at.isoformat()}),
        )

    async def delete(self, key: str) -> bool:
        return bool(await self._redis.delete(self._redis_key(key)))

    async def close(self) -> None:
        await self._redis.aclose()
