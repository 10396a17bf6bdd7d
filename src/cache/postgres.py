"""PostgreSQL-backed cache store (``cache_kv`` table)."""

import logging
from datetime import datetime
from typing import Any

from src.cache.base import CacheEntry, CacheStore, Clock
from src.storage.database import Database, affected_rows

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS cache_kv (
    key        TEXT PRIMARY KEY,
    payload    JSONB NOT NULL,
    written_at TIMESTAMPTZ NOT NULL
);
"""

_UPSERT_SQL = """
INSERT INTO cache_kv (key, payload, written_at)
VALUES ($1, $2, $3)
ON CONFLICT (key) DO UPDATE SET
    payload = EXCLUDED.payload,
    written_at = EXCLUDED.written_at
"""


class PostgresCacheStore(CacheStore):
    """Cache rows persisted in Postgres. Concurrent writers race last-write-wins."""

    def __init__(self, database: Database, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._db = database

    async def create_table(self) -> None:
        """Create the cache table (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Cache table ensured")

    async def read(self, key: str) -> CacheEntry | None:
        row = await self._db.fetchrow(
            "SELECT key, payload, written_at FROM cache_kv WHERE key = $1",
            key,
        )
        if row is None:
            return None
        payload = row["payload"]
        if not isinstance(payload, dict):
            logger.warning("Ignoring non-object cache payload for %s", key)
            return None
        return CacheEntry(key=row["key"], payload=payload, written_at=row["written_at"])

    async def _put(self, key: str, payload: dict[str, Any], written_at: datetime) -> None:
        await self._db.execute(_UPSERT_SQL, key, payload, written_at)

    async def delete(self, key: str) -> bool:
        result = await self._db.execute("DELETE FROM cache_kv WHERE key = $1", key)
        return affected_rows(result) > 0
