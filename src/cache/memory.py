"""Process-local cache store for development and tests."""

from datetime import datetime
from typing import Any

from src.cache.base import CacheEntry, CacheStore, Clock


class InMemoryCacheStore(CacheStore):
    """Dict-backed cache store. Not shared between processes."""

    def __init__(self, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._rows: dict[str, CacheEntry] = {}

    async def read(self, key: str) -> CacheEntry | None:
        return self._rows.get(key)

    async def _put(self, key: str, payload: dict[str, Any], written_at: datetime) -> None:
        self._rows[key] = CacheEntry(key=key, payload=payload, written_at=written_at)

    async def delete(self, key: str) -> bool:
        return self._rows.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._rows)

    def __len__(self) -> int:
        return len(self._rows)
