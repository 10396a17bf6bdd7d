"""Cache store: key/value rows with payload-embedded TTLs."""

from src.cache.base import (
    TTL_FIELD,
    TWITCH_TOKEN_KEY,
    CacheEntry,
    CacheStore,
    channel_cache_key,
    feed_cache_key,
    is_fresh,
    uploads_cache_key,
    utc_now,
)
from src.cache.factory import create_cache_store
from src.cache.memory import InMemoryCacheStore
from src.cache.postgres import PostgresCacheStore
from src.cache.redis_store import RedisCacheStore

__all__ = [
    "TTL_FIELD",
    "TWITCH_TOKEN_KEY",
    "CacheEntry",
    "CacheStore",
    "InMemoryCacheStore",
    "PostgresCacheStore",
    "RedisCacheStore",
    "channel_cache_key",
    "create_cache_store",
    "feed_cache_key",
    "is_fresh",
    "uploads_cache_key",
    "utc_now",
]
