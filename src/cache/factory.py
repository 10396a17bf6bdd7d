"""Cache store selection from settings."""

import logging

import redis.asyncio as redis

from src.cache.base import CacheStore
from src.cache.memory import InMemoryCacheStore
from src.cache.postgres import PostgresCacheStore
from src.cache.redis_store import RedisCacheStore
from src.config.settings import Settings, get_settings
from src.storage.database import Database

logger = logging.getLogger(__name__)


def create_cache_store(
    settings: Settings | None = None,
    database: Database | None = None,
    redis_client: redis.Redis | None = None,
) -> CacheStore:
    """
    Build the cache store named by ``CACHE_BACKEND``.

    Args:
        settings: Service settings (defaults to the environment)
        database: Connected database, required for the postgres backend
        redis_client: Client for the redis backend (created from REDIS_URL if omitted)
    """
    settings = settings or get_settings()
    backend = settings.cache_backend

    if backend == "postgres":
        if database is None:
            raise ValueError("postgres cache backend requires a database")
        store: CacheStore = PostgresCacheStore(database)
    elif backend == "redis":
        client = redis_client or redis.from_url(
            str(settings.redis_url),
            encoding="utf-8",
            decode_responses=True,
        )
        store = RedisCacheStore(client)
    else:
        store = InMemoryCacheStore()

    logger.info(f"Using {backend} cache store")
    return store
