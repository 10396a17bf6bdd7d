"""
Dependency injection for FastAPI endpoints.

Shared resources are created on first use and released by
``cleanup_dependencies`` when the application shuts down.
"""

import redis.asyncio as redis
import structlog

from src.admin.repository import FlagsRepository
from src.cache.base import CacheStore
from src.cache.factory import create_cache_store
from src.config.settings import get_settings
from src.feed.aggregator import FeedAggregator
from src.feed.config import FeedConfig
from src.feed.factory import build_adapters, create_http_client
from src.platforms.base_adapter import BaseAdapter
from src.platforms.http_client import HTTPClient
from src.platforms.schemas import Platform
from src.platforms.youtube_adapter import YouTubeAdapter
from src.sources.repository import SourcesRepository
from src.storage.database import Database
from src.users.repository import UsersRepository

logger = structlog.get_logger(__name__)

# Global instances (initialized on first request)
_database: Database | None = None
_redis_client: redis.Redis | None = None
_cache_store: CacheStore | None = None
_http_client: HTTPClient | None = None
_adapters: dict[Platform, BaseAdapter] | None = None
_feed_aggregator: FeedAggregator | None = None


async def get_database() -> Database:
    """Get the shared connection pool."""
    global _database

    if _database is None:
        _database = Database()
        await _database.connect()

    return _database


async def get_cache_store() -> CacheStore:
    """Get the cache store selected by CACHE_BACKEND."""
    global _cache_store, _redis_client

    if _cache_store is None:
        settings = get_settings()
        database = None

        if settings.cache_backend == "postgres":
            database = await get_database()
        elif settings.cache_backend == "redis" and _redis_client is None:
            _redis_client = redis.from_url(
                str(settings.redis_url),
                encoding="utf-8",
                decode_responses=True,
            )

        _cache_store = create_cache_store(
            settings, database=database, redis_client=_redis_client
        )

    return _cache_store


async def get_http_client() -> HTTPClient:
    """Get the entered upstream HTTP client."""
    global _http_client

    if _http_client is None:
        _http_client = await create_http_client(get_settings()).__aenter__()

    return _http_client


async def get_adapters() -> dict[Platform, BaseAdapter]:
    global _adapters

    if _adapters is None:
        _adapters = build_adapters(
            await get_http_client(),
            await get_cache_store(),
            settings=get_settings(),
            config=FeedConfig(),
        )

    return _adapters


async def get_youtube_adapter() -> YouTubeAdapter:
    adapters = await get_adapters()
    return adapters[Platform.YOUTUBE]


async def get_sources_repository() -> SourcesRepository:
    return SourcesRepository(await get_database())


async def get_users_repository() -> UsersRepository:
    return UsersRepository(await get_database())


async def get_flags_repository() -> FlagsRepository:
    return FlagsRepository(await get_database())


async def get_feed_aggregator() -> FeedAggregator:
    """Get the feed aggregator wired to the shared cache and adapters."""
    global _feed_aggregator

    if _feed_aggregator is None:
        config = FeedConfig()
        request_timeout = get_settings().request_timeout_seconds
        if 0 < request_timeout <= config.fetch_deadline_seconds:
            logger.warning(
                "Feed fetch deadline does not fit inside the request timeout",
                fetch_deadline_seconds=config.fetch_deadline_seconds,
                request_timeout_seconds=request_timeout,
            )
        _feed_aggregator = FeedAggregator(
            cache=await get_cache_store(),
            sources=await get_sources_repository(),
            adapters=await get_adapters(),
            config=config,
        )

    return _feed_aggregator


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _database, _redis_client, _cache_store, _http_client, _adapters, _feed_aggregator

    _feed_aggregator = None
    _adapters = None

    if _http_client is not None:
        await _http_client.__aexit__(None, None, None)
        _http_client = None

    if _cache_store is not None:
        await _cache_store.close()
        _cache_store = None
        # The redis cache store owns the client
        _redis_client = None

    if _database is not None:
        await _database.close()
        _database = None
