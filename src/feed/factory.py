"""Wiring of platform adapters from settings."""

from src.cache.base import CacheStore
from src.config.settings import Settings, get_settings
from src.feed.config import FeedConfig
from src.platforms.base_adapter import BaseAdapter
from src.platforms.http_client import APIKeyRotator, HTTPClient, RetryConfig
from src.platforms.schemas import Platform
from src.platforms.token_broker import TwitchTokenBroker
from src.platforms.twitch_adapter import TwitchAdapter
from src.platforms.youtube_adapter import YouTubeAdapter


def create_http_client(settings: Settings | None = None) -> HTTPClient:
    """HTTP client with the configured upstream timeout and retry limits."""
    settings = settings or get_settings()
    return HTTPClient(
        retry_config=RetryConfig(
            max_retries=settings.max_http_retries,
            max_backoff_seconds=settings.max_backoff_seconds,
        ),
        timeout=settings.upstream_timeout_seconds,
    )


def build_youtube_adapter(
    http: HTTPClient,
    cache: CacheStore,
    settings: Settings | None = None,
    config: FeedConfig | None = None,
) -> YouTubeAdapter:
    settings = settings or get_settings()
    config = config or FeedConfig()
    return YouTubeAdapter(
        http,
        cache,
        api_key_rotator=APIKeyRotator.from_env_var(settings.youtube_api_keys),
        recent_limit=config.youtube_recent_limit,
        archive_limit=config.youtube_archive_limit,
        live_ttl=config.youtube_live_ttl_seconds,
        scheduled_ttl=config.youtube_scheduled_ttl_seconds,
        archive_ttl=config.youtube_archive_ttl_seconds,
        uploads_ttl=config.youtube_uploads_ttl_seconds,
    )


def build_adapters(
    http: HTTPClient,
    cache: CacheStore,
    settings: Settings | None = None,
    config: FeedConfig | None = None,
) -> dict[Platform, BaseAdapter]:
    """One adapter per supported platform, sharing the HTTP client and cache."""
    settings = settings or get_settings()
    config = config or FeedConfig()

    broker = TwitchTokenBroker(
        cache,
        http,
        client_id=settings.twitch_client_id,
        client_secret=settings.twitch_client_secret,
        refresh_margin_seconds=config.token_refresh_margin_seconds,
    )
    return {
        Platform.YOUTUBE: build_youtube_adapter(http, cache, settings, config),
        Platform.TWITCH: TwitchAdapter(
            http,
            broker,
            live_ttl=config.twitch_live_ttl_seconds,
            offline_ttl=config.twitch_offline_ttl_seconds,
        ),
    }
