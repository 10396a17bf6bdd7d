"""Configuration for feed building and per-platform caching."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedConfig(BaseSettings):
    """Cache lifetimes, adapter limits and fan-out width for feed builds."""

    model_config = SettingsConfigDict(
        env_prefix="FEED_",
        case_sensitive=False,
        extra="ignore",
    )

    ttl_seconds: int = Field(
        default=90,
        ge=0,
        description="Lifetime of the whole-feed cache entry per user",
    )

    # YouTube
    youtube_live_ttl_seconds: int = Field(
        default=120,
        ge=0,
        description="Channel cache lifetime when a YouTube channel is live",
    )
    youtube_scheduled_ttl_seconds: int = Field(
        default=600,
        ge=0,
        description="Channel cache lifetime when only upcoming streams exist",
    )
    youtube_archive_ttl_seconds: int = Field(
        default=1800,
        ge=0,
        description="Channel cache lifetime for archive-only results",
    )
    youtube_uploads_ttl_seconds: int = Field(
        default=86400,
        ge=0,
        description="Lifetime of the cached uploads playlist id",
    )
    youtube_recent_limit: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Recent uploads inspected per channel",
    )
    youtube_archive_limit: int = Field(
        default=3,
        ge=1,
        description="Archive items returned when nothing is live or upcoming",
    )

    # Twitch
    twitch_live_ttl_seconds: int = Field(
        default=120,
        ge=0,
        description="Channel cache lifetime when a Twitch channel is live",
    )
    twitch_offline_ttl_seconds: int = Field(
        default=600,
        ge=0,
        description="Channel cache lifetime when a Twitch channel is offline",
    )
    token_refresh_margin_seconds: int = Field(
        default=60,
        ge=0,
        description="Refresh the Twitch app token this long before it expires",
    )

    max_concurrency: int = Field(
        default=8,
        ge=1,
        description="Upper bound on concurrent adapter calls per feed build",
    )
    fetch_deadline_seconds: float = Field(
        default=20.0,
        gt=0.0,
        description=(
            "Budget for refreshing uncached channels in one build, counted from "
            "the start of the refresh; channels still pending become error entries. "
            "Keep below REQUEST_TIMEOUT_SECONDS"
        ),
    )
