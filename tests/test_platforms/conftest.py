"""Shared fixtures for platform adapter tests."""

from datetime import timedelta

import pytest
import pytest_asyncio

from src.cache.base import TWITCH_TOKEN_KEY
from src.platforms.http_client import APIKeyRotator, HTTPClient, RetryConfig
from src.platforms.schemas import isoformat_z
from src.platforms.token_broker import TwitchTokenBroker
from src.platforms.twitch_adapter import TwitchAdapter
from src.platforms.youtube_adapter import YouTubeAdapter


@pytest_asyncio.fixture
async def http():
    """Entered HTTP client with retries disabled."""
    async with HTTPClient(RetryConfig(max_retries=0), timeout=5.0) as client:
        yield client


@pytest.fixture
def youtube(http, cache) -> YouTubeAdapter:
    return YouTubeAdapter(http, cache, api_key_rotator=APIKeyRotator(keys=["yt-key"]))


@pytest.fixture
def broker(http, cache) -> TwitchTokenBroker:
    return TwitchTokenBroker(cache, http, "twitch-client", "twitch-secret")


@pytest.fixture
def twitch(http, broker) -> TwitchAdapter:
    return TwitchAdapter(http, broker)


@pytest.fixture
def seed_token(cache, clock):
    """Store a Twitch token valid for ``lifetime`` seconds from now."""

    async def _seed(token: str = "cached-token", lifetime: float = 3600) -> None:
        expires_at = clock.current + timedelta(seconds=lifetime)
        await cache.write(TWITCH_TOKEN_KEY, {"token": token, "expiresAt": isoformat_z(expires_at)})

    return _seed


# ── YouTube payload builders ───────────────────────────


@pytest.fixture
def yt_channels():
    def _build(uploads: str | None = "UUabc") -> dict:
        if uploads is None:
            return {"items": []}
        return {"items": [{"contentDetails": {"relatedPlaylists": {"uploads": uploads}}}]}

    return _build


@pytest.fixture
def yt_playlist():
    def _build(*video_ids: str) -> dict:
        return {"items": [{"contentDetails": {"videoId": vid}} for vid in video_ids]}

    return _build


@pytest.fixture
def yt_video():
    def _build(
        video_id: str,
        broadcast: str = "none",
        title: str | None = None,
        published: str = "2026-02-27T10:00:00Z",
        actual_start: str | None = None,
        scheduled_start: str | None = None,
        thumbnails: dict | None = None,
    ) -> dict:
        video = {
            "id": video_id,
            "snippet": {
                "title": title if title is not None else f"Video {video_id}",
                "channelTitle": "Some Channel",
                "publishedAt": published,
                "liveBroadcastContent": broadcast,
                "thumbnails": thumbnails
                if thumbnails is not None
                else {
                    "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                    "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
                },
            },
        }
        details = {}
        if actual_start:
            details["actualStartTime"] = actual_start
        if scheduled_start:
            details["scheduledStartTime"] = scheduled_start
        if details:
            video["liveStreamingDetails"] = details
        return video

    return _build
