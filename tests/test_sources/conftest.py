"""Shared fixtures for sources tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from src.sources.schemas import Source


@pytest.fixture
def mock_database() -> AsyncMock:
    """Mock Database instance matching the Database API."""
    db = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.fetchval = AsyncMock(return_value=None)
    db.fetchrow = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="UPDATE 1")
    return db


@pytest.fixture
def sample_source() -> Source:
    """A sample Source for testing."""
    return Source(
        id="twitch-somestreamer",
        user_id="user-1",
        platform="twitch",
        handle="somestreamer",
        display_name="Some Streamer",
        url="https://www.twitch.tv/somestreamer",
    )


@pytest.fixture
def sample_db_row() -> dict:
    """A dict mimicking an asyncpg Record for a source."""
    return {
        "user_id": "user-1",
        "id": "yt-main",
        "platform": "youtube",
        "handle": "UCabc",
        "display_name": "Main Channel",
        "url": "https://www.youtube.com/channel/UCabc",
        "enabled": True,
        "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }
