"""Shared fixtures for API tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.dependencies import (
    get_cache_store,
    get_feed_aggregator,
    get_flags_repository,
    get_sources_repository,
    get_users_repository,
    get_youtube_adapter,
)
from src.config.settings import get_settings
from src.users.schemas import AccessRole, User

OWNER_TOKEN = "owner-token-abc"
READ_TOKEN = "read-token-xyz"
ADMIN_TOKEN = "admin-secret"

USER = User(
    user_id="user-1",
    owner_token=OWNER_TOKEN,
    read_token=READ_TOKEN,
    created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
)


@pytest.fixture
def owner_headers() -> dict:
    return {"X-USER-TOKEN": OWNER_TOKEN}


@pytest.fixture
def read_headers() -> dict:
    return {"X-USER-TOKEN": READ_TOKEN}


@pytest.fixture
def admin_headers() -> dict:
    return {"X-ADMIN-TOKEN": ADMIN_TOKEN}


@pytest.fixture
def mock_users_repo():
    """Mock UsersRepository knowing one user with both tokens."""
    repo = AsyncMock()

    async def _resolve(token):
        if token == OWNER_TOKEN:
            return USER, AccessRole.OWNER
        if token == READ_TOKEN:
            return USER, AccessRole.READ
        return None

    repo.resolve_token.side_effect = _resolve
    repo.create_user = AsyncMock(return_value=User(
        user_id="new-user",
        owner_token="new-owner",
        read_token="new-read",
    ))
    return repo


@pytest.fixture
def mock_sources_repo():
    """Mock SourcesRepository."""
    repo = AsyncMock()
    repo.list_for_user = AsyncMock(return_value=[])
    repo.upsert = AsyncMock(return_value="insert")
    repo.get = AsyncMock(return_value=None)
    repo.set_enabled = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_flags_repo():
    """Mock FlagsRepository with maintenance off."""
    repo = AsyncMock()
    repo.get_flag = AsyncMock(return_value=False)
    repo.set_flag = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_aggregator():
    """Mock FeedAggregator."""
    return MagicMock()


@pytest.fixture
def mock_youtube_adapter():
    """Mock YouTubeAdapter."""
    adapter = MagicMock()
    adapter.resolve_channel = AsyncMock()
    return adapter


@pytest.fixture
def app(
    monkeypatch,
    cache,
    mock_users_repo,
    mock_sources_repo,
    mock_flags_repo,
    mock_aggregator,
    mock_youtube_adapter,
):
    """App with every repository and service dependency overridden."""
    monkeypatch.setenv("ADMIN_TOKEN", ADMIN_TOKEN)
    get_settings.cache_clear()

    app = create_app()
    app.dependency_overrides[get_users_repository] = lambda: mock_users_repo
    app.dependency_overrides[get_sources_repository] = lambda: mock_sources_repo
    app.dependency_overrides[get_flags_repository] = lambda: mock_flags_repo
    app.dependency_overrides[get_feed_aggregator] = lambda: mock_aggregator
    app.dependency_overrides[get_youtube_adapter] = lambda: mock_youtube_adapter
    app.dependency_overrides[get_cache_store] = lambda: cache

    yield app

    app.dependency_overrides.clear()
    get_settings.cache_clear()


@pytest.fixture
def client(app):
    """FastAPI TestClient with dependency overrides."""
    with TestClient(app) as c:
        yield c
