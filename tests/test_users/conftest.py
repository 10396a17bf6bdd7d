"""Shared fixtures for users tests."""

from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def mock_database() -> AsyncMock:
    """Mock Database instance matching the Database API."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="CREATE TABLE")
    return db
