"""Tests for SourcesRepository."""

from unittest.mock import AsyncMock

import pytest

from src.sources.repository import SourcesRepository
from src.sources.schemas import Source


class TestCreateTable:
    @pytest.mark.asyncio
    async def test_primary_key_is_per_user(self, mock_database: AsyncMock) -> None:
        await SourcesRepository(mock_database).create_table()

        sql = mock_database.execute.call_args[0][0]
        assert "CREATE TABLE IF NOT EXISTS sources" in sql
        assert "PRIMARY KEY (user_id, id)" in sql


class TestUpsert:
    """Tests for single-source upsert."""

    @pytest.mark.asyncio
    async def test_passes_correct_params(
        self, mock_database: AsyncMock, sample_source: Source
    ) -> None:
        mock_database.fetchval.return_value = True
        repo = SourcesRepository(mock_database)

        await repo.upsert(sample_source)

        args = mock_database.fetchval.call_args[0]
        sql = args[0]
        assert "INSERT INTO sources" in sql
        assert "ON CONFLICT (user_id, id) DO UPDATE" in sql
        assert args[1:] == (
            "user-1",
            "twitch-somestreamer",
            "twitch",
            "somestreamer",
            "Some Streamer",
            "https://www.twitch.tv/somestreamer",
            True,
        )

    @pytest.mark.asyncio
    async def test_insert_action(self, mock_database: AsyncMock, sample_source: Source) -> None:
        mock_database.fetchval.return_value = True

        assert await SourcesRepository(mock_database).upsert(sample_source) == "insert"

    @pytest.mark.asyncio
    async def test_update_action(self, mock_database: AsyncMock, sample_source: Source) -> None:
        mock_database.fetchval.return_value = False

        assert await SourcesRepository(mock_database).upsert(sample_source) == "update"


class TestGet:
    """Tests for single-source lookup."""

    @pytest.mark.asyncio
    async def test_found(self, mock_database: AsyncMock, sample_db_row: dict) -> None:
        mock_database.fetchrow.return_value = sample_db_row
        repo = SourcesRepository(mock_database)

        result = await repo.get("user-1", "yt-main")

        assert result is not None
        assert result.id == "yt-main"
        assert result.platform == "youtube"
        assert result.handle == "UCabc"
        assert result.enabled is True
        args = mock_database.fetchrow.call_args[0]
        assert "WHERE user_id = $1 AND id = $2" in args[0]
        assert args[1:] == ("user-1", "yt-main")

    @pytest.mark.asyncio
    async def test_not_found(self, mock_database: AsyncMock) -> None:
        assert await SourcesRepository(mock_database).get("user-1", "missing") is None


class TestListForUser:
    """Tests for listing a user's sources."""

    @pytest.mark.asyncio
    async def test_all_sources(self, mock_database: AsyncMock, sample_db_row: dict) -> None:
        mock_database.fetch.return_value = [sample_db_row]
        repo = SourcesRepository(mock_database)

        result = await repo.list_for_user("user-1")

        assert [s.id for s in result] == ["yt-main"]
        sql = mock_database.fetch.call_args[0][0]
        assert "ORDER BY platform ASC, created_at DESC" in sql
        assert "enabled = TRUE" not in sql

    @pytest.mark.asyncio
    async def test_enabled_only(self, mock_database: AsyncMock) -> None:
        await SourcesRepository(mock_database).list_for_user("user-1", enabled_only=True)

        args = mock_database.fetch.call_args[0]
        assert "AND enabled = TRUE" in args[0]
        assert args[1] == "user-1"


class TestSetEnabled:
    """Tests for toggling a source."""

    @pytest.mark.asyncio
    async def test_existing_source(self, mock_database: AsyncMock) -> None:
        repo = SourcesRepository(mock_database)

        assert await repo.set_enabled("user-1", "yt-main", False) is True
        args = mock_database.execute.call_args[0]
        assert args[1:] == ("user-1", "yt-main", False)

    @pytest.mark.asyncio
    async def test_missing_source(self, mock_database: AsyncMock) -> None:
        mock_database.execute.return_value = "UPDATE 0"

        assert await SourcesRepository(mock_database).set_enabled("user-1", "nope", True) is False
