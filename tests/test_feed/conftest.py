"""Fixtures for feed aggregator tests."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.feed.aggregator import FeedAggregator
from src.feed.config import FeedConfig
from src.platforms.base_adapter import BaseAdapter
from src.platforms.errors import UpstreamError
from src.platforms.schemas import ChannelItems, Platform, StreamItem, StreamStatus
from src.sources.schemas import Source


class FakeAdapter(BaseAdapter):
    """
    Adapter returning canned results per handle and recording calls.

    ``delays`` maps a handle to seconds slept before answering;
    ``prepare_delay`` stalls ``prepare()`` the same way.
    """

    def __init__(
        self, platform: Platform, results=None, prepare_error=None, delays=None, prepare_delay=0.0
    ):
        super().__init__(http=None)
        self._platform = platform
        self.results = dict(results or {})
        self.prepare_error = prepare_error
        self.delays = dict(delays or {})
        self.prepare_delay = prepare_delay
        self.calls: list[str] = []
        self.prepare_calls = 0

    @property
    def platform(self) -> Platform:
        return self._platform

    async def prepare(self) -> None:
        self.prepare_calls += 1
        if self.prepare_delay:
            await asyncio.sleep(self.prepare_delay)
        if self.prepare_error is not None:
            raise self.prepare_error

    async def _fetch_channel(self, handle: str) -> ChannelItems:
        self.calls.append(handle)
        if handle in self.delays:
            await asyncio.sleep(self.delays[handle])
        result = self.results.get(handle)
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise UpstreamError(f"{self._platform.value} unknown handle {handle}", status=404)
        return result


@pytest.fixture
def fake_adapter():
    """Factory for FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def make_item():
    def _make(
        title: str,
        status: StreamStatus = StreamStatus.ARCHIVE,
        platform: Platform = Platform.YOUTUBE,
        start_at: str | None = None,
        channel_name: str | None = "Channel",
    ) -> StreamItem:
        return StreamItem(
            platform=platform,
            channel_name=channel_name,
            title=title,
            url=f"https://example.com/{title.replace(' ', '-')}",
            status=status,
            start_at=start_at,
        )

    return _make


@pytest.fixture
def make_source():
    def _make(
        source_id: str,
        handle: str,
        platform: str = "youtube",
        user_id: str = "user-1",
        enabled: bool = True,
        display_name: str | None = None,
    ) -> Source:
        return Source(
            id=source_id,
            user_id=user_id,
            platform=platform,
            handle=handle,
            display_name=display_name,
            enabled=enabled,
        )

    return _make


@pytest.fixture
def sources_repo():
    """Sources repository mock backed by a plain list of Source objects."""
    repo = AsyncMock()
    repo.rows = []

    async def _list_for_user(user_id, enabled_only=False):
        return [
            s for s in repo.rows
            if s.user_id == user_id and (s.enabled or not enabled_only)
        ]

    repo.list_for_user.side_effect = _list_for_user
    return repo


@pytest.fixture
def feed_config() -> FeedConfig:
    return FeedConfig(ttl_seconds=90, max_concurrency=4)


@pytest.fixture
def build_aggregator(cache, sources_repo, feed_config):
    def _build(*adapters: BaseAdapter, **kwargs) -> FeedAggregator:
        return FeedAggregator(
            cache=cache,
            sources=sources_repo,
            adapters={a.platform: a for a in adapters},
            config=feed_config,
            **kwargs,
        )

    return _build
