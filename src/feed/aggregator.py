"""
Feed aggregator.

Builds one user's merged feed from their enabled sources using two cache
tiers:
- ``feed:<userId>``: the whole response, short TTL, checked first
- ``<platform>:channel:<handle>``: adapter output per handle, shared by
  every user tracking that channel, TTL chosen by the adapter

Per-source failures never escape ``get_feed``; they are reported in the
response's ``errors`` list next to whatever items could be produced.
"""

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from functools import cmp_to_key

from src.cache.base import CacheStore, Clock, channel_cache_key, feed_cache_key
from src.feed.config import FeedConfig
from src.feed.schemas import FeedError, FeedResponse
from src.feed.transforms import DEFAULT_TRANSFORMS, Transform, TransformContext, apply_transforms
from src.observability.metrics import get_metrics
from src.observability.tracing import get_tracer, traced
from src.platforms.base_adapter import BaseAdapter
from src.platforms.errors import UpstreamError
from src.platforms.schemas import ChannelItems, Platform, StreamItem, isoformat_z, parse_timestamp
from src.sources.repository import SourcesRepository
from src.sources.schemas import Source

logger = logging.getLogger(__name__)

_tracer = get_tracer("stream-feed.feed")


def _compare(a: StreamItem, b: StreamItem) -> int:
    if a.status is not b.status:
        return a.status.priority - b.status.priority

    a_time = parse_timestamp(a.start_at)
    b_time = parse_timestamp(b.start_at)
    if a_time is not None and b_time is not None and a_time != b_time:
        return -1 if a_time < b_time else 1

    return (a.title > b.title) - (a.title < b.title)


def sort_items(items: Sequence[StreamItem]) -> list[StreamItem]:
    """
    Order items live first, then scheduled, then archive.

    Within a status, items whose start times both parse and differ are
    ordered earliest first; everything else falls back to title.
    """
    return sorted(items, key=cmp_to_key(_compare))


def _platform_of(source: Source) -> Platform | None:
    try:
        return Platform(source.platform)
    except ValueError:
        return None


class FeedAggregator:
    """
    Merge a user's enabled sources into one ordered feed.

    Usage:
        aggregator = FeedAggregator(cache, sources_repo, adapters)
        feed = await aggregator.get_feed(user_id)
    """

    def __init__(
        self,
        cache: CacheStore,
        sources: SourcesRepository,
        adapters: Mapping[Platform, BaseAdapter],
        config: FeedConfig | None = None,
        clock: Clock | None = None,
        transforms: Sequence[Transform] = DEFAULT_TRANSFORMS,
    ):
        """
        Initialize the aggregator.

        Args:
            cache: Store for both cache tiers
            sources: Source registry
            adapters: Adapter per supported platform
            config: Feed settings (defaults from FEED_* environment)
            clock: Time source for ``updatedAt`` (defaults to the cache clock)
            transforms: Per-source item pipeline, applied in order
        """
        self._cache = cache
        self._sources = sources
        self._adapters = dict(adapters)
        self._config = config or FeedConfig()
        self._clock = clock or cache.now
        self._transforms = tuple(transforms)

    async def get_feed(self, user_id: str) -> FeedResponse:
        """Return the user's feed, from the whole-feed cache when fresh."""
        metrics = get_metrics()
        key = feed_cache_key(user_id)

        cached = await self._cache.read_fresh(key)
        if cached is not None:
            metrics.record_feed_request(cache_hit=True)
            logger.debug(f"Feed cache hit for {user_id}")
            return FeedResponse.model_validate(cached)

        metrics.record_feed_request(cache_hit=False)
        start = time.perf_counter()

        with traced(_tracer, "feed.build", {"user_id": user_id}):
            response = await self._build(user_id)

        await self._cache.write(key, response.to_json(), self._config.ttl_seconds)

        elapsed = time.perf_counter() - start
        metrics.record_feed_build(elapsed)
        logger.info(
            f"Built feed for {user_id}: {len(response.items)} items, "
            f"{len(response.errors)} errors in {elapsed:.3f}s"
        )
        return response

    async def _build(self, user_id: str) -> FeedResponse:
        metrics = get_metrics()
        sources = await self._sources.list_for_user(user_id, enabled_only=True)

        active: list[tuple[Source, Platform]] = []
        for source in sources:
            if not source.enabled:
                continue
            platform = _platform_of(source)
            if platform is None or platform not in self._adapters:
                logger.warning(
                    f"Ignoring source {source.id}: unsupported platform {source.platform!r}"
                )
                continue
            active.append((source, platform))

        # Channel results keyed by cache key; a str value is a failure message.
        results: dict[str, list[StreamItem] | str] = {}
        misses: dict[Platform, dict[str, str]] = {}

        for source, platform in active:
            cache_key = channel_cache_key(platform.value, source.handle)
            if cache_key in results or cache_key in misses.get(platform, {}):
                continue

            cached = await self._cache.read_fresh(cache_key)
            if cached is not None:
                metrics.record_channel_cache(platform, hit=True)
                results[cache_key] = [
                    StreamItem.model_validate(raw) for raw in cached.get("items") or []
                ]
            else:
                metrics.record_channel_cache(platform, hit=False)
                misses.setdefault(platform, {})[cache_key] = source.handle

        results.update(await self._fetch_misses(misses))

        items: list[StreamItem] = []
        errors: list[FeedError] = []
        for source, platform in active:
            outcome = results[channel_cache_key(platform.value, source.handle)]
            if isinstance(outcome, str):
                metrics.record_feed_error(platform)
                errors.append(
                    FeedError(platform=platform, source_id=source.id, message=outcome)
                )
                continue
            items.extend(
                apply_transforms(TransformContext(source=source), outcome, self._transforms)
            )

        return FeedResponse(
            ok=True,
            updated_at=isoformat_z(self._clock()),
            items=sort_items(items),
            errors=errors,
        )

    async def _fetch_misses(
        self, misses: dict[Platform, dict[str, str]]
    ) -> dict[str, list[StreamItem] | str]:
        """
        Refresh every uncached handle, at most ``max_concurrency`` at a time.

        Platforms refresh side by side under one deadline,
        ``fetch_deadline_seconds`` from now; whatever is unfinished by then is
        reported as timed out.
        """
        semaphore = asyncio.Semaphore(self._config.max_concurrency)
        deadline = asyncio.get_running_loop().time() + self._config.fetch_deadline_seconds

        per_platform = await asyncio.gather(
            *(
                self._refresh_platform(self._adapters[platform], handles, semaphore, deadline)
                for platform, handles in misses.items()
            )
        )
        results: dict[str, list[StreamItem] | str] = {}
        for outcome in per_platform:
            results.update(outcome)
        return results

    async def _refresh_platform(
        self,
        adapter: BaseAdapter,
        handles: dict[str, str],
        semaphore: asyncio.Semaphore,
        deadline: float,
    ) -> dict[str, list[StreamItem] | str]:
        failure = await self._prepare(adapter, deadline)
        if failure is not None:
            return {cache_key: failure for cache_key in handles}

        outcomes = await asyncio.gather(
            *(
                self._fetch_one(adapter, cache_key, handle, semaphore, deadline)
                for cache_key, handle in handles.items()
            )
        )
        return dict(zip(handles, outcomes))

    async def _prepare(self, adapter: BaseAdapter, deadline: float) -> str | None:
        """Run ``adapter.prepare()``; return a failure message or None."""
        try:
            async with asyncio.timeout_at(deadline):
                await adapter.prepare()
        except TimeoutError:
            message = f"{adapter.platform.value} setup timed out"
        except UpstreamError as e:
            message = e.message
        except Exception as e:
            logger.exception(f"{adapter.name} prepare crashed")
            message = str(e) or type(e).__name__
        else:
            return None

        logger.error(f"{adapter.name} unavailable for this feed: {message}")
        return message

    async def _fetch_one(
        self,
        adapter: BaseAdapter,
        cache_key: str,
        handle: str,
        semaphore: asyncio.Semaphore,
        deadline: float,
    ) -> list[StreamItem] | str:
        try:
            async with asyncio.timeout_at(deadline):
                async with semaphore:
                    fetched: ChannelItems = await adapter.fetch_channel_items(handle)
        except TimeoutError:
            logger.warning(f"{adapter.name} ran out of time on {handle}")
            return (
                f"{adapter.platform.value} fetch timed out after "
                f"{self._config.fetch_deadline_seconds:g}s"
            )
        except UpstreamError as e:
            return e.message
        except Exception as e:
            logger.exception(f"{adapter.name} crashed on {handle}")
            return str(e) or type(e).__name__

        await self._cache.write(
            cache_key,
            {"items": [item.to_cache() for item in fetched.items]},
            fetched.ttl_seconds,
        )
        return list(fetched.items)
