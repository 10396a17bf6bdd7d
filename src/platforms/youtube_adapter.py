"""
YouTube Data API v3 adapter.

For a channel id it:
1. Resolves the channel's uploads playlist (cached for a day, it rarely changes)
2. Reads the most recent uploads from that playlist
3. Fetches live/scheduling detail for all of them in one batched videos call

Items are classified from ``snippet.liveBroadcastContent``. When anything is
live or upcoming only those are returned; otherwise the few most recent
uploads are returned as archive items. The cache TTL follows the most
urgent status present: a live channel changes state fastest.
"""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

from src.cache.base import CacheStore, uploads_cache_key
from src.config.settings import get_settings
from src.platforms.base_adapter import BaseAdapter
from src.platforms.errors import ChannelNotFound, UnsupportedChannelUrl, UpstreamError
from src.platforms.http_client import APIKeyRotator, HTTPClient
from src.platforms.schemas import ChannelItems, Platform, StreamItem, StreamStatus

logger = logging.getLogger(__name__)

# YouTube API endpoints
YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
CHANNELS_URL = f"{YOUTUBE_API_BASE}/channels"
PLAYLIST_ITEMS_URL = f"{YOUTUBE_API_BASE}/playlistItems"
VIDEOS_URL = f"{YOUTUBE_API_BASE}/videos"

_YOUTUBE_HOSTS = {"youtube.com", "m.youtube.com"}

_BROADCAST_STATUS = {
    "live": StreamStatus.LIVE,
    "upcoming": StreamStatus.SCHEDULED,
}


@dataclass(frozen=True)
class ResolvedChannel:
    """A channel URL or handle resolved to its canonical channel id."""

    channel_id: str
    url: str


def channel_url(channel_id: str) -> str:
    return f"https://www.youtube.com/channel/{channel_id}"


def _thumbnail(snippet: dict[str, Any]) -> str | None:
    thumbs = snippet.get("thumbnails") or {}
    for size in ("medium", "high", "default"):
        url = (thumbs.get(size) or {}).get("url")
        if url:
            return url
    return None


class YouTubeAdapter(BaseAdapter):
    """
    YouTube adapter keyed by channel id (``UC...``).

    Quota:
        - channels.list: 1 unit (skipped while the uploads id is cached)
        - playlistItems.list: 1 unit
        - videos.list: 1 unit for up to 50 ids
    """

    def __init__(
        self,
        http: HTTPClient,
        cache: CacheStore,
        api_key_rotator: APIKeyRotator | None = None,
        recent_limit: int = 10,
        archive_limit: int = 3,
        live_ttl: int = 120,
        scheduled_ttl: int = 600,
        archive_ttl: int = 1800,
        uploads_ttl: int = 86400,
    ):
        """
        Initialize YouTube adapter.

        Args:
            http: Entered HTTP client
            cache: Cache store for uploads playlist ids
            api_key_rotator: API keys (defaults to YOUTUBE_API_KEYS)
            recent_limit: Uploads inspected per channel
            archive_limit: Archive items returned when nothing is live/upcoming
            live_ttl: Cache seconds when something is live
            scheduled_ttl: Cache seconds when something is upcoming
            archive_ttl: Cache seconds for archive-only results
            uploads_ttl: Cache seconds for the uploads playlist id
        """
        super().__init__(http)
        self._cache = cache
        self._keys = api_key_rotator or APIKeyRotator.from_env_var(
            get_settings().youtube_api_keys
        )
        self._recent_limit = recent_limit
        self._archive_limit = archive_limit
        self._live_ttl = live_ttl
        self._scheduled_ttl = scheduled_ttl
        self._archive_ttl = archive_ttl
        self._uploads_ttl = uploads_ttl

        if self._keys is None:
            logger.warning(
                "YouTube API key not configured. "
                "YouTube sources will report errors."
            )

    @property
    def platform(self) -> Platform:
        return Platform.YOUTUBE

    async def _api_get(self, url: str, what: str, params: dict[str, Any]) -> dict[str, Any]:
        if self._keys is None:
            raise UpstreamError("youtube api key missing")
        return await self._get_json(
            url,
            what,
            params=params,
            api_key_rotator=self._keys,
            api_key_param="key",
        )

    async def _uploads_playlist_id(self, channel_id: str) -> str:
        """Resolve (and cache) the uploads playlist for a channel."""
        cache_key = uploads_cache_key(self.platform.value, channel_id)
        cached = await self._cache.read_fresh(cache_key)
        if cached and cached.get("playlistId"):
            return cached["playlistId"]

        body = await self._api_get(
            CHANNELS_URL,
            "channels",
            {"part": "contentDetails", "id": channel_id},
        )
        items = body.get("items") or []
        playlist_id = None
        if items:
            related = (items[0].get("contentDetails") or {}).get("relatedPlaylists") or {}
            playlist_id = related.get("uploads")
        if not playlist_id:
            raise UpstreamError(f"youtube channel not found: {channel_id}", status=404)

        await self._cache.write(cache_key, {"playlistId": playlist_id}, self._uploads_ttl)
        return playlist_id

    async def _fetch_channel(self, handle: str) -> ChannelItems:
        playlist_id = await self._uploads_playlist_id(handle)

        playlist = await self._api_get(
            PLAYLIST_ITEMS_URL,
            "playlistItems",
            {
                "part": "contentDetails",
                "playlistId": playlist_id,
                "maxResults": self._recent_limit,
            },
        )

        video_ids: list[str] = []
        for entry in playlist.get("items") or []:
            video_id = (entry.get("contentDetails") or {}).get("videoId")
            if video_id and video_id not in video_ids:
                video_ids.append(video_id)

        if not video_ids:
            return ChannelItems(items=[], ttl_seconds=self._archive_ttl)

        details = await self._api_get(
            VIDEOS_URL,
            "videos",
            {"part": "snippet,liveStreamingDetails", "id": ",".join(video_ids)},
        )
        by_id = {
            v["id"]: v for v in details.get("items") or [] if isinstance(v, dict) and v.get("id")
        }

        # Playlist order is newest first; videos missing from the batch
        # (private or deleted) are skipped.
        classified = [
            self._to_item(by_id[vid]) for vid in video_ids if vid in by_id
        ]
        return self._select(classified)

    def _select(self, items: list[StreamItem]) -> ChannelItems:
        """Apply the live/upcoming preference rule and pick the TTL."""
        current = [i for i in items if i.status is not StreamStatus.ARCHIVE]
        if current:
            has_live = any(i.status is StreamStatus.LIVE for i in current)
            ttl = self._live_ttl if has_live else self._scheduled_ttl
            return ChannelItems(items=current, ttl_seconds=ttl)

        return ChannelItems(
            items=items[: self._archive_limit],
            ttl_seconds=self._archive_ttl,
        )

    def _to_item(self, video: dict[str, Any]) -> StreamItem:
        snippet = video.get("snippet") or {}
        live = video.get("liveStreamingDetails") or {}
        status = _BROADCAST_STATUS.get(
            snippet.get("liveBroadcastContent"), StreamStatus.ARCHIVE
        )

        if status is StreamStatus.LIVE:
            start_at = live.get("actualStartTime") or live.get("scheduledStartTime")
        elif status is StreamStatus.SCHEDULED:
            start_at = live.get("scheduledStartTime")
        else:
            start_at = snippet.get("publishedAt")

        return StreamItem(
            platform=Platform.YOUTUBE,
            channel_name=snippet.get("channelTitle"),
            title=snippet.get("title") or "(no title)",
            url=f"https://www.youtube.com/watch?v={video['id']}",
            thumbnail_url=_thumbnail(snippet),
            status=status,
            start_at=start_at,
        )

    async def resolve_channel(self, raw: str) -> ResolvedChannel:
        """
        Resolve a channel URL (``/channel/UC...`` or ``/@handle``) or a bare
        ``@handle`` to a channel id.

        Raises:
            UnsupportedChannelUrl: Not a YouTube channel location
            ChannelNotFound: Handle lookup matched nothing
            UpstreamError: The lookup call failed
        """
        raw = (raw or "").strip()
        if raw.startswith("@"):
            return await self._resolve_handle(raw)

        parts = urlsplit(raw)
        if parts.scheme not in ("http", "https"):
            raise UnsupportedChannelUrl(f"unsupported url: {raw}")

        host = (parts.hostname or "").lower()
        if host.startswith("www."):
            host = host[len("www."):]
        if host not in _YOUTUBE_HOSTS:
            raise UnsupportedChannelUrl(f"unsupported host: {host}")

        segments = [s for s in parts.path.split("/") if s]
        if len(segments) >= 2 and segments[0] == "channel" and segments[1].startswith("UC"):
            return ResolvedChannel(channel_id=segments[1], url=channel_url(segments[1]))
        if segments and segments[0].startswith("@") and len(segments[0]) > 1:
            return await self._resolve_handle(segments[0])

        raise UnsupportedChannelUrl(f"unsupported path: {parts.path or '/'}")

    async def _resolve_handle(self, handle: str) -> ResolvedChannel:
        body = await self._api_get(
            CHANNELS_URL,
            "channels",
            {"part": "id", "forHandle": handle},
        )
        items = body.get("items") or []
        channel_id = items[0].get("id") if items else None
        if not channel_id:
            raise ChannelNotFound(handle)
        logger.info(f"Resolved YouTube handle {handle} to {channel_id}")
        return ResolvedChannel(channel_id=channel_id, url=channel_url(channel_id))
