"""
Twitch Helix adapter.

A login that is streaming yields one live item per stream. A login that is
not streaming yields a single synthetic archive item built from the user
profile so the channel still shows up in the feed.

Authentication uses an app access token from the TwitchTokenBroker.
``prepare()`` makes sure a token exists once per feed build; when that
fails the aggregator reports every uncached Twitch source as an error
without calling this adapter again. Each fetch then reads the token back
from the broker, which serves it from the cache store.
"""

import logging
from typing import Any

from src.platforms.base_adapter import BaseAdapter
from src.platforms.http_client import HTTPClient
from src.platforms.schemas import ChannelItems, Platform, StreamItem, StreamStatus
from src.platforms.token_broker import TwitchTokenBroker

logger = logging.getLogger(__name__)

HELIX_API_BASE = "https://api.twitch.tv/helix"
STREAMS_URL = f"{HELIX_API_BASE}/streams"
USERS_URL = f"{HELIX_API_BASE}/users"

THUMBNAIL_WIDTH = 320
THUMBNAIL_HEIGHT = 180


def channel_url(login: str) -> str:
    return f"https://www.twitch.tv/{login}"


def _thumbnail(template: Any) -> str | None:
    if not isinstance(template, str) or not template:
        return None
    return template.replace("{width}", str(THUMBNAIL_WIDTH)).replace(
        "{height}", str(THUMBNAIL_HEIGHT)
    )


class TwitchAdapter(BaseAdapter):
    """Twitch adapter keyed by user login."""

    def __init__(
        self,
        http: HTTPClient,
        broker: TwitchTokenBroker,
        live_ttl: int = 120,
        offline_ttl: int = 600,
    ):
        """
        Initialize Twitch adapter.

        Args:
            http: Entered HTTP client
            broker: App access token source
            live_ttl: Cache seconds while the channel is live
            offline_ttl: Cache seconds while the channel is offline
        """
        super().__init__(http)
        self._broker = broker
        self._live_ttl = live_ttl
        self._offline_ttl = offline_ttl

    @property
    def platform(self) -> Platform:
        return Platform.TWITCH

    async def prepare(self) -> None:
        await self._broker.get_token()

    async def _headers(self) -> dict[str, str]:
        # Token lives only in the cache store; a valid one is one cache read.
        token = await self._broker.get_token()
        return {
            "Client-ID": self._broker.client_id or "",
            "Authorization": f"Bearer {token}",
        }

    async def _fetch_channel(self, handle: str) -> ChannelItems:
        login = handle.strip().lower()
        headers = await self._headers()

        body = await self._get_json(
            STREAMS_URL, "streams", params={"user_login": login}, headers=headers
        )
        streams = [s for s in body.get("data") or [] if isinstance(s, dict)]

        if streams:
            items = [self._stream_item(login, s) for s in streams]
            return ChannelItems(items=items, ttl_seconds=self._live_ttl)

        logger.debug(f"Twitch {login} is offline, using profile")
        body = await self._get_json(
            USERS_URL, "users", params={"login": login}, headers=headers
        )
        users = body.get("data") or []
        user = users[0] if users and isinstance(users[0], dict) else {}
        return ChannelItems(
            items=[self._offline_item(login, user)],
            ttl_seconds=self._offline_ttl,
        )

    def _stream_item(self, login: str, stream: dict[str, Any]) -> StreamItem:
        return StreamItem(
            platform=Platform.TWITCH,
            channel_name=stream.get("user_name") or None,
            title=stream.get("title") or "(no title)",
            url=channel_url(login),
            thumbnail_url=_thumbnail(stream.get("thumbnail_url")),
            status=StreamStatus.LIVE,
            start_at=stream.get("started_at") or None,
        )

    def _offline_item(self, login: str, user: dict[str, Any]) -> StreamItem:
        name = user.get("display_name") or user.get("login") or login
        return StreamItem(
            platform=Platform.TWITCH,
            channel_name=name,
            title=f"{name} - Offline",
            url=channel_url(login),
            thumbnail_url=user.get("profile_image_url") or None,
            status=StreamStatus.ARCHIVE,
        )

