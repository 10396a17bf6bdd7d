"""
Stream item schema shared by the platform adapters and the feed aggregator.

Items serialise with camelCase keys (``channelName``, ``thumbnailUrl``,
``startAt``) because that is the JSON shape clients poll and the shape kept
in the per-channel cache.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Platform(str, Enum):
    """Supported upstream platforms."""

    YOUTUBE = "youtube"
    TWITCH = "twitch"


class StreamStatus(str, Enum):
    """Channel state for one item, in feed sort order."""

    LIVE = "live"
    SCHEDULED = "scheduled"
    ARCHIVE = "archive"

    @property
    def priority(self) -> int:
        return _STATUS_PRIORITY[self]


_STATUS_PRIORITY = {
    StreamStatus.LIVE: 0,
    StreamStatus.SCHEDULED: 1,
    StreamStatus.ARCHIVE: 2,
}


class StreamItem(BaseModel):
    """One live, scheduled or recent entry for a channel."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    platform: Platform
    source_id: str | None = None
    channel_name: str | None = None
    title: str = Field(..., description="Stream or video title")
    url: str
    thumbnail_url: str | None = None
    status: StreamStatus
    start_at: str | None = Field(
        default=None,
        description="ISO-8601 start time (actual, scheduled or published)",
    )

    def to_cache(self) -> dict[str, Any]:
        """Serialise for the handle-scoped channel cache (no source id)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"source_id"})


@dataclass
class ChannelItems:
    """Adapter output for one handle plus how long it may be cached."""

    items: list[StreamItem] = field(default_factory=list)
    ttl_seconds: int = 0


def isoformat_z(value: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when missing or malformed."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
