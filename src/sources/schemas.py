"""Data models for the sources module."""

import re
from dataclasses import dataclass
from datetime import datetime

_ID_UNSAFE = re.compile(r"[^a-z0-9_-]")


@dataclass
class Source:
    """A channel a user tracks on one platform.

    ``handle`` is the platform-native identifier: the channel id (``UC...``)
    for YouTube, the login for Twitch. ``id`` is unique per user only.
    Platform is kept as plain text so rows written for a platform this
    build does not know still load; the aggregator skips them.
    """

    id: str
    user_id: str
    platform: str
    handle: str
    display_name: str | None = None
    url: str | None = None
    enabled: bool = True
    created_at: datetime | None = None


def normalize_handle(platform: str, handle: str) -> str:
    """Trim a handle, drop a leading ``@`` and lowercase Twitch logins."""
    handle = handle.strip()
    if handle.startswith("@"):
        handle = handle[1:]
    if platform == "twitch":
        handle = handle.lower()
    return handle


def make_source_id(platform: str, handle: str) -> str:
    """Derive a stable source id such as ``twitch-some_login``."""
    slug = _ID_UNSAFE.sub("-", normalize_handle(platform, handle).lower())
    return f"{platform}-{slug}"
