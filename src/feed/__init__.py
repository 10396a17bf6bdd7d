"""Merged multi-platform feed building."""

from src.feed.aggregator import FeedAggregator, sort_items
from src.feed.config import FeedConfig
from src.feed.factory import build_adapters, create_http_client
from src.feed.schemas import FeedError, FeedResponse
from src.feed.transforms import (
    DEFAULT_TRANSFORMS,
    TransformContext,
    apply_transforms,
    fill_channel_name,
    stamp_source,
)

__all__ = [
    "DEFAULT_TRANSFORMS",
    "FeedAggregator",
    "FeedConfig",
    "FeedError",
    "FeedResponse",
    "TransformContext",
    "apply_transforms",
    "build_adapters",
    "create_http_client",
    "fill_channel_name",
    "sort_items",
    "stamp_source",
]
