"""Platform adapters for YouTube and Twitch."""

from src.platforms.base_adapter import BaseAdapter
from src.platforms.errors import (
    ChannelNotFound,
    CredentialsMissing,
    TokenBrokerError,
    UnsupportedChannelUrl,
    UpstreamAuthFailure,
    UpstreamError,
)
from src.platforms.http_client import APIKeyRotator, HTTPClient, HTTPClientError, RetryConfig
from src.platforms.schemas import ChannelItems, Platform, StreamItem, StreamStatus
from src.platforms.token_broker import TwitchTokenBroker
from src.platforms.twitch_adapter import TwitchAdapter
from src.platforms.youtube_adapter import ResolvedChannel, YouTubeAdapter

__all__ = [
    "APIKeyRotator",
    "BaseAdapter",
    "ChannelItems",
    "ChannelNotFound",
    "CredentialsMissing",
    "HTTPClient",
    "HTTPClientError",
    "Platform",
    "ResolvedChannel",
    "RetryConfig",
    "StreamItem",
    "StreamStatus",
    "TokenBrokerError",
    "TwitchAdapter",
    "TwitchTokenBroker",
    "UnsupportedChannelUrl",
    "UpstreamAuthFailure",
    "UpstreamError",
    "YouTubeAdapter",
]
