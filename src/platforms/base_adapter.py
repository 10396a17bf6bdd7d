"""
Base adapter interface and shared functionality for platform adapters.

Each platform adapter turns a channel handle into a short ordered list of
StreamItems plus the number of seconds that answer may be cached. The base
class provides:
- Upstream JSON fetching with HTTP errors mapped to UpstreamError
- Logging, tracing spans and metrics around every channel fetch
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from src.observability.metrics import get_metrics
from src.observability.tracing import get_tracer, traced
from src.platforms.errors import UpstreamError
from src.platforms.http_client import APIKeyRotator, HTTPClient, HTTPClientError
from src.platforms.schemas import ChannelItems, Platform

logger = logging.getLogger(__name__)

_tracer = get_tracer("stream-feed.platforms")


class BaseAdapter(ABC):
    """
    Abstract base class for platform adapters.

    Subclasses must implement:
        - platform: Platform enum value
        - _fetch_channel(): Call the upstream API for one handle

    Subclasses may override:
        - prepare(): Per-feed setup shared by every handle (e.g. auth)

    The base class handles:
        - Mapping HTTP failures to UpstreamError
        - Logging, metrics and tracing
    """

    def __init__(self, http: HTTPClient):
        """
        Initialize adapter.

        Args:
            http: Entered HTTPClient used for every upstream call
        """
        self._http = http

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Return the platform this adapter handles."""
        ...

    @property
    def name(self) -> str:
        """Human-readable adapter name."""
        return f"{self.platform.value}_adapter"

    async def prepare(self) -> None:
        """
        Run once per feed build before any handle of this platform is fetched.

        Raising here marks every uncached source of the platform as failed.
        """
        return None

    @abstractmethod
    async def _fetch_channel(self, handle: str) -> ChannelItems:
        """
        Fetch current items for one handle.

        Raises:
            UpstreamError: On any non-success upstream response
        """
        ...

    async def fetch_channel_items(self, handle: str) -> ChannelItems:
        """
        Fetch items for a handle.

        This is the entry point called by the feed aggregator.
        """
        metrics = get_metrics()
        start = time.perf_counter()

        with traced(_tracer, f"{self.platform.value}.fetch_channel", {"handle": handle}):
            try:
                result = await self._fetch_channel(handle)
            except UpstreamError as e:
                metrics.record_upstream_call(
                    self.platform, "error", time.perf_counter() - start
                )
                logger.warning(f"{self.name} failed for {handle}: {e.message}")
                raise

        metrics.record_upstream_call(self.platform, "success", time.perf_counter() - start)
        logger.debug(
            f"{self.name} fetched {len(result.items)} items for {handle} "
            f"(ttl={result.ttl_seconds}s)"
        )
        return result

    async def _get_json(
        self,
        url: str,
        what: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        api_key_rotator: APIKeyRotator | None = None,
        api_key_param: str | None = None,
    ) -> dict[str, Any]:
        """
        GET a JSON object from the upstream API.

        Args:
            url: Endpoint URL
            what: Short label used in error messages (e.g. "streams")

        Raises:
            UpstreamError: Non-success status, transport failure or non-object body
        """
        try:
            response = await self._http.get(
                url,
                params=params,
                headers=headers,
                api_key_rotator=api_key_rotator,
                api_key_param=api_key_param,
            )
        except HTTPClientError as e:
            status = e.status_code if e.status_code is not None else "network"
            raise UpstreamError(
                f"{self.platform.value} {what} fetch failed: {status}",
                status=e.status_code,
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{self.platform.value} {what} returned invalid JSON",
                status=response.status_code,
            ) from e

        if not isinstance(body, dict):
            raise UpstreamError(
                f"{self.platform.value} {what} returned unexpected payload",
                status=response.status_code,
            )
        return body
