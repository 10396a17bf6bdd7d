"""
Shared httpx client for YouTube, Twitch and the Twitch token endpoint.

Every upstream call goes through ``HTTPClient.request``, which applies a
per-call timeout and retries 429, transient 5xx and transport failures with
capped exponential backoff. Any other httpx error, and any other status
at or above 400, raises ``HTTPClientError`` immediately so adapters can map
it to a platform error.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError)


@dataclass
class APIKeyRotator:
    """
    Cycles through several API keys so quota is spread across them.

    Built from a comma-separated value such as ``YOUTUBE_API_KEYS``.
    """

    keys: list[str]
    _next: int = field(default=0, repr=False)

    @classmethod
    def from_env_var(cls, value: str | None) -> "APIKeyRotator | None":
        """None when ``value`` holds no usable key."""
        keys = [k.strip() for k in (value or "").split(",") if k.strip()]
        return cls(keys=keys) if keys else None

    def next_key(self) -> str:
        # No await between read and increment, so concurrent tasks never
        # receive the same slot.
        key = self.keys[self._next]
        self._next = (self._next + 1) % len(self.keys)
        return key


@dataclass
class RetryConfig:
    """
    Retry policy for upstream calls.

    Delay before retry ``n`` (0-based) is
    ``min(max_backoff_seconds, base_delay * 2**n)`` plus up to
    ``jitter_factor`` of that delay at random.
    """

    max_retries: int = 2
    max_backoff_seconds: float = 8.0
    base_delay: float = 0.5
    jitter_factor: float = 0.1

    def calculate_backoff(self, attempt: int) -> float:
        delay = min(self.max_backoff_seconds, self.base_delay * (2**attempt))
        return delay * (1 + self.jitter_factor * random.random())

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in RETRYABLE_STATUSES

    def is_retryable_exception(self, exc: Exception) -> bool:
        return isinstance(exc, RETRYABLE_EXCEPTIONS)


class HTTPClientError(Exception):
    """Non-success response, or retries exhausted."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(HTTPClientError):
    """Still rate limited (429) after the last retry."""


class HTTPClient:
    """
    Async context manager around one ``httpx.AsyncClient``.

    Example:
        async with HTTPClient(RetryConfig(max_retries=2), timeout=10.0) as http:
            response = await http.get(
                "https://www.googleapis.com/youtube/v3/channels",
                params={"part": "contentDetails", "forHandle": "@somechannel"},
                api_key_rotator=rotator,
                api_key_param="key",
            )
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        api_key_rotator: APIKeyRotator | None = None,
        api_key_param: str | None = None,
    ) -> httpx.Response:
        return await self.request(
            "GET",
            url,
            params=params,
            headers=headers,
            api_key_rotator=api_key_rotator,
            api_key_param=api_key_param,
        )

    async def post(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """POST ``data`` form-encoded or ``json_body`` as JSON."""
        return await self.request(
            "POST", url, params=params, headers=headers, data=data, json_body=json_body
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        api_key_rotator: APIKeyRotator | None = None,
        api_key_param: str | None = None,
    ) -> httpx.Response:
        """
        Send a request, retrying per ``retry_config``.

        When a key rotator is given, each attempt uses the next key in
        ``api_key_param``.

        Raises:
            RateLimitError: 429 on the final attempt.
            HTTPClientError: Any other failure.
        """
        if self._client is None:
            raise RuntimeError("HTTPClient must be used as async context manager")

        attempts = self.retry_config.max_retries + 1

        for attempt in range(attempts):
            query = dict(params or {})
            if api_key_rotator is not None and api_key_param:
                query[api_key_param] = api_key_rotator.next_key()

            is_last = attempt == attempts - 1
            try:
                response = await self._client.request(
                    method, url, params=query or None, headers=headers, data=data, json=json_body
                )
            except RETRYABLE_EXCEPTIONS as e:
                if is_last:
                    raise HTTPClientError(
                        f"Request failed after {attempts} attempts: {type(e).__name__}"
                    ) from e
                await self._back_off(attempt, url, type(e).__name__)
                continue
            except httpx.HTTPError as e:
                raise HTTPClientError(f"Request to {url} failed: {type(e).__name__}") from e

            code = response.status_code
            if code < 400:
                return response

            if not self.retry_config.is_retryable_status(code):
                raise HTTPClientError(
                    f"Request failed with status {code}",
                    status_code=code,
                    response_body=response.text,
                )

            if is_last:
                error_cls = RateLimitError if code == 429 else HTTPClientError
                summary = (
                    f"Rate limit exceeded for {url}"
                    if code == 429
                    else f"Request failed with status {code}"
                )
                raise error_cls(
                    f"{summary} after {attempts} attempts",
                    status_code=code,
                    response_body=response.text,
                )
            await self._back_off(attempt, url, f"status {code}")

        raise HTTPClientError(f"Request to {url} was never attempted")

    async def _back_off(self, attempt: int, url: str, reason: str) -> None:
        delay = self.retry_config.calculate_backoff(attempt)
        logger.warning(
            f"Retrying {url} after {reason} "
            f"(attempt {attempt + 1}/{self.retry_config.max_retries + 1}, sleeping {delay:.2f}s)"
        )
        await asyncio.sleep(delay)
