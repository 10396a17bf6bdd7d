"""
Twitch app access token broker.

Exchanges client credentials for a bearer token and keeps it in the shared
cache store under ``twitch_token`` until shortly before it expires. Only the
expiry embedded in the cached payload matters; the generic cache TTL is not
used for this key.
"""

import logging
from datetime import timedelta

from src.cache.base import TWITCH_TOKEN_KEY, CacheStore
from src.observability.metrics import get_metrics
from src.platforms.errors import CredentialsMissing, UpstreamAuthFailure
from src.platforms.http_client import HTTPClient, HTTPClientError
from src.platforms.schemas import isoformat_z, parse_timestamp

logger = logging.getLogger(__name__)

TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"


class TwitchTokenBroker:
    """
    Cached client-credentials token source.

    Usage:
        broker = TwitchTokenBroker(cache, http, client_id, client_secret)
        token = await broker.get_token()
    """

    def __init__(
        self,
        cache: CacheStore,
        http: HTTPClient,
        client_id: str | None,
        client_secret: str | None,
        refresh_margin_seconds: int = 60,
    ):
        self._cache = cache
        self._http = http
        self._client_id = client_id
        self._client_secret = client_secret
        self._margin = timedelta(seconds=refresh_margin_seconds)

    @property
    def client_id(self) -> str | None:
        return self._client_id

    async def _cached_token(self) -> str | None:
        entry = await self._cache.read(TWITCH_TOKEN_KEY)
        if entry is None:
            return None

        token = entry.payload.get("token")
        expires_at = parse_timestamp(entry.payload.get("expiresAt"))
        if not token or expires_at is None:
            return None

        if expires_at - self._cache.now() > self._margin:
            return token
        return None

    async def get_token(self) -> str:
        """
        Return a bearer token valid for at least the refresh margin.

        Raises:
            CredentialsMissing: Client id or secret not configured
            UpstreamAuthFailure: Token exchange rejected
        """
        if not self._client_id or not self._client_secret:
            raise CredentialsMissing()

        cached = await self._cached_token()
        if cached:
            return cached

        metrics = get_metrics()
        try:
            response = await self._http.post(
                TWITCH_TOKEN_URL,
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "client_credentials",
                },
            )
            body = response.json()
            token = body["access_token"]
            expires_in = int(body["expires_in"])
        except HTTPClientError as e:
            metrics.record_token_exchange("error")
            logger.error(f"Twitch token exchange failed: {e.status_code}")
            raise UpstreamAuthFailure(e.status_code, e.response_body) from e
        except (ValueError, KeyError, TypeError) as e:
            metrics.record_token_exchange("error")
            raise UpstreamAuthFailure(response.status_code, "malformed token response") from e

        expires_at = self._cache.now() + timedelta(seconds=expires_in)
        await self._cache.write(
            TWITCH_TOKEN_KEY,
            {"token": token, "expiresAt": isoformat_z(expires_at)},
        )
        metrics.record_token_exchange("success")
        logger.info(f"Twitch app token refreshed, expires in {expires_in}s")
        return token
