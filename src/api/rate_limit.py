"""
Request rate limiting with slowapi.

Callers presenting a user token share one bucket per token, whether the
token arrives in ``X-USER-TOKEN`` or the ``token`` query parameter.
Anonymous callers are bucketed by client address. Tokens are hashed
before they reach the limiter storage.

Disabled unless RATE_LIMIT_ENABLED=true.
"""

import hashlib

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.config.settings import get_settings


def _get_rate_limit_key(request: Request) -> str:
    token = request.headers.get("X-USER-TOKEN") or request.query_params.get("token")
    if token:
        return "token:" + hashlib.sha256(token.encode()).hexdigest()[:16]
    return "ip:" + get_remote_address(request)


def create_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=_get_rate_limit_key,
        default_limits=[settings.rate_limit_default],
        storage_uri=settings.rate_limit_storage_uri,
        enabled=settings.rate_limit_enabled,
    )


limiter = create_limiter()
