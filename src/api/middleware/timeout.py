"""
Upper bound on request duration.

A feed rebuild fans out to YouTube and Twitch; if the upstreams stall past
REQUEST_TIMEOUT_SECONDS the client gets a 504 envelope instead of hanging.
Health checks are never cut off.
"""

import asyncio

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

DEFAULT_EXEMPT_PREFIXES = ("/api/health",)


class TimeoutMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        timeout_seconds: float = 30.0,
        exempt_prefixes: tuple[str, ...] = DEFAULT_EXEMPT_PREFIXES,
    ):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.exempt_prefixes = exempt_prefixes

    def _timeout_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={"ok": False, "error": "timeout", "timeout_seconds": self.timeout_seconds},
        )

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.exempt_prefixes):
            return await call_next(request)

        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await call_next(request)
        except TimeoutError:
            logger.warning(
                "Request exceeded time limit",
                method=request.method,
                path=request.url.path,
                timeout_seconds=self.timeout_seconds,
            )
            return self._timeout_response()
