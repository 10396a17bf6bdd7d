"""
Per-request correlation id, access log line and server span.

The id comes from ``X-Request-ID`` (or ``X-Correlation-ID``) when the
client sends one and is echoed back on every response, errors included.
It is bound into structlog contextvars for the duration of the request.
"""

import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from src.observability.tracing import get_tracer, is_tracing_enabled

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def request_id_from(request: Request) -> str:
    return (
        request.headers.get(REQUEST_ID_HEADER)
        or request.headers.get("X-Correlation-ID")
        or str(uuid.uuid4())
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, time it, and log the outcome."""

    async def dispatch(self, request: Request, call_next):
        request_id = request_id_from(request)
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()

        try:
            if is_tracing_enabled():
                tracer = get_tracer("stream-feed.api")
                with tracer.start_as_current_span(
                    f"{request.method} {request.url.path}",
                    attributes={
                        "http.method": request.method,
                        "http.target": request.url.path,
                        "http.request_id": request_id,
                    },
                ) as span:
                    response = await call_next(request)
                    span.set_attribute("http.status_code", response.status_code)
            else:
                response = await call_next(request)

            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
