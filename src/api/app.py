"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.auth import ensure_not_maintenance
from src.api.dependencies import cleanup_dependencies
from src.api.errors import APIError
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.timeout import TimeoutMiddleware
from src.api.routes import admin, bootstrap, feed, health, resolve, sources
from src.config.settings import Settings, get_settings
from src.observability.tracing import setup_tracing, shutdown_tracing

logger = structlog.get_logger(__name__)

API_VERSION = "0.1.0"

_HTTP_ERROR_CODES = {
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}

OPENAPI_TAGS = [
    {"name": "health", "description": "Service health checks"},
    {"name": "users", "description": "User bootstrap"},
    {"name": "sources", "description": "Per-user tracked channels"},
    {"name": "feed", "description": "Merged live/scheduled/recent feed"},
    {"name": "resolve", "description": "Channel URL resolution"},
    {"name": "admin", "description": "Maintenance mode and cache control"},
]

DESCRIPTION = """
Aggregates YouTube and Twitch channels into one "who is live" feed per user.

## Authentication

- `X-USER-TOKEN` header (or `token` query parameter) for user endpoints.
  The owner token is required for changes; the read token only reads.
- `X-ADMIN-TOKEN` header for `/api/admin/*`.
"""


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Stream feed API starting up", environment=settings.environment)

    if settings.tracing_enabled:
        setup_tracing(
            service_name=settings.otel_service_name,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        )

    yield

    logger.info("Stream feed API shutting down")
    await cleanup_dependencies()
    if settings.tracing_enabled:
        shutdown_tracing()


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    # Starlette runs the last-added middleware first: request context wraps
    # the timeout so 504 responses still carry X-Request-ID.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-ADMIN-TOKEN", "X-USER-TOKEN"],
    )
    if settings.request_timeout_seconds > 0:
        app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
    app.add_middleware(RequestContextMiddleware)


def _add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": "bad_request", "message": _validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "ok": False,
                "error": _HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
                "message": str(exc.detail),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"ok": False, "error": "internal"})


def _add_routers(app: FastAPI) -> None:
    # Health and the admin maintenance switch stay reachable while maintenance
    # mode is on; cache purge carries its own gate in routes/admin.py.
    gated = [Depends(ensure_not_maintenance)]
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(bootstrap.router, prefix="/api", tags=["users"], dependencies=gated)
    app.include_router(resolve.router, prefix="/api", tags=["resolve"], dependencies=gated)
    app.include_router(sources.router, prefix="/api", tags=["sources"], dependencies=gated)
    app.include_router(feed.router, prefix="/api", tags=["feed"], dependencies=gated)
    app.include_router(admin.router, prefix="/api", tags=["admin"])


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Stream Feed API",
        description=DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    _add_middleware(app, settings)

    if settings.rate_limit_enabled:
        from slowapi import _rate_limit_exceeded_handler
        from slowapi.errors import RateLimitExceeded

        from src.api.rate_limit import limiter

        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    _add_exception_handlers(app)
    _add_routers(app)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"service": settings.service_name, "version": API_VERSION, "docs": "/docs"}

    return app
