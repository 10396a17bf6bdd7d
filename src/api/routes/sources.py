"""Source registry endpoints: list, upsert and toggle a user's channels."""

import structlog
from fastapi import APIRouter, Depends, Query
from starlette.requests import Request

from src.api.auth import AuthContext, require_owner, require_user
from src.api.dependencies import get_cache_store, get_sources_repository
from src.api.errors import NotFound
from src.api.models import (
    ErrorResponse,
    SourceItem,
    SourcesListResponse,
    SourcesMeta,
    ToggleSourceRequest,
    ToggleSourceResponse,
    UpsertSourceRequest,
    UpsertSourceResponse,
)
from src.api.rate_limit import limiter
from src.cache.base import CacheStore, feed_cache_key
from src.config.settings import get_settings as _get_settings
from src.sources.repository import SourcesRepository
from src.sources.schemas import Source, normalize_handle

logger = structlog.get_logger(__name__)
router = APIRouter()


def _source_to_item(s: Source) -> SourceItem:
    return SourceItem(
        id=s.id,
        platform=s.platform,
        handle=s.handle,
        display_name=s.display_name,
        url=s.url,
        enabled=s.enabled,
        created_at=s.created_at,
    )


async def _invalidate_feed(cache: CacheStore, user_id: str) -> None:
    """Drop the user's whole-feed entry so the next read sees the change."""
    await cache.delete(feed_cache_key(user_id))


@router.get(
    "/sources/list",
    response_model=SourcesListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List the user's sources",
)
@limiter.limit(lambda: _get_settings().rate_limit_default)
async def list_sources(
    request: Request,
    enabled: str | None = Query(default=None, description="Set to 1 for enabled sources only"),
    auth: AuthContext = Depends(require_user),
    repo: SourcesRepository = Depends(get_sources_repository),
) -> SourcesListResponse:
    enabled_only = enabled == "1"
    sources = await repo.list_for_user(auth.user_id, enabled_only=enabled_only)
    items = [_source_to_item(s) for s in sources]
    return SourcesListResponse(
        items=items,
        meta=SourcesMeta(count=len(items), enabled_only=enabled_only),
    )


@router.post(
    "/sources/upsert",
    response_model=UpsertSourceResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    },
    summary="Create or replace a source",
)
@limiter.limit(lambda: _get_settings().rate_limit_default)
async def upsert_source(
    request: Request,
    body: UpsertSourceRequest,
    auth: AuthContext = Depends(require_owner),
    repo: SourcesRepository = Depends(get_sources_repository),
    cache: CacheStore = Depends(get_cache_store),
) -> UpsertSourceResponse:
    source = Source(
        id=body.id,
        user_id=auth.user_id,
        platform=body.platform.value,
        handle=normalize_handle(body.platform.value, body.handle),
        display_name=body.display_name,
        url=body.url,
        enabled=body.enabled,
    )
    action = await repo.upsert(source)
    await _invalidate_feed(cache, auth.user_id)

    # Re-fetch to get created_at
    stored = await repo.get(auth.user_id, source.id) or source
    logger.info("Source upserted", source_id=source.id, action=action)
    return UpsertSourceResponse(action=action, item=_source_to_item(stored))


@router.post(
    "/sources/toggle",
    response_model=ToggleSourceResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Enable or disable a source",
)
@limiter.limit(lambda: _get_settings().rate_limit_default)
async def toggle_source(
    request: Request,
    body: ToggleSourceRequest,
    auth: AuthContext = Depends(require_owner),
    repo: SourcesRepository = Depends(get_sources_repository),
    cache: CacheStore = Depends(get_cache_store),
) -> ToggleSourceResponse:
    found = await repo.set_enabled(auth.user_id, body.id, body.enabled)
    if not found:
        raise NotFound(id=body.id)

    await _invalidate_feed(cache, auth.user_id)
    logger.info("Source toggled", source_id=body.id, enabled=body.enabled)
    return ToggleSourceResponse(id=body.id, enabled=body.enabled)
