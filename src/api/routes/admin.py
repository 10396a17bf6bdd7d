"""Admin endpoints: maintenance switch and cache purge."""

import structlog
from fastapi import APIRouter, Depends

from src.admin.repository import MAINTENANCE_FLAG, FlagsRepository
from src.api.auth import ensure_not_maintenance, require_admin
from src.api.dependencies import get_cache_store, get_flags_repository
from src.api.models import (
    CachePurgeRequest,
    CachePurgeResponse,
    ErrorResponse,
    MaintenanceRequest,
    MaintenanceResponse,
)
from src.cache.base import CacheStore

logger = structlog.get_logger(__name__)
router = APIRouter(
    prefix="/admin",
    dependencies=[Depends(require_admin)],
    responses={401: {"model": ErrorResponse}},
)


@router.post(
    "/maintenance",
    response_model=MaintenanceResponse,
    summary="Set or clear maintenance mode",
)
async def set_maintenance(
    body: MaintenanceRequest,
    flags: FlagsRepository = Depends(get_flags_repository),
) -> MaintenanceResponse:
    await flags.set_flag(MAINTENANCE_FLAG, body.enabled)
    logger.warning("Maintenance mode changed", enabled=body.enabled)
    return MaintenanceResponse(maintenance=body.enabled)


@router.post(
    "/cache/purge",
    response_model=CachePurgeResponse,
    summary="Delete one cache entry",
    dependencies=[Depends(ensure_not_maintenance)],
    responses={503: {"model": ErrorResponse}},
)
async def purge_cache(
    body: CachePurgeRequest,
    cache: CacheStore = Depends(get_cache_store),
) -> CachePurgeResponse:
    deleted = await cache.delete(body.key)
    logger.info("Cache entry purged", key=body.key, deleted=deleted)
    return CachePurgeResponse(key=body.key, deleted=deleted)
