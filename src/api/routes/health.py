"""
Health check endpoint.
"""

from fastapi import APIRouter

from src.api.models import HealthResponse
from src.cache.base import utc_now
from src.config.settings import get_settings
from src.platforms.schemas import isoformat_z

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Liveness probe. Never blocked by maintenance mode.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        service=get_settings().service_name,
        now=isoformat_z(utc_now()),
    )
