"""Channel URL resolution endpoint."""

import structlog
from fastapi import APIRouter, Depends
from starlette.requests import Request

from src.api.auth import AuthContext, require_user
from src.api.dependencies import get_youtube_adapter
from src.api.errors import BadGateway, BadRequest, NotFound
from src.api.models import ErrorResponse, ResolveRequest, ResolveResponse
from src.api.rate_limit import limiter
from src.config.settings import get_settings
from src.platforms.errors import ChannelNotFound, UnsupportedChannelUrl, UpstreamError
from src.platforms.schemas import Platform
from src.platforms.youtube_adapter import YouTubeAdapter
from src.sources.schemas import make_source_id

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/resolve/youtube",
    response_model=ResolveResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Resolve a YouTube channel URL",
    description="Accepts /channel/UC..., /@handle URLs or a bare @handle "
    "and returns the channel id to use as a source handle.",
)
@limiter.limit(lambda: get_settings().rate_limit_default)
async def resolve_youtube(
    request: Request,
    body: ResolveRequest,
    auth: AuthContext = Depends(require_user),
    adapter: YouTubeAdapter = Depends(get_youtube_adapter),
) -> ResolveResponse:
    try:
        resolved = await adapter.resolve_channel(body.url)
    except UnsupportedChannelUrl as e:
        raise BadRequest(str(e))
    except ChannelNotFound:
        raise NotFound(id=body.url)
    except UpstreamError as e:
        logger.warning("resolve_youtube_failed", url=body.url, error=e.message)
        raise BadGateway(e.message)

    return ResolveResponse(
        channel_id=resolved.channel_id,
        url=resolved.url,
        source_id=make_source_id(Platform.YOUTUBE.value, resolved.channel_id),
    )
