"""Merged feed endpoint."""

from fastapi import APIRouter, Depends
from starlette.requests import Request

from src.api.auth import AuthContext, require_user
from src.api.dependencies import get_feed_aggregator
from src.api.models import ErrorResponse
from src.api.rate_limit import limiter
from src.config.settings import get_settings
from src.feed.aggregator import FeedAggregator
from src.feed.schemas import FeedResponse

router = APIRouter()


@router.get(
    "/feed",
    response_model=FeedResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Get the merged feed",
    description="Live, scheduled and recent items for the user's enabled sources. "
    "Always 200 once authenticated; sources that failed are listed in `errors`.",
)
@limiter.limit(lambda: get_settings().rate_limit_default)
async def get_feed(
    request: Request,
    auth: AuthContext = Depends(require_user),
    aggregator: FeedAggregator = Depends(get_feed_aggregator),
) -> FeedResponse:
    return await aggregator.get_feed(auth.user_id)
