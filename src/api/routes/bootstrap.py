"""User bootstrap endpoint."""

import structlog
from fastapi import APIRouter, Depends, status
from starlette.requests import Request

from src.api.dependencies import get_users_repository
from src.api.models import BootstrapResponse, ErrorResponse
from src.api.rate_limit import limiter
from src.config.settings import get_settings
from src.users.repository import UsersRepository

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/bootstrap",
    response_model=BootstrapResponse,
    status_code=status.HTTP_200_OK,
    responses={503: {"model": ErrorResponse}},
    summary="Create a user",
    description="Creates a user and returns its id with owner and read tokens. "
    "The tokens are not retrievable later.",
)
@limiter.limit(lambda: get_settings().rate_limit_bootstrap)
async def bootstrap(
    request: Request,
    users: UsersRepository = Depends(get_users_repository),
) -> BootstrapResponse:
    user = await users.create_user()
    logger.info("User bootstrapped", user_id=user.user_id)
    return BootstrapResponse(
        user_id=user.user_id,
        owner_token=user.owner_token,
        read_token=user.read_token,
    )
