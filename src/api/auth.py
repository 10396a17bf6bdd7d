"""
API authentication.

- Users present their owner or read token via ``X-USER-TOKEN`` or ``?token=``.
  Either token reads; only the owner token mutates.
- Admin endpoints require ``X-ADMIN-TOKEN`` equal to ADMIN_TOKEN.
"""

import secrets
from dataclasses import dataclass

from fastapi import Depends, Query, Security
from fastapi.security import APIKeyHeader

from src.admin.repository import MAINTENANCE_FLAG, FlagsRepository
from src.api.dependencies import get_flags_repository, get_users_repository
from src.api.errors import Forbidden, MaintenanceMode, Unauthorized
from src.config.settings import get_settings
from src.users.repository import UsersRepository
from src.users.schemas import AccessRole, User

# API key header schemes
user_token_header = APIKeyHeader(name="X-USER-TOKEN", auto_error=False)
admin_token_header = APIKeyHeader(name="X-ADMIN-TOKEN", auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The user behind a request and the role their token grants."""

    user: User
    role: AccessRole

    @property
    def user_id(self) -> str:
        return self.user.user_id


async def require_user(
    header_token: str | None = Security(user_token_header),
    token: str | None = Query(default=None, description="User token (alternative to X-USER-TOKEN)"),
    users: UsersRepository = Depends(get_users_repository),
) -> AuthContext:
    """
    Resolve the presented user token.

    Raises:
        Unauthorized: Token missing or unknown
    """
    presented = header_token or token
    if not presented:
        raise Unauthorized(message="Provide X-USER-TOKEN header or token query parameter")

    resolved = await users.resolve_token(presented)
    if resolved is None:
        raise Unauthorized(message="Invalid token")

    user, role = resolved
    return AuthContext(user=user, role=role)


async def require_owner(auth: AuthContext = Depends(require_user)) -> AuthContext:
    """
    Require the owner token.

    Raises:
        Forbidden: A read token was presented
    """
    if auth.role is not AccessRole.OWNER:
        raise Forbidden(message="Owner token required")
    return auth


async def require_admin(admin_token: str | None = Security(admin_token_header)) -> str:
    """
    Verify X-ADMIN-TOKEN.

    Admin endpoints stay closed when ADMIN_TOKEN is not configured.
    """
    expected = get_settings().admin_token
    if not expected or not admin_token:
        raise Unauthorized(message="Missing admin token")

    if not secrets.compare_digest(admin_token.encode(), expected.encode()):
        raise Unauthorized(message="Invalid admin token")

    return admin_token


async def ensure_not_maintenance(
    flags: FlagsRepository = Depends(get_flags_repository),
) -> None:
    """Reject the request while the maintenance flag is set."""
    if await flags.get_flag(MAINTENANCE_FLAG):
        raise MaintenanceMode()
