"""Database repository for the users table."""

import logging
import secrets

from src.storage.database import Database
from src.users.schemas import AccessRole, User

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS users (
    user_id      TEXT PRIMARY KEY,
    owner_token  TEXT NOT NULL UNIQUE,
    read_token   TEXT NOT NULL UNIQUE,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_INSERT_SQL = """
INSERT INTO users (user_id, owner_token, read_token)
VALUES ($1, $2, $3)
RETURNING user_id, owner_token, read_token, created_at
"""

_RESOLVE_SQL = """
SELECT user_id, owner_token, read_token, created_at
FROM users
WHERE owner_token = $1 OR read_token = $1
LIMIT 1
"""

TOKEN_BYTES = 24
USER_ID_BYTES = 8


def _record_to_user(record) -> User:
    return User(
        user_id=record["user_id"],
        owner_token=record["owner_token"],
        read_token=record["read_token"],
        created_at=record["created_at"],
    )


class UsersRepository:
    """Create users and map presented tokens back to them."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the users table (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Users table ensured")

    async def create_user(self) -> User:
        """Create a user with fresh random owner and read tokens."""
        row = await self._db.fetchrow(
            _INSERT_SQL,
            secrets.token_hex(USER_ID_BYTES),
            secrets.token_hex(TOKEN_BYTES),
            secrets.token_hex(TOKEN_BYTES),
        )
        user = _record_to_user(row)
        logger.info(f"Created user {user.user_id}")
        return user

    async def resolve_token(self, token: str) -> tuple[User, AccessRole] | None:
        """Return the user owning ``token`` and the role it grants."""
        if not token:
            return None

        row = await self._db.fetchrow(_RESOLVE_SQL, token)
        if row is None:
            return None

        user = _record_to_user(row)
        if secrets.compare_digest(user.owner_token, token):
            return user, AccessRole.OWNER
        return user, AccessRole.READ
