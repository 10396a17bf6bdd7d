"""Database repository for the sources table."""

import logging

from src.sources.schemas import Source
from src.storage.database import Database, affected_rows

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS sources (
    user_id      TEXT NOT NULL,
    id           TEXT NOT NULL,
    platform     TEXT NOT NULL,
    handle       TEXT NOT NULL,
    display_name TEXT,
    url          TEXT,
    enabled      BOOLEAN NOT NULL DEFAULT TRUE,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (user_id, id)
);

CREATE INDEX IF NOT EXISTS idx_sources_user_enabled
    ON sources(user_id, enabled);
"""

# xmax is 0 only on a freshly inserted tuple, which tells insert from update
# without a separate existence query.
_UPSERT_SQL = """
INSERT INTO sources (user_id, id, platform, handle, display_name, url, enabled)
VALUES ($1, $2, $3, $4, $5, $6, $7)
ON CONFLICT (user_id, id) DO UPDATE SET
    platform = EXCLUDED.platform,
    handle = EXCLUDED.handle,
    display_name = EXCLUDED.display_name,
    url = EXCLUDED.url,
    enabled = EXCLUDED.enabled
RETURNING (xmax = 0) AS inserted
"""

_SELECT_COLUMNS = "user_id, id, platform, handle, display_name, url, enabled, created_at"


def _record_to_source(record) -> Source:
    """Convert an asyncpg Record to a Source dataclass."""
    return Source(
        id=record["id"],
        user_id=record["user_id"],
        platform=record["platform"],
        handle=record["handle"],
        display_name=record["display_name"],
        url=record["url"],
        enabled=record["enabled"],
        created_at=record["created_at"],
    )


class SourcesRepository:
    """CRUD operations for the sources table, always scoped to one user."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the sources table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Sources table ensured")

    async def upsert(self, source: Source) -> str:
        """Insert or replace a source by id.

        Returns "insert" when the row is new, "update" otherwise.
        """
        inserted = await self._db.fetchval(
            _UPSERT_SQL,
            source.user_id,
            source.id,
            source.platform,
            source.handle,
            source.display_name,
            source.url,
            source.enabled,
        )
        action = "insert" if inserted else "update"
        logger.info(f"Source {source.id} {action} for user {source.user_id}")
        return action

    async def get(self, user_id: str, source_id: str) -> Source | None:
        """Fetch a single source."""
        row = await self._db.fetchrow(
            f"SELECT {_SELECT_COLUMNS} FROM sources WHERE user_id = $1 AND id = $2",
            user_id, source_id,
        )
        return _record_to_source(row) if row else None

    async def list_for_user(
        self, user_id: str, enabled_only: bool = False
    ) -> list[Source]:
        """All of a user's sources, by platform then newest first."""
        where = "WHERE user_id = $1"
        if enabled_only:
            where += " AND enabled = TRUE"

        rows = await self._db.fetch(
            f"""
            SELECT {_SELECT_COLUMNS} FROM sources
            {where}
            ORDER BY platform ASC, created_at DESC
            """,
            user_id,
        )
        return [_record_to_source(r) for r in rows]

    async def set_enabled(self, user_id: str, source_id: str, enabled: bool) -> bool:
        """Flip the enabled flag. Returns False if no such source exists."""
        result = await self._db.execute(
            "UPDATE sources SET enabled = $3 WHERE user_id = $1 AND id = $2",
            user_id, source_id, enabled,
        )
        return affected_rows(result) > 0
