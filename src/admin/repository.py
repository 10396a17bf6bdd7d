"""Database repository for service-wide boolean flags."""

import logging

from src.storage.database import Database

logger = logging.getLogger(__name__)

MAINTENANCE_FLAG = "maintenance"

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS system_flags (
    name        TEXT PRIMARY KEY,
    enabled     BOOLEAN NOT NULL DEFAULT FALSE,
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_SET_SQL = """
INSERT INTO system_flags (name, enabled)
VALUES ($1, $2)
ON CONFLICT (name) DO UPDATE SET
    enabled = EXCLUDED.enabled,
    updated_at = NOW()
"""


class FlagsRepository:
    """Read and write named on/off switches. Unknown flags read as off."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("System flags table ensured")

    async def get_flag(self, name: str) -> bool:
        value = await self._db.fetchval(
            "SELECT enabled FROM system_flags WHERE name = $1", name
        )
        return bool(value)

    async def set_flag(self, name: str, enabled: bool) -> None:
        await self._db.execute(_SET_SQL, name, enabled)
        logger.warning(f"Flag {name} set to {enabled}")
