"""Storage layer: PostgreSQL connection pool."""

from src.storage.database import Database, affected_rows

__all__ = ["Database", "affected_rows"]
