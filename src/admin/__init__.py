"""Service-wide administration state."""

from src.admin.repository import MAINTENANCE_FLAG, FlagsRepository

__all__ = ["FlagsRepository", "MAINTENANCE_FLAG"]
