"""Per-user registry of tracked channels."""

from src.sources.repository import SourcesRepository
from src.sources.schemas import Source, make_source_id, normalize_handle

__all__ = ["Source", "SourcesRepository", "make_source_id", "normalize_handle"]
