"""
FastAPI stream feed service.

Provides the REST API for:
- GET /api/feed - Merged live/scheduled/recent feed for a user
- /api/sources/* - Per-user channel registry
- GET /api/health - Service health check
"""

from src.api.app import create_app

__all__ = ["create_app"]
