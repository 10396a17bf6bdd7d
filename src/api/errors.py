"""
Request-level errors rendered as ``{"ok": false, "error": <code>, ...}``.

Raised from routes and dependencies; the handler registered in
``create_app`` turns them into JSON responses.
"""

from typing import Any

from fastapi import status


class APIError(Exception):
    """Base for errors that map to a status code and an error envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal"

    def __init__(self, **extra: Any):
        super().__init__(self.error)
        self.extra = {k: v for k, v in extra.items() if v is not None}

    def to_content(self) -> dict[str, Any]:
        return {"ok": False, "error": self.error, **self.extra}


class BadRequest(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "bad_request"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message=message, **extra)


class Unauthorized(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "unauthorized"


class Forbidden(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "forbidden"


class NotFound(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"

    def __init__(self, id: str | None = None, **extra: Any):
        super().__init__(id=id, **extra)


class MaintenanceMode(APIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "maintenance"


class BadGateway(APIError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "upstream_error"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message=message, **extra)
