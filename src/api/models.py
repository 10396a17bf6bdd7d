"""
Request and response models for the stream feed API.

Source rows keep the snake_case field names of the sources table; the
bootstrap, resolve and feed payloads use camelCase like the feed items.
"""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.platforms.schemas import Platform


class CamelModel(BaseModel):
    """Base for payloads serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    """Liveness probe payload."""

    ok: bool = True
    service: str
    now: str = Field(..., description="Server time, ISO-8601 UTC")


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing request."""

    ok: bool = False
    error: str = Field(..., description="Machine-readable error code")
    message: str | None = Field(default=None, description="Human-readable detail")
    id: str | None = Field(default=None, description="Id that was not found")


# ── Bootstrap ──────────────────────────────────────────


class BootstrapResponse(CamelModel):
    """Tokens for a newly created user. Shown once."""

    ok: bool = True
    user_id: str
    owner_token: str
    read_token: str


# ── Resolve ────────────────────────────────────────────


class ResolveRequest(BaseModel):
    url: str = Field(..., min_length=1, description="Channel URL or @handle")


class ResolveResponse(CamelModel):
    ok: bool = True
    channel_id: str
    url: str
    source_id: str = Field(..., description="Default id to upsert this channel under")


# ── Sources ────────────────────────────────────────────


class SourceItem(BaseModel):
    """A tracked channel as returned by the sources endpoints."""

    id: str
    platform: str
    handle: str
    display_name: str | None = None
    url: str | None = None
    enabled: bool = True
    created_at: dt.datetime | None = None


class SourcesMeta(CamelModel):
    count: int
    enabled_only: bool


class SourcesListResponse(BaseModel):
    ok: bool = True
    items: list[SourceItem]
    meta: SourcesMeta


class UpsertSourceRequest(BaseModel):
    """Create or replace a source by id. ``enabled`` accepts booleans or 0/1."""

    id: str = Field(..., min_length=1, max_length=200)
    platform: Platform
    handle: str = Field(..., min_length=1, max_length=200)
    display_name: str | None = Field(default=None, max_length=200)
    url: str | None = Field(default=None, max_length=2048)
    enabled: bool = True

    @field_validator("id", "handle")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class UpsertSourceResponse(BaseModel):
    ok: bool = True
    action: Literal["insert", "update"]
    item: SourceItem


class ToggleSourceRequest(BaseModel):
    id: str = Field(..., min_length=1)
    enabled: bool


class ToggleSourceResponse(BaseModel):
    ok: bool = True
    id: str
    enabled: bool


# ── Admin ──────────────────────────────────────────────


class MaintenanceRequest(BaseModel):
    enabled: bool


class MaintenanceResponse(BaseModel):
    ok: bool = True
    maintenance: bool


class CachePurgeRequest(BaseModel):
    key: str = Field(..., min_length=1, description="Cache key, e.g. feed:<userId>")


class CachePurgeResponse(BaseModel):
    ok: bool = True
    key: str
    deleted: bool
