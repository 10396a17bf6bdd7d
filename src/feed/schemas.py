"""Response models for the merged feed."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.platforms.schemas import Platform, StreamItem


class FeedError(BaseModel):
    """A source that could not be refreshed during a feed build."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    platform: Platform
    source_id: str
    message: str


class FeedResponse(BaseModel):
    """Merged, ordered feed for one user."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    ok: bool = True
    updated_at: str = Field(..., description="Build time, ISO-8601 UTC with Z suffix")
    items: list[StreamItem] = Field(default_factory=list)
    errors: list[FeedError] = Field(default_factory=list)

    def to_json(self) -> dict:
        """Serialise with camelCase keys, as clients and the cache see it."""
        return self.model_dump(mode="json", by_alias=True)
