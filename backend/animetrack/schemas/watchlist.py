"""
Watchlist request/response schemas.

WatchlistEntryResponse is the one shape every reader of the personal
watchlist works with: services convert ORM rows into it once, and the
binge math and grouping helpers consume it as-is.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from animetrack.db.models import WatchStatusEnum


def _clean_notes(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


class AddWatchlistEntryRequest(BaseModel):
    """Payload for POST /watchlist - usually copied from a catalog result."""

    external_media_id: int = Field(ge=1)
    title: str = Field(min_length=1, max_length=500)
    title_native: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=1000)
    total_episodes: int | None = Field(default=None, ge=0)
    status: WatchStatusEnum = WatchStatusEnum.WATCH_LATER

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        title = " ".join(value.strip().split())
        if not title:
            raise ValueError("title cannot be empty")
        return title


class UpdateWatchlistEntryRequest(BaseModel):
    """
    Payload for PATCH /watchlist/{id}. Omitted fields are left alone.

    rating 0 or null clears the rating; blank notes clear the notes.
    """

    status: WatchStatusEnum | None = None
    episodes_watched: int | None = Field(default=None, ge=0)
    rating: int | None = Field(default=None, ge=0, le=10)
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, value: str | None) -> str | None:
        return _clean_notes(value)


class WatchlistEntryResponse(BaseModel):
    id: UUID
    owner_id: UUID
    external_media_id: int
    title: str
    title_native: str | None = None
    image_url: str | None = None
    total_episodes: int | None = None
    episodes_watched: int = 0
    # Plain str: stored rows may hold statuses outside WatchStatusEnum
    status: str
    rating: int | None = None
    notes: str | None = None
    added_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("episodes_watched", mode="before")
    @classmethod
    def default_episodes(cls, value: int | None) -> int:
        return 0 if value is None else value


class GroupedWatchlistResponse(BaseModel):
    """The three status buckets; unrecognised rows are only counted."""

    watch_later: list[WatchlistEntryResponse]
    watching: list[WatchlistEntryResponse]
    completed: list[WatchlistEntryResponse]
    unrecognized_count: int = 0


class RemainingEstimateResponse(BaseModel):
    scope: str
    episode_length_minutes: int
    total_episodes_remaining: int
    total_minutes: int
    days: int
    hours: int
    minutes: int
    days_at_two_per_day: int


class WatchlistStatsResponse(BaseModel):
    total: int
    watch_later_count: int
    watching_count: int
    completed_count: int
    # 0 when nothing is rated; clients show "N/A"
    average_rating: float
    total_episodes_watched: int
    percentages: dict[str, float]


class EpisodeLengthPreset(BaseModel):
    minutes: int
    label: str
