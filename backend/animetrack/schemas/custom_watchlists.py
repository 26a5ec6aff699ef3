"""
Custom list request/response schemas.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


class CreateCustomWatchlistRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("name cannot be empty")
        return name

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        return _optional_text(value)


class UpdateCustomWatchlistRequest(BaseModel):
    """Partial update; omitted fields keep their value."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    is_public: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        name = value.strip()
        if not name:
            raise ValueError("name cannot be empty")
        return name

    @field_validator("description")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        return _optional_text(value)


class AddCustomWatchlistItemRequest(BaseModel):
    external_media_id: int = Field(ge=1)
    title: str = Field(min_length=1, max_length=500)
    title_native: str | None = Field(default=None, max_length=500)
    image_url: str | None = Field(default=None, max_length=1000)
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, value: str | None) -> str | None:
        return _optional_text(value)


class CustomWatchlistItemResponse(BaseModel):
    id: UUID
    watchlist_id: UUID
    external_media_id: int
    title: str
    title_native: str | None = None
    image_url: str | None = None
    notes: str | None = None
    added_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomWatchlistResponse(BaseModel):
    """Owner view of a custom list (includes the share token)."""

    id: UUID
    owner_id: UUID
    name: str
    description: str | None = None
    is_public: bool
    share_token: str
    item_count: int = 0
    created_at: datetime
    updated_at: datetime


class CustomWatchlistDetailResponse(CustomWatchlistResponse):
    items: list[CustomWatchlistItemResponse]


class SharedWatchlistResponse(BaseModel):
    """What a share-token holder may see: no owner id, no token."""

    id: UUID
    name: str
    description: str | None = None
    items: list[CustomWatchlistItemResponse]
