"""
Profile and theme schemas.
"""
from uuid import UUID

from pydantic import BaseModel

from animetrack.db.models import ThemeEnum
from animetrack.schemas.watchlist import WatchlistStatsResponse


class ThemeInfo(BaseModel):
    key: ThemeEnum
    name: str
    description: str
    icon: str


class SetThemeRequest(BaseModel):
    theme: ThemeEnum


class ThemeResponse(BaseModel):
    theme: ThemeEnum


class ProfileResponse(BaseModel):
    id: UUID
    email: str | None = None
    theme: ThemeEnum
    stats: WatchlistStatsResponse
