"""
Catalog request/response schemas.
"""
from typing import Literal

from pydantic import BaseModel


class CatalogAnime(BaseModel):
    """One anime as returned by the external catalog."""

    external_media_id: int
    title: str
    title_native: str | None = None
    image_url: str | None = None
    total_episodes: int | None = None
    score: float | None = None
    year: int | None = None
    synopsis: str | None = None
    in_watchlist: bool = False


class CatalogPage(BaseModel):
    """A page of catalog results plus pagination metadata."""

    items: list[CatalogAnime]
    current_page: int = 1
    last_page: int = 1
    has_next_page: bool = False


class CatalogMeta(BaseModel):
    count: int
    current_page: int
    last_page: int
    has_next_page: bool
    notice: Literal["NO_RESULTS"] | None = None
    generation: int | None = None
    superseded: bool = False


class CatalogSearchResponse(BaseModel):
    """Response envelope for /catalog/search and /catalog/trending."""

    items: list[CatalogAnime]
    meta: CatalogMeta
