"""
Catalog business logic - search/trending pages tagged against the viewer's
watchlist and guarded against out-of-order responses.
"""
import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

from sqlalchemy.orm import Session

from animetrack.schemas.catalog import CatalogPage
from animetrack.services.jikan_client import JikanClient
from animetrack.services.request_guard import RequestGenerationGuard, catalog_guard
from animetrack.services.watchlist_service import owned_media_ids
from animetrack.services.watchlist_view import mark_owned

logger = logging.getLogger(__name__)

NO_RESULTS_NOTICE = "NO_RESULTS"


class EmptyQueryError(Exception):
    """Raised when a search is attempted with a blank query."""


async def _browse(
    db: Session,
    kind: str,
    page: int,
    fetch: Callable[[], Awaitable[CatalogPage]],
    viewer_id: UUID | None,
    guard: RequestGenerationGuard,
) -> dict:
    """
    Fetch one catalog page and shape the response envelope.

    For signed-in viewers the request takes a generation number before the
    upstream call; if a newer request of the same kind started meanwhile,
    this response is marked superseded and its items are dropped.
    """
    guard_key = (viewer_id, kind) if viewer_id is not None else None
    generation = guard.begin(guard_key) if guard_key is not None else None

    result = await fetch()

    if guard_key is not None and not guard.is_current(guard_key, generation):
        logger.info(
            "Discarding superseded catalog %s page %s (generation %s, latest %s)",
            kind, page, generation, guard.latest(guard_key),
        )
        return {
            "items": [],
            "meta": {
                "count": 0,
                "current_page": result.current_page,
                "last_page": result.last_page,
                "has_next_page": result.has_next_page,
                "generation": generation,
                "superseded": True,
            },
        }

    items = result.items
    if viewer_id is not None and items:
        items = mark_owned(items, owned_media_ids(db, viewer_id))

    return {
        "items": items,
        "meta": {
            "count": len(items),
            "current_page": result.current_page,
            "last_page": result.last_page,
            "has_next_page": result.has_next_page,
            "notice": NO_RESULTS_NOTICE if not items else None,
            "generation": generation,
            "superseded": False,
        },
    }


async def search_catalog(
    db: Session,
    query: str,
    page: int = 1,
    viewer_id: UUID | None = None,
    client: JikanClient | None = None,
    guard: RequestGenerationGuard = catalog_guard,
) -> dict:
    cleaned_query = " ".join(query.split())
    if not cleaned_query:
        raise EmptyQueryError("Please enter a search term")

    jikan = client or JikanClient()
    return await _browse(
        db,
        "search",
        page,
        lambda: jikan.search_anime(cleaned_query, page=page),
        viewer_id,
        guard,
    )


async def trending_catalog(
    db: Session,
    page: int = 1,
    viewer_id: UUID | None = None,
    client: JikanClient | None = None,
    guard: RequestGenerationGuard = catalog_guard,
) -> dict:
    jikan = client or JikanClient()
    return await _browse(
        db,
        "trending",
        page,
        lambda: jikan.top_anime(page=page),
        viewer_id,
        guard,
    )
