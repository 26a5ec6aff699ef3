"""
Jikan Catalog Client
────────────────────
Wraps the Jikan v4 REST API (an unofficial MyAnimeList mirror).

Used by /catalog/search and /catalog/trending. Nothing is cached locally:
results go straight to the caller, tagged against their watchlist.

Failure policy:
  • non-2xx status or transport error → CatalogUpstreamError (shown as retryable)
  • empty page → an empty CatalogPage, not an error
"""
import logging

import httpx

from animetrack.core.config import settings
from animetrack.schemas.catalog import CatalogAnime, CatalogPage

logger = logging.getLogger(__name__)


class CatalogUpstreamError(Exception):
    """Raised when the catalog cannot be reached or answers with an error."""


class JikanClient:
    """
    Thin async wrapper around two Jikan endpoints.
    Uses httpx so calls do not block the FastAPI event loop.
    """

    def __init__(
        self,
        base_url: str | None = None,
        page_size: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.JIKAN_BASE_URL).rstrip("/")
        self.page_size = page_size or settings.CATALOG_PAGE_SIZE
        self.timeout = timeout or settings.CATALOG_TIMEOUT_SECONDS
        self._transport = transport

    async def search_anime(self, query: str, page: int = 1) -> CatalogPage:
        """
        Free-text search.

        GET /anime?q=<query>&page=<page>&limit=12
        """
        cleaned_query = query.strip()
        if not cleaned_query:
            return CatalogPage(items=[], current_page=page, last_page=page)

        params = {"q": cleaned_query, "page": page, "limit": self.page_size}
        payload = await self._get("/anime", params, action="search")
        return self._map_page(payload, page)

    async def top_anime(self, page: int = 1) -> CatalogPage:
        """
        Trending listing.

        GET /top/anime?page=<page>&limit=12
        """
        params = {"page": page, "limit": self.page_size}
        payload = await self._get("/top/anime", params, action="trending")
        return self._map_page(payload, page)

    async def _get(self, path: str, params: dict, *, action: str) -> dict:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(path, params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Catalog %s failed with status %s", action, exc.response.status_code
            )
            raise CatalogUpstreamError(
                f"Catalog {action} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("Catalog %s request failed: %s", action, exc)
            raise CatalogUpstreamError(f"Catalog {action} request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Catalog %s returned a non-JSON body", action)
            raise CatalogUpstreamError(f"Catalog {action} returned an invalid body") from exc

        if not isinstance(payload, dict):
            raise CatalogUpstreamError(f"Catalog {action} returned an invalid body")
        return payload

    def _map_page(self, payload: dict, requested_page: int) -> CatalogPage:
        items: list[CatalogAnime] = []
        for raw in payload.get("data") or []:
            anime = self._map_anime(raw)
            if anime is not None:
                items.append(anime)

        pagination = payload.get("pagination") or {}
        current_page = pagination.get("current_page") or requested_page
        last_page = pagination.get("last_visible_page") or current_page

        return CatalogPage(
            items=items,
            current_page=int(current_page),
            last_page=int(last_page),
            has_next_page=bool(pagination.get("has_next_page", False)),
        )

    def _pick_image(self, images: dict | None) -> str | None:
        """Prefer the large JPEG, fall back to the default size."""
        jpg = (images or {}).get("jpg") or {}
        return jpg.get("large_image_url") or jpg.get("image_url")

    def _map_anime(self, raw: dict) -> CatalogAnime | None:
        """Normalize one Jikan anime record; rows without id or title are skipped."""
        mal_id = raw.get("mal_id")
        title = raw.get("title")
        if not mal_id or not title:
            return None

        return CatalogAnime(
            external_media_id=int(mal_id),
            title=title,
            title_native=raw.get("title_japanese"),
            image_url=self._pick_image(raw.get("images")),
            total_episodes=raw.get("episodes"),
            score=raw.get("score"),
            year=raw.get("year"),
            synopsis=raw.get("synopsis"),
        )
