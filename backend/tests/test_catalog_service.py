import asyncio
import unittest
from unittest.mock import patch
from uuid import uuid4

from animetrack.schemas.catalog import CatalogAnime, CatalogPage
from animetrack.services.catalog_service import (
    NO_RESULTS_NOTICE,
    EmptyQueryError,
    search_catalog,
    trending_catalog,
)
from animetrack.services.request_guard import RequestGenerationGuard


class FakeCatalog:
    def __init__(self, items=None, on_fetch=None) -> None:
        self.items = items or []
        self.on_fetch = on_fetch
        self.queries: list[tuple[str, int]] = []

    async def search_anime(self, query: str, page: int = 1) -> CatalogPage:
        self.queries.append((query, page))
        if self.on_fetch is not None:
            self.on_fetch()
        return CatalogPage(items=self.items, current_page=page, last_page=3, has_next_page=True)

    async def top_anime(self, page: int = 1) -> CatalogPage:
        return await self.search_anime("<top>", page)


def _anime(media_id: int) -> CatalogAnime:
    return CatalogAnime(external_media_id=media_id, title=f"Anime {media_id}")


class TestCatalogService(unittest.TestCase):
    def test_blank_query_is_rejected(self) -> None:
        with self.assertRaises(EmptyQueryError):
            asyncio.run(search_catalog(object(), "   ", client=FakeCatalog()))

    def test_anonymous_search_returns_plain_results(self) -> None:
        client = FakeCatalog(items=[_anime(1), _anime(2)])

        with patch("animetrack.services.catalog_service.owned_media_ids") as owned:
            result = asyncio.run(search_catalog(
                object(), "  one   piece ", page=2, client=client,
                guard=RequestGenerationGuard(),
            ))

        owned.assert_not_called()
        self.assertEqual(client.queries, [("one piece", 2)])
        self.assertEqual([item.in_watchlist for item in result["items"]], [False, False])
        meta = result["meta"]
        self.assertEqual(meta["count"], 2)
        self.assertEqual((meta["current_page"], meta["last_page"]), (2, 3))
        self.assertIsNone(meta["notice"])
        self.assertIsNone(meta["generation"])
        self.assertFalse(meta["superseded"])

    def test_signed_in_search_marks_owned_results(self) -> None:
        client = FakeCatalog(items=[_anime(1), _anime(2)])

        with patch(
            "animetrack.services.catalog_service.owned_media_ids",
            return_value={2},
        ):
            result = asyncio.run(search_catalog(
                object(), "naruto", viewer_id=uuid4(), client=client,
                guard=RequestGenerationGuard(),
            ))

        self.assertEqual([item.in_watchlist for item in result["items"]], [False, True])
        self.assertEqual(result["meta"]["generation"], 1)

    def test_empty_page_carries_no_results_notice(self) -> None:
        result = asyncio.run(trending_catalog(
            object(), client=FakeCatalog(), guard=RequestGenerationGuard(),
        ))
        self.assertEqual(result["items"], [])
        self.assertEqual(result["meta"]["notice"], NO_RESULTS_NOTICE)

    def test_response_overtaken_by_newer_request_is_superseded(self) -> None:
        guard = RequestGenerationGuard()
        viewer_id = uuid4()
        # A second search from the same viewer starts while the first is in flight
        client = FakeCatalog(
            items=[_anime(7)],
            on_fetch=lambda: guard.begin((viewer_id, "search")),
        )

        with patch(
            "animetrack.services.catalog_service.owned_media_ids",
            return_value=set(),
        ) as owned:
            result = asyncio.run(search_catalog(
                object(), "bleach", viewer_id=viewer_id, client=client, guard=guard,
            ))

        owned.assert_not_called()
        self.assertEqual(result["items"], [])
        self.assertTrue(result["meta"]["superseded"])
        self.assertEqual(result["meta"]["generation"], 1)

    def test_search_and_trending_do_not_supersede_each_other(self) -> None:
        guard = RequestGenerationGuard()
        viewer_id = uuid4()
        client = FakeCatalog(
            items=[_anime(3)],
            on_fetch=lambda: guard.begin((viewer_id, "trending")),
        )

        with patch(
            "animetrack.services.catalog_service.owned_media_ids",
            return_value=set(),
        ):
            result = asyncio.run(search_catalog(
                object(), "bleach", viewer_id=viewer_id, client=client, guard=guard,
            ))

        self.assertFalse(result["meta"]["superseded"])
        self.assertEqual(len(result["items"]), 1)


if __name__ == "__main__":
    unittest.main()
