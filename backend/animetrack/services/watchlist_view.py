"""
Presentation helpers over already-fetched rows: status buckets and the
"already in your list" flag on catalog results.
"""
from typing import Any, Iterable, Sequence, TypeVar

from animetrack.db.models import WatchStatusEnum
from animetrack.schemas.catalog import CatalogAnime
from animetrack.services.binge_math import status_value

T = TypeVar("T")

STATUS_BUCKETS: tuple[str, ...] = tuple(status.value for status in WatchStatusEnum)


def group_by_status(entries: Iterable[T]) -> dict[str, list[T]]:
    """
    Partition *entries* into watch_later / watching / completed, keeping
    input order inside each bucket.

    Rows with any other status land in no bucket.
    """
    buckets: dict[str, list[T]] = {key: [] for key in STATUS_BUCKETS}
    for entry in entries:
        bucket = buckets.get(status_value(entry))
        if bucket is not None:
            bucket.append(entry)
    return buckets


def count_unrecognized(entries: Iterable[Any]) -> int:
    """Number of rows group_by_status would drop."""
    return sum(1 for entry in entries if status_value(entry) not in STATUS_BUCKETS)


def mark_owned(
    results: Sequence[CatalogAnime],
    owned_ids: Iterable[int],
) -> list[CatalogAnime]:
    """Return copies of *results* with in_watchlist set by id membership."""
    owned = set(owned_ids)
    return [
        item.model_copy(update={"in_watchlist": item.external_media_id in owned})
        for item in results
    ]
