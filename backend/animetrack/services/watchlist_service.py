"""
Personal watchlist business logic.

Every query is scoped to the owner: a row that belongs to someone else is
indistinguishable from a missing one. Rows leave this module as
WatchlistEntryResponse; nothing downstream sees ORM objects.
"""
import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from animetrack.db.models import WatchlistEntry, WatchStatusEnum
from animetrack.schemas.watchlist import (
    AddWatchlistEntryRequest,
    UpdateWatchlistEntryRequest,
    WatchlistEntryResponse,
)
from animetrack.services import binge_math
from animetrack.services.realtime import COLLECTION_WATCHLIST, bus
from animetrack.services.watchlist_view import count_unrecognized, group_by_status

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_PGCODE = "23505"


class EntryNotFoundError(Exception):
    """Raised when the entry does not exist for this owner."""


class DuplicateEntryError(Exception):
    """Raised when the anime is already on the owner's watchlist."""


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the store reported a uniqueness violation, not a NOT NULL / FK / CHECK one."""
    if getattr(exc.orig, "pgcode", None) == UNIQUE_VIOLATION_PGCODE:
        return True
    error_text = str(exc.orig).lower()
    return "duplicate key" in error_text or "unique constraint" in error_text


def to_entry(row: WatchlistEntry) -> WatchlistEntryResponse:
    return WatchlistEntryResponse.model_validate(row)


def _get_entry_or_raise(db: Session, owner_id: UUID, entry_id: UUID) -> WatchlistEntry:
    row = (
        db.query(WatchlistEntry)
        .filter(WatchlistEntry.id == entry_id, WatchlistEntry.owner_id == owner_id)
        .first()
    )
    if row is None:
        raise EntryNotFoundError(f"Watchlist entry {entry_id} not found")
    return row


# ── Reads ─────────────────────────────────────────────────────────────────────

def list_entries(
    db: Session,
    owner_id: UUID,
    statuses: Iterable[WatchStatusEnum] | None = None,
) -> list[WatchlistEntryResponse]:
    """All of the owner's entries, most recently updated first."""
    query = db.query(WatchlistEntry).filter(WatchlistEntry.owner_id == owner_id)

    status_values = [s.value for s in statuses or []]
    if status_values:
        query = query.filter(WatchlistEntry.status.in_(status_values))

    rows = query.order_by(WatchlistEntry.updated_at.desc(), WatchlistEntry.id.asc()).all()
    return [to_entry(row) for row in rows]


def owned_media_ids(db: Session, owner_id: UUID) -> set[int]:
    """Catalog ids already on the owner's watchlist."""
    rows = (
        db.query(WatchlistEntry.external_media_id)
        .filter(WatchlistEntry.owner_id == owner_id)
        .all()
    )
    return {row.external_media_id for row in rows}


def grouped_watchlist(db: Session, owner_id: UUID) -> dict:
    entries = list_entries(db, owner_id)
    buckets = group_by_status(entries)
    return {**buckets, "unrecognized_count": count_unrecognized(entries)}


def estimate_for_owner(
    db: Session,
    owner_id: UUID,
    scope: str,
    episode_length_minutes: int,
) -> binge_math.RemainingEstimate:
    entries = list_entries(db, owner_id)
    return binge_math.estimate_remaining(entries, scope, episode_length_minutes)


def stats_for_owner(db: Session, owner_id: UUID) -> binge_math.ProfileStats:
    return binge_math.compute_profile_stats(list_entries(db, owner_id))


def stats_payload(stats: binge_math.ProfileStats) -> dict:
    return {
        "total": stats.total,
        "watch_later_count": stats.watch_later_count,
        "watching_count": stats.watching_count,
        "completed_count": stats.completed_count,
        "average_rating": stats.average_rating,
        "total_episodes_watched": stats.total_episodes_watched,
        "percentages": stats.percentages,
    }


# ── Writes ────────────────────────────────────────────────────────────────────

def add_entry(
    db: Session,
    owner_id: UUID,
    payload: AddWatchlistEntryRequest,
) -> WatchlistEntryResponse:
    """Insert a new entry; the unique (owner, anime) constraint rejects repeats."""
    row = WatchlistEntry(
        owner_id=owner_id,
        external_media_id=payload.external_media_id,
        title=payload.title,
        title_native=payload.title_native,
        image_url=payload.image_url,
        total_episodes=payload.total_episodes,
        episodes_watched=0,
        status=payload.status.value,
    )
    db.add(row)

    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            raise DuplicateEntryError("This anime is already in your list") from exc
        logger.exception("Watchlist insert failed for owner %s", owner_id)
        raise

    db.commit()
    db.refresh(row)
    bus.publish(owner_id, COLLECTION_WATCHLIST)
    return to_entry(row)


def update_entry(
    db: Session,
    owner_id: UUID,
    entry_id: UUID,
    payload: UpdateWatchlistEntryRequest,
) -> WatchlistEntryResponse:
    """Apply the fields present in *payload*. rating 0 clears the rating."""
    row = _get_entry_or_raise(db, owner_id, entry_id)
    fields = payload.model_fields_set

    if "status" in fields and payload.status is not None:
        row.status = payload.status.value
    if "episodes_watched" in fields and payload.episodes_watched is not None:
        row.episodes_watched = payload.episodes_watched
    if "rating" in fields:
        row.rating = payload.rating if payload.rating else None
    if "notes" in fields:
        row.notes = payload.notes

    db.add(row)
    db.commit()
    db.refresh(row)
    bus.publish(owner_id, COLLECTION_WATCHLIST)
    return to_entry(row)


def delete_entry(db: Session, owner_id: UUID, entry_id: UUID) -> bool:
    """Remove an entry. Returns False when nothing matched."""
    row = (
        db.query(WatchlistEntry)
        .filter(WatchlistEntry.id == entry_id, WatchlistEntry.owner_id == owner_id)
        .first()
    )
    if row is None:
        return False

    db.delete(row)
    db.commit()
    bus.publish(owner_id, COLLECTION_WATCHLIST)
    return True
