"""
Watchlist API - /watchlist
───────────────────────────
Endpoints:
  GET    /watchlist              - My entries, newest update first (?status= filter)
  POST   /watchlist              - Add an anime (409 if already present)
  GET    /watchlist/grouped      - Entries split into status buckets
  GET    /watchlist/estimate     - Episodes and time left for a scope
  GET    /watchlist/episode-lengths - Preset episode lengths for the calculator
  GET    /watchlist/stats        - Counts, average rating, episodes watched
  GET    /watchlist/events       - SSE stream of change invalidations
  PATCH  /watchlist/{entry_id}   - Update status / progress / rating / notes
  DELETE /watchlist/{entry_id}   - Remove an entry
"""
import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from animetrack.core.config import settings
from animetrack.db.models import User, WatchStatusEnum
from animetrack.db.session import get_db
from animetrack.deps.auth import get_current_user
from animetrack.schemas.watchlist import (
    AddWatchlistEntryRequest,
    EpisodeLengthPreset,
    GroupedWatchlistResponse,
    RemainingEstimateResponse,
    UpdateWatchlistEntryRequest,
    WatchlistEntryResponse,
    WatchlistStatsResponse,
)
from animetrack.services.binge_math import (
    DEFAULT_EPISODE_LENGTH,
    EPISODE_LENGTH_PRESETS,
    SCOPE_ALL,
)
from animetrack.services.realtime import SSE_HEARTBEAT, bus, format_sse
from animetrack.services.watchlist_service import (
    DuplicateEntryError,
    EntryNotFoundError,
    add_entry,
    delete_entry,
    estimate_for_owner,
    grouped_watchlist,
    list_entries,
    stats_for_owner,
    stats_payload,
    update_entry,
)

router = APIRouter()


def _error(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


# ── Reads ─────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[WatchlistEntryResponse])
def get_watchlist(
    status_filter: list[WatchStatusEnum] | None = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[WatchlistEntryResponse]:
    return list_entries(db, current_user.id, status_filter)


@router.get("/grouped", response_model=GroupedWatchlistResponse)
def get_grouped_watchlist(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return grouped_watchlist(db, current_user.id)


@router.get("/estimate", response_model=RemainingEstimateResponse)
def get_estimate(
    scope: str = Query(SCOPE_ALL, description="'all', 'watching-only', or an entry id"),
    episode_length: int = Query(DEFAULT_EPISODE_LENGTH, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RemainingEstimateResponse:
    """Binge calculator: remaining episodes and watch time for *scope*."""
    estimate = estimate_for_owner(db, current_user.id, scope, episode_length)
    return RemainingEstimateResponse(
        scope=scope,
        episode_length_minutes=episode_length,
        total_episodes_remaining=estimate.total_episodes_remaining,
        total_minutes=estimate.total_minutes,
        days=estimate.days,
        hours=estimate.hours,
        minutes=estimate.minutes,
        days_at_two_per_day=estimate.days_at_two_per_day,
    )


@router.get("/episode-lengths", response_model=list[EpisodeLengthPreset])
def get_episode_lengths() -> list[EpisodeLengthPreset]:
    return [
        EpisodeLengthPreset(minutes=minutes, label=label)
        for minutes, label in EPISODE_LENGTH_PRESETS.items()
    ]


@router.get("/stats", response_model=WatchlistStatsResponse)
def get_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return stats_payload(stats_for_owner(db, current_user.id))


@router.get("/events")
async def watchlist_events(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> StreamingResponse:
    """
    Server-Sent Events: one `invalidated` message per committed change to
    the caller's data. Clients react by re-fetching; no row data is sent.
    """
    owner_id = current_user.id

    async def event_stream():
        subscription = bus.subscribe(owner_id)
        try:
            yield format_sse({"event": "subscribed", "scope": str(owner_id)})
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(
                        subscription.get(),
                        timeout=settings.SSE_HEARTBEAT_SECONDS,
                    )
                except asyncio.TimeoutError:
                    yield SSE_HEARTBEAT
                    continue
                yield format_sse(event.as_payload())
        finally:
            bus.unsubscribe(subscription)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# ── Writes ────────────────────────────────────────────────────────────────────

@router.post("", response_model=WatchlistEntryResponse, status_code=status.HTTP_201_CREATED)
def add_to_watchlist(
    payload: AddWatchlistEntryRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WatchlistEntryResponse:
    try:
        return add_entry(db, current_user.id, payload)
    except DuplicateEntryError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_error("ALREADY_IN_WATCHLIST", str(exc)),
        ) from exc


@router.patch("/{entry_id}", response_model=WatchlistEntryResponse)
def edit_watchlist_entry(
    entry_id: UUID,
    payload: UpdateWatchlistEntryRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WatchlistEntryResponse:
    try:
        return update_entry(db, current_user.id, entry_id, payload)
    except EntryNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("ENTRY_NOT_FOUND", str(exc)),
        ) from exc


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_watchlist(
    entry_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    if not delete_entry(db, current_user.id, entry_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error("ENTRY_NOT_FOUND", f"Watchlist entry {entry_id} not found"),
        )
