"""
Custom list business logic - owner CRUD plus read access by share token.
"""
import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from animetrack.db.models import CustomWatchlist, CustomWatchlistItem
from animetrack.schemas.custom_watchlists import (
    AddCustomWatchlistItemRequest,
    CreateCustomWatchlistRequest,
    UpdateCustomWatchlistRequest,
)
from animetrack.services.realtime import (
    COLLECTION_CUSTOM_WATCHLIST_ITEMS,
    COLLECTION_CUSTOM_WATCHLISTS,
    bus,
)
from animetrack.services.watchlist_service import is_unique_violation

logger = logging.getLogger(__name__)


class WatchlistNotFoundError(Exception):
    pass


class NotListOwnerError(Exception):
    pass


class ItemNotFoundError(Exception):
    pass


class ItemAlreadyExistsError(Exception):
    pass


def _get_list_or_raise(db: Session, watchlist_id: UUID) -> CustomWatchlist:
    wl = db.query(CustomWatchlist).filter(CustomWatchlist.id == watchlist_id).first()
    if not wl:
        raise WatchlistNotFoundError(f"Watchlist {watchlist_id} not found")
    return wl


def _get_owned_list_or_raise(db: Session, watchlist_id: UUID, owner_id: UUID) -> CustomWatchlist:
    wl = _get_list_or_raise(db, watchlist_id)
    if wl.owner_id != owner_id:
        raise NotListOwnerError("Only the owner can access this watchlist")
    return wl


def _item_payload(item: CustomWatchlistItem) -> dict:
    return {
        "id": item.id,
        "watchlist_id": item.watchlist_id,
        "external_media_id": item.external_media_id,
        "title": item.title,
        "title_native": item.title_native,
        "image_url": item.image_url,
        "notes": item.notes,
        "added_at": item.added_at,
    }


def _list_payload(wl: CustomWatchlist, item_count: int) -> dict:
    return {
        "id": wl.id,
        "owner_id": wl.owner_id,
        "name": wl.name,
        "description": wl.description,
        "is_public": wl.is_public,
        "share_token": wl.share_token,
        "item_count": item_count,
        "created_at": wl.created_at,
        "updated_at": wl.updated_at,
    }


def _sorted_items(wl: CustomWatchlist) -> list[CustomWatchlistItem]:
    return sorted(wl.items, key=lambda item: item.added_at, reverse=True)


def create_custom_watchlist(
    db: Session,
    owner_id: UUID,
    payload: CreateCustomWatchlistRequest,
) -> dict:
    """Create a list; the share token is generated by the column default."""
    wl = CustomWatchlist(
        owner_id=owner_id,
        name=payload.name,
        description=payload.description,
        is_public=payload.is_public,
    )
    db.add(wl)
    db.commit()
    db.refresh(wl)

    bus.publish(owner_id, COLLECTION_CUSTOM_WATCHLISTS)
    return _list_payload(wl, 0)


def list_my_custom_watchlists(db: Session, owner_id: UUID) -> list[dict]:
    """The owner's lists, newest first, with item counts."""
    rows = (
        db.query(CustomWatchlist, func.count(CustomWatchlistItem.id))
        .outerjoin(CustomWatchlistItem, CustomWatchlistItem.watchlist_id == CustomWatchlist.id)
        .filter(CustomWatchlist.owner_id == owner_id)
        .group_by(CustomWatchlist.id)
        .order_by(CustomWatchlist.created_at.desc())
        .all()
    )
    return [_list_payload(wl, item_count) for wl, item_count in rows]


def get_custom_watchlist_detail(db: Session, watchlist_id: UUID, owner_id: UUID) -> dict:
    wl = _get_owned_list_or_raise(db, watchlist_id, owner_id)
    items = _sorted_items(wl)
    return {
        **_list_payload(wl, len(items)),
        "items": [_item_payload(item) for item in items],
    }


def update_custom_watchlist(
    db: Session,
    watchlist_id: UUID,
    owner_id: UUID,
    payload: UpdateCustomWatchlistRequest,
) -> dict:
    wl = _get_owned_list_or_raise(db, watchlist_id, owner_id)
    fields = payload.model_fields_set

    if "name" in fields and payload.name is not None:
        wl.name = payload.name
    if "description" in fields:
        wl.description = payload.description
    if "is_public" in fields and payload.is_public is not None:
        wl.is_public = payload.is_public

    db.add(wl)
    db.commit()
    db.refresh(wl)

    bus.publish(owner_id, COLLECTION_CUSTOM_WATCHLISTS)
    return _list_payload(wl, len(wl.items))


def delete_custom_watchlist(db: Session, watchlist_id: UUID, owner_id: UUID) -> bool:
    """Delete a list and, through the relationship cascade, its items."""
    wl = _get_owned_list_or_raise(db, watchlist_id, owner_id)
    db.delete(wl)
    db.commit()

    bus.publish(owner_id, COLLECTION_CUSTOM_WATCHLISTS)
    return True


def add_item(
    db: Session,
    watchlist_id: UUID,
    owner_id: UUID,
    payload: AddCustomWatchlistItemRequest,
) -> dict:
    _get_owned_list_or_raise(db, watchlist_id, owner_id)

    item = CustomWatchlistItem(
        watchlist_id=watchlist_id,
        external_media_id=payload.external_media_id,
        title=payload.title,
        title_native=payload.title_native,
        image_url=payload.image_url,
        notes=payload.notes,
    )
    db.add(item)

    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc):
            raise ItemAlreadyExistsError("Anime already in this watchlist") from exc
        logger.exception("Custom list item insert failed for list %s", watchlist_id)
        raise

    db.commit()
    db.refresh(item)

    bus.publish(owner_id, COLLECTION_CUSTOM_WATCHLIST_ITEMS, str(watchlist_id))
    return _item_payload(item)


def remove_item(
    db: Session,
    watchlist_id: UUID,
    item_id: UUID,
    owner_id: UUID,
) -> bool:
    _get_owned_list_or_raise(db, watchlist_id, owner_id)

    item = (
        db.query(CustomWatchlistItem)
        .filter(
            CustomWatchlistItem.id == item_id,
            CustomWatchlistItem.watchlist_id == watchlist_id,
        )
        .first()
    )
    if item is None:
        raise ItemNotFoundError("Item not found in this watchlist")

    db.delete(item)
    db.commit()

    bus.publish(owner_id, COLLECTION_CUSTOM_WATCHLIST_ITEMS, str(watchlist_id))
    return True


def get_shared_watchlist(db: Session, share_token: str) -> dict:
    """
    Resolve a share token. Private and unknown lists give the same error so
    a token holder learns nothing once a list is made private.
    """
    wl = (
        db.query(CustomWatchlist)
        .filter(
            CustomWatchlist.share_token == share_token,
            CustomWatchlist.is_public.is_(True),
        )
        .first()
    )
    if wl is None:
        raise WatchlistNotFoundError("Watchlist not found or not public")

    return {
        "id": wl.id,
        "name": wl.name,
        "description": wl.description,
        "items": [_item_payload(item) for item in _sorted_items(wl)],
    }
