"""
Custom Lists API - /lists and /shared
──────────────────────────────────────
Curated sub-lists, optionally shared read-only by token.

Endpoints:
  POST   /lists                          - Create a list
  GET    /lists                          - My lists, newest first
  GET    /lists/{id}                     - List detail with items (owner only)
  PATCH  /lists/{id}                     - Rename / describe / publish (owner only)
  DELETE /lists/{id}                     - Delete list and items (owner only)
  POST   /lists/{id}/items               - Add an anime (owner only)
  DELETE /lists/{id}/items/{item_id}     - Remove an anime (owner only)
  GET    /shared/{share_token}           - Public read by token, no auth
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from animetrack.db.models import User
from animetrack.db.session import get_db
from animetrack.deps.auth import get_current_user
from animetrack.schemas.custom_watchlists import (
    AddCustomWatchlistItemRequest,
    CreateCustomWatchlistRequest,
    CustomWatchlistDetailResponse,
    CustomWatchlistItemResponse,
    CustomWatchlistResponse,
    SharedWatchlistResponse,
    UpdateCustomWatchlistRequest,
)
from animetrack.services.custom_list_service import (
    ItemAlreadyExistsError,
    ItemNotFoundError,
    NotListOwnerError,
    WatchlistNotFoundError,
    add_item,
    create_custom_watchlist,
    delete_custom_watchlist,
    get_custom_watchlist_detail,
    get_shared_watchlist,
    list_my_custom_watchlists,
    remove_item,
    update_custom_watchlist,
)

router = APIRouter()
shared_router = APIRouter()


@router.post("", response_model=CustomWatchlistResponse, status_code=status.HTTP_201_CREATED)
def create_list(
    payload: CreateCustomWatchlistRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return create_custom_watchlist(db, current_user.id, payload)


@router.get("", response_model=list[CustomWatchlistResponse])
def list_lists(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[dict]:
    return list_my_custom_watchlists(db, current_user.id)


@router.get("/{watchlist_id}", response_model=CustomWatchlistDetailResponse)
def get_list(
    watchlist_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return get_custom_watchlist_detail(db, watchlist_id, current_user.id)
    except WatchlistNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotListOwnerError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.patch("/{watchlist_id}", response_model=CustomWatchlistResponse)
def update_list(
    watchlist_id: UUID,
    payload: UpdateCustomWatchlistRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return update_custom_watchlist(db, watchlist_id, current_user.id, payload)
    except WatchlistNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotListOwnerError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.delete("/{watchlist_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_list(
    watchlist_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    try:
        delete_custom_watchlist(db, watchlist_id, current_user.id)
    except WatchlistNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotListOwnerError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.post(
    "/{watchlist_id}/items",
    response_model=CustomWatchlistItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_list_item(
    watchlist_id: UUID,
    payload: AddCustomWatchlistItemRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return add_item(db, watchlist_id, current_user.id, payload)
    except WatchlistNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotListOwnerError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ItemAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/{watchlist_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_list_item(
    watchlist_id: UUID,
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    try:
        remove_item(db, watchlist_id, item_id, current_user.id)
    except (WatchlistNotFoundError, ItemNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotListOwnerError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@shared_router.get("/{share_token}", response_model=SharedWatchlistResponse)
def read_shared_list(share_token: str, db: Session = Depends(get_db)) -> dict:
    try:
        return get_shared_watchlist(db, share_token)
    except WatchlistNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": {"code": "SHARED_LIST_UNAVAILABLE", "message": str(exc)}},
        ) from exc
