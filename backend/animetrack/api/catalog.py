"""
Catalog API - /catalog
───────────────────────
Endpoints:
  GET /catalog/search     - Free-text anime search (12 per page)
  GET /catalog/trending   - Top anime listing (12 per page)

Anonymous callers get plain results. Signed-in callers get each result
flagged with in_watchlist, and stale responses flagged as superseded.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from animetrack.db.models import User
from animetrack.db.session import get_db
from animetrack.deps.auth import get_optional_user
from animetrack.schemas.catalog import CatalogSearchResponse
from animetrack.services.catalog_service import (
    EmptyQueryError,
    search_catalog,
    trending_catalog,
)
from animetrack.services.jikan_client import CatalogUpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()

CATALOG_UNAVAILABLE_MESSAGE = "Failed to reach the anime catalog. Please try again!"


def _error(code: str, message: str, retryable: bool = False) -> dict:
    return {"error": {"code": code, "message": message, "retryable": retryable}}


def _upstream_failure(exc: CatalogUpstreamError) -> HTTPException:
    logger.warning("Catalog unavailable: %s", exc)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=_error("CATALOG_UNAVAILABLE", CATALOG_UNAVAILABLE_MESSAGE, retryable=True),
    )


@router.get("/search", response_model=CatalogSearchResponse)
async def search(
    q: str = Query(..., min_length=1, description="Search query"),
    page: int = Query(1, ge=1),
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return await search_catalog(
            db,
            q,
            page=page,
            viewer_id=viewer.id if viewer is not None else None,
        )
    except EmptyQueryError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_error("EMPTY_QUERY", str(exc)),
        ) from exc
    except CatalogUpstreamError as exc:
        raise _upstream_failure(exc) from exc


@router.get("/trending", response_model=CatalogSearchResponse)
async def trending(
    page: int = Query(1, ge=1),
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        return await trending_catalog(
            db,
            page=page,
            viewer_id=viewer.id if viewer is not None else None,
        )
    except CatalogUpstreamError as exc:
        raise _upstream_failure(exc) from exc
