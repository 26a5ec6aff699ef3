"""
Profile API - /profile
───────────────────────
Endpoints:
  GET /profile          - Account info, theme, and watchlist statistics
  GET /profile/themes   - Available themes
  PUT /profile/theme    - Save theme (creates the profile on first use)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from animetrack.db.models import User
from animetrack.db.session import get_db
from animetrack.deps.auth import get_current_user
from animetrack.schemas.profile import (
    ProfileResponse,
    SetThemeRequest,
    ThemeInfo,
    ThemeResponse,
)
from animetrack.services.profile_service import get_profile, list_themes, set_theme

router = APIRouter()


@router.get("", response_model=ProfileResponse)
def read_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    return get_profile(db, current_user)


@router.get("/themes", response_model=list[ThemeInfo])
def read_themes() -> list[dict]:
    return list_themes()


@router.put("/theme", response_model=ThemeResponse)
def update_theme(
    payload: SetThemeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ThemeResponse:
    return ThemeResponse(theme=set_theme(db, current_user, payload.theme))
