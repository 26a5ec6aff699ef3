"""
Profile business logic - theme preference and the statistics panel.
"""
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from animetrack.db.models import DEFAULT_THEME, ThemeEnum, User, UserProfile
from animetrack.services.realtime import COLLECTION_PROFILES, bus
from animetrack.services.watchlist_service import stats_for_owner, stats_payload

logger = logging.getLogger(__name__)

THEMES: dict[ThemeEnum, dict[str, str]] = {
    ThemeEnum.STARRY: {
        "name": "Starry Handdrawn",
        "description": "Cozy anime vibes with hand-drawn elements",
        "icon": "✨",
    },
    ThemeEnum.SAKURA: {
        "name": "Sakura Dreams",
        "description": "Soft pink cherry blossom aesthetic",
        "icon": "🌸",
    },
    ThemeEnum.NEON: {
        "name": "Neon City",
        "description": "Vibrant cyberpunk inspired colors",
        "icon": "🌃",
    },
    ThemeEnum.MINIMAL: {
        "name": "Minimal Zen",
        "description": "Clean and simple design",
        "icon": "⚪",
    },
}


def list_themes() -> list[dict]:
    return [{"key": key, **info} for key, info in THEMES.items()]


def _find_profile(db: Session, user_id: UUID) -> UserProfile | None:
    return db.query(UserProfile).filter(UserProfile.id == user_id).first()


def get_theme(db: Session, user_id: UUID) -> ThemeEnum:
    """The saved theme, or the default when no profile row exists yet."""
    profile = _find_profile(db, user_id)
    if profile is None:
        return DEFAULT_THEME
    try:
        return ThemeEnum(profile.theme)
    except ValueError:
        return DEFAULT_THEME


def set_theme(db: Session, user: User, theme: ThemeEnum) -> ThemeEnum:
    """
    Save *theme*, creating the profile row on first use.

    Two first-time saves can race on the insert; the loser re-reads the
    winner's row and updates it instead.
    """
    profile = _find_profile(db, user.id)
    if profile is None:
        db.add(UserProfile(id=user.id, email=user.email, theme=theme.value))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            profile = _find_profile(db, user.id)
            if profile is None:
                raise
            logger.info("Profile for %s created concurrently; updating it", user.id)

    if profile is not None:
        profile.theme = theme.value
        profile.email = user.email
        db.commit()

    bus.publish(user.id, COLLECTION_PROFILES)
    return theme


def get_profile(db: Session, user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "theme": get_theme(db, user.id),
        "stats": stats_payload(stats_for_owner(db, user.id)),
    }
