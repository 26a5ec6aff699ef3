"""
SQLAlchemy ORM models.

Column names follow the Alembic migrations under alembic/versions. UUID
columns use the dialect-neutral ``Uuid`` type so the same metadata builds on
Postgres (native uuid) and on SQLite in the service tests.

Relationships are declared here so services can navigate the graph
without writing raw joins everywhere.
"""
import secrets
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ─────────────────────────────────────────────────────────────────────

class WatchStatusEnum(str, PyEnum):
    WATCH_LATER = "watch_later"
    WATCHING = "watching"
    COMPLETED = "completed"


class ThemeEnum(str, PyEnum):
    STARRY = "starry"
    SAKURA = "sakura"
    NEON = "neon"
    MINIMAL = "minimal"


DEFAULT_THEME = ThemeEnum.STARRY


# ── Column defaults ───────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_share_token() -> str:
    """Opaque capability string for public custom lists (32 url-safe chars)."""
    return secrets.token_urlsafe(24)


# ── Models ────────────────────────────────────────────────────────────────────

class User(Base):
    """
    Account used to sign in. Email is stored lower-cased; the owner id of
    every watchlist row is this table's primary key.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    # Relationships
    watchlist_entries = relationship(
        "WatchlistEntry",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )
    custom_watchlists = relationship(
        "CustomWatchlist",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )
    profile = relationship(
        "UserProfile",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


class WatchlistEntry(Base):
    """
    One anime on a user's personal watchlist.

    external_media_id is the catalog (MyAnimeList) id. status is plain text:
    writes are validated against WatchStatusEnum by the API schemas, but rows
    imported from elsewhere may carry other values and readers must cope.
    """
    __tablename__ = "watchlist_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    external_media_id = Column(Integer, nullable=False)
    title = Column(String(500), nullable=False)
    title_native = Column(String(500), nullable=True)
    image_url = Column(String(1000), nullable=True)
    total_episodes = Column(Integer, nullable=True)
    episodes_watched = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=WatchStatusEnum.WATCH_LATER.value)
    rating = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    added_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        # One row per anime per owner; duplicates are rejected, never merged
        UniqueConstraint("owner_id", "external_media_id", name="uq_watchlist_owner_media"),
        Index("idx_watchlist_owner_updated", "owner_id", "updated_at"),
        CheckConstraint(
            "rating IS NULL OR rating BETWEEN 1 AND 10",
            name="chk_watchlist_rating_1_10",
        ),
        CheckConstraint("episodes_watched >= 0", name="chk_watchlist_episodes_nonneg"),
    )

    owner = relationship("User", back_populates="watchlist_entries")

    def __repr__(self) -> str:
        return (
            f"<WatchlistEntry owner={self.owner_id} media={self.external_media_id} "
            f"status={self.status}>"
        )


class CustomWatchlist(Base):
    """
    A named, curated list. Readable by anyone holding share_token while
    is_public is true; every other access is owner-only.
    """
    __tablename__ = "custom_watchlists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    share_token = Column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
        default=generate_share_token,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "length(trim(name)) >= 1 AND length(trim(name)) <= 100",
            name="chk_custom_watchlist_name",
        ),
    )

    owner = relationship("User", back_populates="custom_watchlists")
    items = relationship(
        "CustomWatchlistItem",
        back_populates="watchlist",
        cascade="all, delete-orphan",
        order_by="CustomWatchlistItem.added_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<CustomWatchlist id={self.id} name={self.name!r}>"


class CustomWatchlistItem(Base):
    """An anime pinned to a custom list."""
    __tablename__ = "custom_watchlist_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    watchlist_id = Column(
        Uuid,
        ForeignKey("custom_watchlists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    external_media_id = Column(Integer, nullable=False)
    title = Column(String(500), nullable=False)
    title_native = Column(String(500), nullable=True)
    image_url = Column(String(1000), nullable=True)
    notes = Column(Text, nullable=True)
    added_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("watchlist_id", "external_media_id", name="uq_custom_watchlist_item"),
    )

    watchlist = relationship("CustomWatchlist", back_populates="items")


class UserProfile(Base):
    """Display preferences. Created lazily the first time a theme is saved."""
    __tablename__ = "profiles"

    id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email = Column(String(255), nullable=True)
    theme = Column(String(20), nullable=False, default=DEFAULT_THEME.value)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "theme IN ('starry', 'sakura', 'neon', 'minimal')",
            name="chk_profile_theme",
        ),
    )

    user = relationship("User", back_populates="profile")

    def __repr__(self) -> str:
        return f"<UserProfile id={self.id} theme={self.theme}>"
