"""Initial schema: users, watchlist_entries, custom_watchlists, custom_watchlist_items, profiles

Revision ID: 0001
Revises:
Create Date: 2025-01-01 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _updated_at_trigger(table: str) -> None:
    op.execute(f"""
        CREATE TRIGGER trg_{table}_updated_at
        BEFORE UPDATE ON {table}
        FOR EACH ROW EXECUTE FUNCTION set_updated_at()
    """)


def upgrade() -> None:
    # ── Extensions ────────────────────────────────────────────────────────────
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # ── Trigger function (auto-update updated_at) ─────────────────────────────
    op.execute("""
        CREATE OR REPLACE FUNCTION set_updated_at()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
          NEW.updated_at = now();
          RETURN NEW;
        END;
        $$
    """)

    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"])
    _updated_at_trigger("users")

    # ── watchlist_entries ─────────────────────────────────────────────────────
    # status stays text: legacy rows may carry values outside the three buckets
    op.create_table(
        "watchlist_entries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("owner_id", UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("external_media_id", sa.Integer, nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("title_native", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("total_episodes", sa.Integer, nullable=True),
        sa.Column("episodes_watched", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(20), nullable=False, server_default="watch_later"),
        sa.Column("rating", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("owner_id", "external_media_id", name="uq_watchlist_owner_media"),
        sa.CheckConstraint(
            "rating IS NULL OR rating BETWEEN 1 AND 10",
            name="chk_watchlist_rating_1_10",
        ),
        sa.CheckConstraint("episodes_watched >= 0", name="chk_watchlist_episodes_nonneg"),
    )
    op.create_index("ix_watchlist_entries_owner_id", "watchlist_entries", ["owner_id"])
    op.create_index(
        "idx_watchlist_owner_updated", "watchlist_entries", ["owner_id", "updated_at"]
    )
    _updated_at_trigger("watchlist_entries")

    # ── custom_watchlists ─────────────────────────────────────────────────────
    op.create_table(
        "custom_watchlists",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("owner_id", UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("share_token", sa.String(64), nullable=False,
                  server_default=sa.text("encode(gen_random_bytes(24), 'hex')")),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("share_token", name="uq_custom_watchlists_share_token"),
        sa.CheckConstraint(
            "length(trim(name)) >= 1 AND length(trim(name)) <= 100",
            name="chk_custom_watchlist_name",
        ),
    )
    op.create_index("ix_custom_watchlists_owner_id", "custom_watchlists", ["owner_id"])
    op.create_index("ix_custom_watchlists_share_token", "custom_watchlists", ["share_token"])
    _updated_at_trigger("custom_watchlists")

    # ── custom_watchlist_items ────────────────────────────────────────────────
    op.create_table(
        "custom_watchlist_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text("gen_random_uuid()")),
        sa.Column("watchlist_id", UUID(as_uuid=True),
                  sa.ForeignKey("custom_watchlists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("external_media_id", sa.Integer, nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("title_native", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("watchlist_id", "external_media_id", name="uq_custom_watchlist_item"),
    )
    op.create_index(
        "ix_custom_watchlist_items_watchlist_id", "custom_watchlist_items", ["watchlist_id"]
    )

    # ── profiles ──────────────────────────────────────────────────────────────
    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True),
                  sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("theme", sa.String(20), nullable=False, server_default="starry"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "theme IN ('starry', 'sakura', 'neon', 'minimal')",
            name="chk_profile_theme",
        ),
    )
    _updated_at_trigger("profiles")


def downgrade() -> None:
    op.drop_table("profiles")
    op.drop_table("custom_watchlist_items")
    op.drop_table("custom_watchlists")
    op.drop_table("watchlist_entries")
    op.drop_table("users")
    op.execute("DROP FUNCTION IF EXISTS set_updated_at()")
