"""Initial schema: users, their dependent records, and games.

Includes a GIN index on ``game.storage -> 'players'`` so user removal can
find the games a user played with the JSONB ``?`` operator.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_ROLES = ("PENDING", "USER", "MODERATOR", "ADMIN")
_GAME_STATUSES = ("SCHEDULED", "ACTIVE", "ENDED")


def _user_fk() -> sa.Column:
    return sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False)


def upgrade() -> None:
    """Create all tables."""
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True),
        sa.Column("email", sa.String(320), nullable=True, unique=True),
        sa.Column("password", sa.String(256), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("token", sa.String(256), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("last_sign_in", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    )
    op.execute(
        "ALTER TABLE users ADD CONSTRAINT ck_users_role "
        f"CHECK (role IN ({', '.join(repr(r) for r in _ROLES)}))"
    )
    op.create_index("ix_users_updated_at", "users", ["updated_at"])
    op.execute("CREATE INDEX ix_users_username_lower ON users (LOWER(username))")

    # --- linked_account ---
    op.create_table(
        "linked_account",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("username", sa.String(128), nullable=False),
        sa.Column("provider", sa.String(32), nullable=False),
        sa.Column("provider_id", sa.String(128), nullable=False),
        sa.Column("storage", postgresql.JSONB(), server_default="{}", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.UniqueConstraint("provider", "provider_id", name="uq_linked_account_provider"),
    )
    op.create_index("ix_linked_account_user_id", "linked_account", ["user_id"])

    # --- user_profile ---
    op.create_table(
        "user_profile",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("first_name", sa.String(64), nullable=True),
        sa.Column("last_name", sa.String(64), nullable=True),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("company", sa.String(128), nullable=True),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("for_hire", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("skills", postgresql.JSONB(), server_default="{}", nullable=False),
    )

    # --- user_stats / user_game_stats ---
    op.create_table(
        "user_stats",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("coins", sa.Integer(), server_default="0", nullable=False),
        sa.Column("xp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("level", sa.Integer(), server_default="1", nullable=False),
        sa.Column("twitch_coins", sa.Integer(), server_default="0", nullable=False),
    )
    op.create_table(
        "user_game_stats",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("wins", sa.Integer(), server_default="0", nullable=False),
        sa.Column("losses", sa.Integer(), server_default="0", nullable=False),
    )

    # --- email_opt_in / password_reset / email_verification ---
    op.create_table(
        "email_opt_in",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("news", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("game_applications", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("schedules", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("linked_accounts", sa.Boolean(), server_default="true", nullable=False),
    )
    op.create_table(
        "password_reset",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "email_verification",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("token", sa.String(128), nullable=False),
    )

    # --- activity ---
    op.create_table(
        "activity",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("coins", sa.Integer(), server_default="0", nullable=False),
        sa.Column("xp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    )

    # --- game / game_schedule / game_application ---
    op.create_table(
        "game",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("season", sa.Integer(), server_default="3", nullable=False),
        sa.Column("mode", sa.String(32), nullable=False),
        sa.Column("status", sa.String(16), server_default="SCHEDULED", nullable=False),
        sa.Column("storage", postgresql.JSONB(), server_default="{}", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
    )
    op.execute("CREATE INDEX ix_game_storage_players ON game USING GIN ((storage -> 'players'))")

    op.create_table(
        "game_schedule",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("game_id", sa.BigInteger(), sa.ForeignKey("game.id", ondelete="CASCADE"), nullable=True, unique=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(16), server_default="SCHEDULED", nullable=False),
        sa.Column("setup", postgresql.JSONB(), server_default="{}", nullable=False),
    )
    for table in ("game", "game_schedule"):
        op.execute(
            f"ALTER TABLE {table} ADD CONSTRAINT ck_{table}_status "
            f"CHECK (status IN ({', '.join(repr(s) for s in _GAME_STATUSES)}))"
        )

    op.create_table(
        "game_application",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        _user_fk(),
        sa.Column(
            "schedule_id",
            sa.BigInteger(),
            sa.ForeignKey("game_schedule.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.UniqueConstraint("user_id", "schedule_id", name="uq_game_application_user_schedule"),
    )

    for table in (
        "user_profile",
        "user_stats",
        "user_game_stats",
        "email_opt_in",
        "password_reset",
        "email_verification",
        "activity",
        "game_application",
    ):
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        "game_application",
        "game_schedule",
        "game",
        "activity",
        "email_verification",
        "password_reset",
        "email_opt_in",
        "user_game_stats",
        "user_stats",
        "user_profile",
        "linked_account",
        "users",
    ):
        op.drop_table(table)
