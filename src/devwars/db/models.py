"""ORM models for users, their dependent records, and games.

Every record owned by a user references ``users.id`` without an ON DELETE
rule. Removing a user is done explicitly by ``devwars.users.service.delete_user``
inside a single transaction.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devwars.db.base import Base, BigIntPK, JSONType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(enum.IntEnum):
    """Totally ordered user roles. Stored by name, compared by value."""

    PENDING = 0
    USER = 1
    MODERATOR = 2
    ADMIN = 3


class GameStatus(enum.IntEnum):
    SCHEDULED = 0
    ACTIVE = 1
    ENDED = 2


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, unique=True)
    password: Mapped[str | None] = mapped_column(String(256), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=UserRole.PENDING,
    )
    token: Mapped[str | None] = mapped_column(String(256), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_sign_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    # --- Relationships ---
    connections: Mapped[list[LinkedAccount]] = relationship("LinkedAccount", back_populates="user")


class LinkedAccount(Base):
    """A third-party account (Discord, Twitch) connected to a user."""

    __tablename__ = "linked_account"
    __table_args__ = (UniqueConstraint("provider", "provider_id", name="uq_linked_account_provider"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    provider: Mapped[str] = mapped_column(String(32), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(128), nullable=False)
    storage: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user: Mapped[User | None] = relationship("User", back_populates="connections")


class UserProfile(Base):
    __tablename__ = "user_profile"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    about: Mapped[str | None] = mapped_column(Text, nullable=True)
    company: Mapped[str | None] = mapped_column(String(128), nullable=True)
    website_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    for_hire: Mapped[bool] = mapped_column(Boolean, default=False)
    skills: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)


class UserStats(Base):
    __tablename__ = "user_stats"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    coins: Mapped[int] = mapped_column(Integer, default=0)
    xp: Mapped[int] = mapped_column(Integer, default=0)
    level: Mapped[int] = mapped_column(Integer, default=1)
    twitch_coins: Mapped[int] = mapped_column(Integer, default=0)


class UserGameStats(Base):
    __tablename__ = "user_game_stats"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    wins: Mapped[int] = mapped_column(Integer, default=0)
    losses: Mapped[int] = mapped_column(Integer, default=0)


class EmailOptIn(Base):
    """Which categories of email a user agreed to receive."""

    __tablename__ = "email_opt_in"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    news: Mapped[bool] = mapped_column(Boolean, default=True)
    game_applications: Mapped[bool] = mapped_column(Boolean, default=True)
    schedules: Mapped[bool] = mapped_column(Boolean, default=True)
    linked_accounts: Mapped[bool] = mapped_column(Boolean, default=True)


class PasswordReset(Base):
    __tablename__ = "password_reset"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    token: Mapped[str] = mapped_column(String(128), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class EmailVerification(Base):
    __tablename__ = "email_verification"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    token: Mapped[str] = mapped_column(String(128), nullable=False)


class Activity(Base):
    """Coins/xp awarded to a user for something they did."""

    __tablename__ = "activity"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    coins: Mapped[int] = mapped_column(Integer, default=0)
    xp: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Games
# ---------------------------------------------------------------------------


class Game(Base):
    """A played or scheduled game.

    ``storage["players"]`` maps a user id (as a string) to the player record
    ``{"id", "team", "username"}`` shown on historical rosters.
    """

    __tablename__ = "game"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    season: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    mode: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[GameStatus] = mapped_column(
        Enum(GameStatus, name="game_status", native_enum=False, length=16),
        nullable=False,
        default=GameStatus.SCHEDULED,
    )
    storage: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    schedule: Mapped[GameSchedule | None] = relationship("GameSchedule", back_populates="game", uselist=False)


class GameSchedule(Base):
    __tablename__ = "game_schedule"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    game_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("game.id", ondelete="CASCADE"), nullable=True, unique=True
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[GameStatus] = mapped_column(
        Enum(GameStatus, name="game_status", native_enum=False, length=16),
        nullable=False,
        default=GameStatus.SCHEDULED,
    )
    setup: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    game: Mapped[Game | None] = relationship("Game", back_populates="schedule")
    applications: Mapped[list[GameApplication]] = relationship("GameApplication", back_populates="schedule")


class GameApplication(Base):
    """A user's request to compete in a scheduled game."""

    __tablename__ = "game_application"
    __table_args__ = (UniqueConstraint("user_id", "schedule_id", name="uq_game_application_user_schedule"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    schedule_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("game_schedule.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    schedule: Mapped[GameSchedule] = relationship("GameSchedule", back_populates="applications")


# Models holding a ``user_id`` that must be removed before the user row.
USER_DEPENDENT_MODELS: tuple[type[Base], ...] = (
    Activity,
    UserProfile,
    EmailOptIn,
    UserStats,
    UserGameStats,
    LinkedAccount,
    PasswordReset,
    EmailVerification,
    GameApplication,
)
