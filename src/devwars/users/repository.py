"""User and leaderboard queries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import cast, func, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import selectinload

from devwars.db.models import Game, User, UserGameStats, UserStats

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def find_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by exact username."""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def find_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by exact email."""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def find_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def find_users_like_username(
    db: AsyncSession,
    username: str,
    limit: int,
    with_connections: bool = True,
) -> list[User]:
    """Case-insensitive partial match on username. ``%`` and ``_`` match literally."""
    pattern = username.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    query = (
        select(User)
        .where(User.username.ilike(f"%{pattern}%", escape="\\"))
        .order_by(User.username, User.id)
        .limit(limit)
    )
    if with_connections:
        query = query.options(selectinload(User.connections))
    result = await db.execute(query)
    return list(result.scalars().all())


async def find_users_with_paging(
    db: AsyncSession,
    first: int,
    after: int,
    with_connections: bool = True,
) -> list[User]:
    """Fetch ``first`` users starting at offset ``after``, most recently updated first."""
    query = select(User).order_by(User.updated_at.desc(), User.id.desc()).offset(after).limit(first)
    if with_connections:
        query = query.options(selectinload(User.connections))
    result = await db.execute(query)
    return list(result.scalars().all())


async def find_leaderboard_users(db: AsyncSession, first: int, after: int) -> list[dict[str, Any]]:
    """Fetch a page of per-user win/loss and progression totals, best first.

    Game results and progression are each reduced to one row per user before
    joining, so several rows in one table never multiply the other's totals.
    """
    games = (
        select(
            UserGameStats.user_id,
            func.sum(UserGameStats.wins).label("wins"),
            func.sum(UserGameStats.losses).label("losses"),
        )
        .group_by(UserGameStats.user_id)
        .subquery()
    )
    progress = (
        select(
            UserStats.user_id,
            func.max(UserStats.xp).label("xp"),
            func.max(UserStats.coins).label("coins"),
            func.max(UserStats.level).label("level"),
        )
        .group_by(UserStats.user_id)
        .subquery()
    )

    wins = func.coalesce(games.c.wins, 0)
    losses = func.coalesce(games.c.losses, 0)
    xp = func.coalesce(progress.c.xp, 0)

    query = (
        select(
            User.id.label("user_id"),
            User.username,
            wins.label("wins"),
            losses.label("losses"),
            xp.label("xp"),
            func.coalesce(progress.c.coins, 0).label("coins"),
            func.coalesce(progress.c.level, 1).label("level"),
        )
        .outerjoin(games, games.c.user_id == User.id)
        .outerjoin(progress, progress.c.user_id == User.id)
        .order_by(wins.desc(), losses.asc(), xp.desc(), User.id.asc())
        .offset(after)
        .limit(first)
    )
    result = await db.execute(query)
    return [dict(row._mapping) for row in result]


async def find_games_with_player(db: AsyncSession, user_id: int) -> list[Game]:
    """Fetch games whose ``storage["players"]`` map has an entry for ``user_id``.

    PostgreSQL answers the key lookup with the JSONB ``?`` operator. Other
    stores scan every game and filter after deserializing.
    """
    key = str(user_id)
    query = select(Game).order_by(Game.id)
    if db.bind.dialect.name == "postgresql":
        query = query.where(cast(Game.storage["players"], JSONB).has_key(key))

    result = await db.execute(query)
    return [game for game in result.scalars() if key in ((game.storage or {}).get("players") or {})]
