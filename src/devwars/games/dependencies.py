"""Resolve the ``{game}`` path parameter to a Game with its schedule."""

from __future__ import annotations

from fastapi import Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devwars.database import get_session
from devwars.db.models import Game
from devwars.users.dependencies import parse_entity_id


async def bind_game_from_param(
    game: str,
    db: AsyncSession = Depends(get_session),
) -> Game:
    """Load the game named by the path, 400 on a malformed id and 404 when missing."""
    game_id = parse_entity_id(game)
    if game_id is None:
        raise HTTPException(status_code=400, detail="Invalid game id provided.")

    result = await db.execute(
        select(Game).where(Game.id == game_id).options(selectinload(Game.schedule))
    )
    bound = result.scalar_one_or_none()
    if bound is None:
        raise HTTPException(status_code=404, detail="A game does not exist by the provided game id.")
    return bound
