"""Resolve the ``{user}`` path parameter to a User."""

from __future__ import annotations

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from devwars.database import get_session
from devwars.db.models import User
from devwars.users.repository import find_by_id


def parse_entity_id(value: str) -> int | None:
    """Parse a path id. Returns None unless it is a positive integer."""
    try:
        entity_id = int(value)
    except ValueError:
        return None
    return entity_id if entity_id > 0 else None


async def bind_user_from_param(
    user: str,
    db: AsyncSession = Depends(get_session),
) -> User:
    """Load the user named by the path, 400 on a malformed id and 404 when missing."""
    user_id = parse_entity_id(user)
    if user_id is None:
        raise HTTPException(status_code=400, detail="Invalid user id provided.")

    bound = await find_by_id(db, user_id)
    if bound is None:
        raise HTTPException(status_code=404, detail="A user does not exist by the provided user id.")
    return bound
