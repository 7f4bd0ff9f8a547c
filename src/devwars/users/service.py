"""User management business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete

from devwars.auth.password import hash_password
from devwars.db.models import USER_DEPENDENT_MODELS, User, UserRole
from devwars.users.repository import find_by_email, find_by_username, find_games_with_player

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

# Written into a game's player map in place of a removed user.
REMOVED_PLAYER_ID = 0
REMOVED_PLAYER_USERNAME = "Competitor"


class UsernameTakenError(ValueError):
    """Raised when a username already belongs to another user."""


class EmailTakenError(ValueError):
    """Raised when an email already belongs to another user."""


class UserRemovalForbiddenError(ValueError):
    """Raised when the target user's role does not allow removal."""


def project_connections(user: User) -> list[dict[str, str]]:
    """Reduce linked accounts to their username and lowercased provider."""
    return [
        {"username": account.username, "provider": account.provider.lower()}
        for account in user.connections
    ]


async def update_user(db: AsyncSession, user: User, changes: dict[str, Any]) -> User:
    """
    Merge ``changes`` onto ``user``. Keys absent from ``changes`` are untouched.

    Raises:
        UsernameTakenError: If the new username belongs to a different user.
        EmailTakenError: If the new email belongs to a different user.
    """
    username = changes.get("username")
    if username is not None:
        existing = await find_by_username(db, username)
        if existing is not None and existing.id != user.id:
            msg = "The provided username already exists for a registered user."
            raise UsernameTakenError(msg)

    email = changes.get("email")
    if email is not None:
        existing = await find_by_email(db, email)
        if existing is not None and existing.id != user.id:
            msg = "The provided email already exists for a registered user."
            raise EmailTakenError(msg)

    if changes.get("password") is not None:
        changes = {**changes, "password": hash_password(changes["password"])}

    for field, value in changes.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)

    logger.info("user_updated", user_id=user.id, fields=sorted(changes))
    return user


def anonymize_player(storage: dict[str, Any], user_id: int) -> dict[str, Any]:
    """Return a copy of ``storage`` with the user's player entry replaced by the sentinel.

    The player keeps its slot and team so historical rosters stay balanced.
    """
    key = str(user_id)
    players = dict(storage.get("players") or {})
    player = players.get(key) or {}
    players[key] = {
        "id": REMOVED_PLAYER_ID,
        "team": player.get("team"),
        "username": REMOVED_PLAYER_USERNAME,
    }
    return {**storage, "players": players}


async def delete_user(db: AsyncSession, user: User) -> int:
    """
    Remove ``user`` and every record that references it in one transaction.

    Dependent rows are deleted first, then each game listing the user as a
    player has that entry anonymized, then the user row goes. Any failure
    rolls the whole transaction back.

    Returns:
        The removed user's id.

    Raises:
        UserRemovalForbiddenError: If the user's role is MODERATOR or lower.
    """
    if user.role <= UserRole.MODERATOR:
        msg = "Users with roles moderator or higher cannot be deleted, ensure to demote the user first."
        raise UserRemovalForbiddenError(msg)

    user_id = user.id

    try:
        for model in USER_DEPENDENT_MODELS:
            await db.execute(delete(model).where(model.user_id == user_id))

        games = await find_games_with_player(db, user_id)
        for game in games:
            game.storage = anonymize_player(game.storage, user_id)
        await db.flush()

        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("user_removal_failed", user_id=user_id)
        raise

    logger.info("user_removed", user_id=user_id, games_anonymized=len(games))
    return user_id
