"""User router: all /users/* endpoints."""

from __future__ import annotations

import re

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devwars.auth.dependencies import get_current_user, owner_or_role, require_role
from devwars.config import get_settings
from devwars.database import get_session
from devwars.db.models import User, UserRole
from devwars.pagination import PageParams, build_pagination, parse_bool_with_default, parse_int_with_default
from devwars.users.dependencies import bind_user_from_param
from devwars.users.repository import find_leaderboard_users, find_users_like_username, find_users_with_paging
from devwars.users.schemas import (
    LeaderboardEntry,
    LeaderboardPageResponse,
    PaginationLinks,
    PublicUserResponse,
    UserDeletedResponse,
    UserLookupResponse,
    UserPageResponse,
    UserResponse,
    UserUpdateRequest,
    UserWithConnectionsResponse,
)
from devwars.users.service import (
    EmailTakenError,
    UserRemovalForbiddenError,
    UsernameTakenError,
    delete_user,
    project_connections,
    update_user,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/users", tags=["Users"])

_WHITESPACE = re.compile(r"\s")

_FORBIDDEN = "You are not authorized to perform this action."


def _with_connections(user: User) -> UserWithConnectionsResponse:
    return UserWithConnectionsResponse.from_user(user, connections=project_connections(user))


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


@router.get("/lookup", response_model=None)
async def lookup_user(
    username: str | None = None,
    limit: str | None = None,
    full: str | None = None,
    db: AsyncSession = Depends(get_session),
) -> list[BaseModel]:
    """Look up users by partial username, case-insensitive.

    Returns ``[{username, id}]`` unless ``full`` is true, in which case the
    complete records with their connections are returned.
    """
    username = _WHITESPACE.sub("", username or "")
    max_limit = get_settings().lookup_limit_max
    page_size = parse_int_with_default(limit, max_limit, 1, max_limit)
    full_details = parse_bool_with_default(full, False)

    if username == "":
        raise HTTPException(status_code=400, detail="The specified username within the query must not be empty.")

    users = await find_users_like_username(db, username, page_size)
    detailed = [_with_connections(user) for user in users]

    if full_details:
        return list(detailed)

    # Reduce the response down to the username and id of each user.
    return [UserLookupResponse(username=u.username, id=u.id) for u in detailed]


# ---------------------------------------------------------------------------
# Leaderboards
# ---------------------------------------------------------------------------


@router.get("/leaderboards", response_model=LeaderboardPageResponse)
async def get_users_leaderboards(
    request: Request,
    first: str | None = None,
    after: str | None = None,
    db: AsyncSession = Depends(get_session),
) -> LeaderboardPageResponse:
    """Page through the win-based leaderboard."""
    params = PageParams.from_query(first, after)
    rows = await find_leaderboard_users(db, params.first, params.after)
    return LeaderboardPageResponse(
        data=[LeaderboardEntry(**row) for row in rows],
        pagination=PaginationLinks(**build_pagination(request, params, len(rows))),
    )


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@router.get("/", response_model=UserPageResponse)
async def all_users(
    request: Request,
    first: str | None = None,
    after: str | None = None,
    _moderator: User = Depends(require_role(UserRole.MODERATOR)),
    db: AsyncSession = Depends(get_session),
) -> UserPageResponse:
    """Page through every user, most recently updated first."""
    params = PageParams.from_query(first, after)
    users = await find_users_with_paging(db, params.first, params.after)
    return UserPageResponse(
        data=[_with_connections(user) for user in users],
        pagination=PaginationLinks(**build_pagination(request, params, len(users))),
    )


# ---------------------------------------------------------------------------
# Single user
# ---------------------------------------------------------------------------


@router.get("/{user}", response_model=PublicUserResponse)
async def show(
    bound_user: User = Depends(bind_user_from_param),
) -> PublicUserResponse:
    """Get a user's public details."""
    return PublicUserResponse.from_user(bound_user)


@router.post("/{user}", response_model=UserResponse)
async def update(
    body: UserUpdateRequest,
    bound_user: User = Depends(owner_or_role(UserRole.MODERATOR)),
    actor: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Partially update a user. Owner or moderator.

    Someone else's account can only be changed by a caller ranked above its
    role. Role changes need a moderator, and nobody can grant a role above
    their own.
    """
    if actor.id != bound_user.id and actor.role <= bound_user.role:
        raise HTTPException(status_code=403, detail=_FORBIDDEN)
    if body.role is not None and (actor.role < UserRole.MODERATOR or body.role > actor.role):
        raise HTTPException(status_code=403, detail=_FORBIDDEN)
    user_id = bound_user.id
    try:
        user = await update_user(db, bound_user, body.to_changes())
        await db.commit()
    except (UsernameTakenError, EmailTakenError) as e:
        await db.rollback()
        raise HTTPException(status_code=409, detail=str(e)) from e
    except IntegrityError as e:
        # Lost a race with another write of the same username or email.
        await db.rollback()
        logger.warning("user_update_conflict", user_id=user_id)
        raise HTTPException(status_code=409, detail="The provided username or email is already in use.") from e
    return UserResponse.from_user(user)


@router.delete("/{user}", response_model=UserDeletedResponse)
async def remove(
    bound_user: User = Depends(owner_or_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_session),
) -> UserDeletedResponse:
    """Delete a user and everything that references them. Owner or admin."""
    try:
        removed_id = await delete_user(db, bound_user)
    except UserRemovalForbiddenError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return UserDeletedResponse(user=removed_id)
