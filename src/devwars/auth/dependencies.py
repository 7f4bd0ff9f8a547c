"""FastAPI authentication and role dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import jwt
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from devwars.auth.jwt import verify_token
from devwars.database import get_session
from devwars.db.models import User, UserRole
from devwars.users.dependencies import bind_user_from_param
from devwars.users.repository import find_by_id

_bearer = HTTPBearer()

_FORBIDDEN = "You are not authorized to perform this action."


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify JWT, return User model.

    Raises 401 on an invalid token or an unknown user.
    """
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    user = await find_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_role(minimum: UserRole) -> Callable[..., Awaitable[User]]:
    """Dependency factory: the caller must hold at least ``minimum``."""

    async def _require_role(user: User = Depends(get_current_user)) -> User:
        if user.role < minimum:
            raise HTTPException(status_code=403, detail=_FORBIDDEN)
        return user

    return _require_role


def owner_or_role(minimum: UserRole) -> Callable[..., Awaitable[User]]:
    """Dependency factory: the caller owns the bound user or holds at least ``minimum``.

    Resolves to the bound (target) user.
    """

    async def _owner_or_role(
        user: User = Depends(get_current_user),
        bound_user: User = Depends(bind_user_from_param),
    ) -> User:
        if user.id != bound_user.id and user.role < minimum:
            raise HTTPException(status_code=403, detail=_FORBIDDEN)
        return bound_user

    return _owner_or_role
