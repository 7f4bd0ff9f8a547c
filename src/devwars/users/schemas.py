"""Request/response schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from devwars.db.models import User, UserRole


class ConnectionResponse(BaseModel):
    """A linked account reduced to what other users may see."""

    username: str
    provider: str


class UserLookupResponse(BaseModel):
    username: str
    id: int


class PublicUserResponse(BaseModel):
    """A user without email, sign-in or record timestamps."""

    id: int
    username: str
    role: str
    avatar_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> PublicUserResponse:
        return cls(id=user.id, username=user.username, role=user.role.name, avatar_url=user.avatar_url)


class UserResponse(BaseModel):
    """A user as stored, minus credentials."""

    id: int
    username: str
    email: str | None = None
    role: str
    avatar_url: str | None = None
    last_sign_in: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User, **extra: Any) -> UserResponse:  # noqa: ANN401
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role.name,
            avatar_url=user.avatar_url,
            last_sign_in=user.last_sign_in,
            created_at=user.created_at,
            updated_at=user.updated_at,
            **extra,
        )


class UserWithConnectionsResponse(UserResponse):
    connections: list[ConnectionResponse] = []


class UserUpdateRequest(BaseModel):
    """Partial user update. Only fields present in the body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    username: str | None = Field(None, min_length=1, max_length=64)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=1, max_length=128)
    role: UserRole | None = None
    token: str | None = None
    last_signed: datetime | None = Field(None, alias="lastSigned")

    @field_validator("role", mode="before")
    @classmethod
    def parse_role_name(cls, v: Any) -> Any:  # noqa: ANN401
        """Accept role names ("ADMIN") as well as their integer values."""
        if isinstance(v, str):
            try:
                return UserRole[v.strip().upper()]
            except KeyError as e:
                msg = f"Unknown role: {v}"
                raise ValueError(msg) from e
        return v

    def to_changes(self) -> dict[str, Any]:
        """Non-null fields the client sent, keyed by User column name."""
        changes = {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}
        if "last_signed" in changes:
            changes["last_sign_in"] = changes.pop("last_signed")
        return changes


class PaginationLinks(BaseModel):
    before: str | None
    after: str | None


class UserPageResponse(BaseModel):
    data: list[UserWithConnectionsResponse]
    pagination: PaginationLinks


class LeaderboardEntry(BaseModel):
    user_id: int
    username: str
    wins: int
    losses: int
    xp: int
    coins: int
    level: int


class LeaderboardPageResponse(BaseModel):
    data: list[LeaderboardEntry]
    pagination: PaginationLinks


class UserDeletedResponse(BaseModel):
    user: int
