"""Shared test fixtures."""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from devwars.auth.jwt import create_access_token, reset_keys
from devwars.config import get_settings
from devwars.database import close_db, get_engine, get_session, init_db
from devwars.db.base import Base
from devwars.db.models import User, UserRole


def _ensure_test_keys() -> None:
    """Generate an RSA key pair for signing test tokens."""
    tmpdir = tempfile.mkdtemp(prefix="devwars_test_keys_")
    private_path = os.path.join(tmpdir, "jwt_private.pem")
    public_path = os.path.join(tmpdir, "jwt_public.pem")

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    with open(private_path, "wb") as f:
        f.write(
            key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.PKCS8,
                serialization.NoEncryption(),
            )
        )
    with open(public_path, "wb") as f:
        f.write(
            key.public_key().public_bytes(
                serialization.Encoding.PEM,
                serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        )

    os.environ["DEVWARS_JWT_PRIVATE_KEY_PATH"] = private_path
    os.environ["DEVWARS_JWT_PUBLIC_KEY_PATH"] = public_path
    os.environ["DEVWARS_LOG_FORMAT"] = "console"
    get_settings.cache_clear()
    reset_keys()


@pytest.fixture(scope="session", autouse=True)
def test_keys() -> None:
    _ensure_test_keys()


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[None, None]:
    """A fresh SQLite database per test, with every table created."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'devwars.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for arranging data and asserting on it."""
    async for session in get_session():
        yield session
        break


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """An async HTTP client bound to a fresh application."""
    from devwars.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory that inserts and commits a user."""

    async def _make_user(username: str, role: UserRole = UserRole.USER, **fields: Any) -> User:  # noqa: ANN401
        user = User(
            username=username,
            email=fields.pop("email", f"{username.lower()}@example.com"),
            role=role,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


def auth_headers(user: User) -> dict[str, str]:
    """Bearer headers for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    return auth_headers


async def fetch_all(statement: Any) -> list[Any]:  # noqa: ANN401
    """Run ``statement`` in a new session, so nothing cached is returned."""
    sessions = get_session()
    session = await anext(sessions)
    try:
        result = await session.execute(statement)
        return list(result.scalars().all())
    finally:
        await sessions.aclose()


@pytest.fixture
def fetch() -> Callable[[Any], Awaitable[list[Any]]]:
    return fetch_all
