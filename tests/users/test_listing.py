"""Tests for GET /users/ (moderator listing)."""

from __future__ import annotations

import pytest_asyncio
from httpx import AsyncClient

from devwars.db.models import LinkedAccount, UserRole


@pytest_asyncio.fixture
async def moderator(make_user):
    return await make_user("mod", role=UserRole.MODERATOR)


class TestListingAuth:
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/users/")
        assert response.status_code in (401, 403)

    async def test_regular_user_forbidden(self, client: AsyncClient, make_user, headers_for):
        user = await make_user("regular")
        response = await client.get("/users/", headers=headers_for(user))
        assert response.status_code == 403
        assert "error" in response.json()

    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/users/", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestListing:
    async def test_first_page(self, client: AsyncClient, moderator, make_user, headers_for, db_session):
        newest = await make_user("newest")
        db_session.add(LinkedAccount(user_id=newest.id, username="newest", provider="TWITCH", provider_id="t-9"))
        await db_session.commit()

        response = await client.get("/users/", params={"first": "1"}, headers=headers_for(moderator))
        assert response.status_code == 200
        body = response.json()
        [user] = body["data"]
        assert user["username"] == "newest"
        assert user["email"] == "newest@example.com"
        assert user["connections"] == [{"username": "newest", "provider": "twitch"}]
        assert body["pagination"] == {
            "before": None,
            "after": "http://test/users/?first=1&after=1",
        }

    async def test_most_recently_updated_first(self, client: AsyncClient, moderator, make_user, headers_for):
        await make_user("older")
        await make_user("newer")
        response = await client.get("/users/", headers=headers_for(moderator))
        usernames = [u["username"] for u in response.json()["data"]]
        assert usernames == ["newer", "older", "mod"]

    async def test_offset_page(self, client: AsyncClient, moderator, make_user, headers_for):
        for i in range(4):
            await make_user(f"player{i}")
        response = await client.get("/users/", params={"first": "2", "after": "3"}, headers=headers_for(moderator))
        body = response.json()
        assert [u["username"] for u in body["data"]] == ["player0", "mod"]
        assert body["pagination"] == {
            "before": "http://test/users/?first=2&after=1",
            "after": "http://test/users/?first=2&after=5",
        }

    async def test_exhausted_page(self, client: AsyncClient, moderator, headers_for):
        response = await client.get("/users/", params={"first": "10", "after": "10"}, headers=headers_for(moderator))
        body = response.json()
        assert body["data"] == []
        assert body["pagination"] == {
            "before": "http://test/users/?first=10&after=0",
            "after": None,
        }

    async def test_garbage_params_use_defaults(self, client: AsyncClient, moderator, headers_for):
        response = await client.get("/users/", params={"first": "x", "after": "y"}, headers=headers_for(moderator))
        assert response.status_code == 200
        assert response.json()["pagination"]["after"] == "http://test/users/?first=20&after=20"
