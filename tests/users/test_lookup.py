"""Tests for GET /users/lookup."""

from __future__ import annotations

import pytest_asyncio
from httpx import AsyncClient

from devwars.db.models import LinkedAccount


@pytest_asyncio.fixture
async def seeded(make_user, db_session):
    alpha = await make_user("AlphaCoder")
    await make_user("alphabet_soup")
    await make_user("BetaTester")
    db_session.add_all(
        [
            LinkedAccount(user_id=alpha.id, username="alpha#1234", provider="DISCORD", provider_id="d-1"),
            LinkedAccount(user_id=alpha.id, username="alpha_tv", provider="TWITCH", provider_id="t-1"),
        ]
    )
    await db_session.commit()
    return alpha


class TestLookupValidation:
    async def test_missing_username(self, client: AsyncClient):
        response = await client.get("/users/lookup")
        assert response.status_code == 400
        assert response.json() == {"error": "The specified username within the query must not be empty."}

    async def test_whitespace_only_username(self, client: AsyncClient):
        response = await client.get("/users/lookup", params={"username": "   \t ", "full": "true", "limit": "5"})
        assert response.status_code == 400


class TestLookup:
    async def test_partial_case_insensitive_match(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "ALPHA"})
        assert response.status_code == 200
        usernames = {u["username"] for u in response.json()}
        assert usernames == {"AlphaCoder", "alphabet_soup"}

    async def test_whitespace_removed_before_matching(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": " Beta Test "})
        assert [u["username"] for u in response.json()] == ["BetaTester"]

    async def test_default_is_username_and_id_only(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "AlphaCoder"})
        assert response.json() == [{"username": "AlphaCoder", "id": seeded.id}]

    async def test_full_includes_connections(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "AlphaCoder", "full": "true"})
        assert response.status_code == 200
        [user] = response.json()
        assert user["id"] == seeded.id
        assert user["role"] == "USER"
        assert "password" not in user
        assert sorted(user["connections"], key=lambda c: c["provider"]) == [
            {"username": "alpha#1234", "provider": "discord"},
            {"username": "alpha_tv", "provider": "twitch"},
        ]

    async def test_limit(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "alpha", "limit": "1"})
        assert len(response.json()) == 1

    async def test_invalid_limit_uses_default(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "alpha", "limit": "lots"})
        assert len(response.json()) == 2

    async def test_no_match(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "gamma"})
        assert response.status_code == 200
        assert response.json() == []

    async def test_percent_matches_literally(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "%"})
        assert response.status_code == 200
        assert response.json() == []

    async def test_underscore_matches_literally(self, client: AsyncClient, seeded):
        response = await client.get("/users/lookup", params={"username": "_"})
        assert [u["username"] for u in response.json()] == ["alphabet_soup"]
