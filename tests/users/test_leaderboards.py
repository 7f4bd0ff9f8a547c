"""Tests for GET /users/leaderboards."""

from __future__ import annotations

from httpx import AsyncClient

from devwars.db.models import UserGameStats, UserStats


async def _with_stats(make_user, db_session, username, wins, losses, xp=0, coins=0, level=1):
    user = await make_user(username)
    db_session.add_all(
        [
            UserGameStats(user_id=user.id, wins=wins, losses=losses),
            UserStats(user_id=user.id, xp=xp, coins=coins, level=level),
        ]
    )
    await db_session.commit()
    return user


class TestLeaderboards:
    async def test_ranked_by_wins_then_losses(self, client: AsyncClient, make_user, db_session):
        await _with_stats(make_user, db_session, "few_wins", wins=1, losses=0)
        best = await _with_stats(make_user, db_session, "best", wins=5, losses=2, xp=15039, coins=18316, level=3)
        await _with_stats(make_user, db_session, "more_losses", wins=5, losses=9)

        response = await client.get("/users/leaderboards")
        assert response.status_code == 200
        data = response.json()["data"]
        assert [row["username"] for row in data] == ["best", "more_losses", "few_wins"]
        assert data[0] == {
            "user_id": best.id,
            "username": "best",
            "wins": 5,
            "losses": 2,
            "xp": 15039,
            "coins": 18316,
            "level": 3,
        }

    async def test_users_without_stats_listed_with_zeroes(self, client: AsyncClient, make_user):
        await make_user("newcomer")
        response = await client.get("/users/leaderboards")
        [row] = response.json()["data"]
        assert row["wins"] == 0
        assert row["losses"] == 0
        assert row["level"] == 1

    async def test_paging_window(self, client: AsyncClient, make_user, db_session):
        for i in range(50):
            await _with_stats(make_user, db_session, f"player{i:02d}", wins=50 - i, losses=0)

        response = await client.get("/users/leaderboards", params={"first": "5", "after": "40"})
        body = response.json()
        assert len(body["data"]) <= 5
        assert [row["username"] for row in body["data"]] == [f"player{i}" for i in range(40, 45)]
        assert body["pagination"] == {
            "before": "http://test/users/leaderboards?first=5&after=35",
            "after": "http://test/users/leaderboards?first=5&after=45",
        }

    async def test_several_stats_rows_do_not_inflate_totals(self, client: AsyncClient, make_user, db_session):
        user = await make_user("veteran")
        db_session.add_all(
            [
                UserGameStats(user_id=user.id, wins=3, losses=1),
                UserGameStats(user_id=user.id, wins=2, losses=0),
                UserStats(user_id=user.id, xp=10, coins=5, level=1),
                UserStats(user_id=user.id, xp=40, coins=7, level=2),
            ]
        )
        await db_session.commit()

        response = await client.get("/users/leaderboards")
        [row] = response.json()["data"]
        assert row["wins"] == 5
        assert row["losses"] == 1
        assert row["xp"] == 40
        assert row["coins"] == 7
        assert row["level"] == 2

    async def test_empty(self, client: AsyncClient):
        response = await client.get("/users/leaderboards")
        assert response.json() == {"data": [], "pagination": {"before": None, "after": None}}
