"""Pydantic schemas for game responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from devwars.db.models import Game, GameSchedule


class GameScheduleResponse(BaseModel):
    id: int
    start_time: datetime
    status: str
    setup: dict[str, Any]

    @classmethod
    def from_schedule(cls, schedule: GameSchedule) -> GameScheduleResponse:
        return cls(
            id=schedule.id,
            start_time=schedule.start_time,
            status=schedule.status.name,
            setup=schedule.setup or {},
        )


class GameResponse(BaseModel):
    """A game with its embedded storage (including the player roster)."""

    id: int
    title: str
    season: int
    mode: str
    status: str
    storage: dict[str, Any]
    schedule: GameScheduleResponse | None = None

    @classmethod
    def from_game(cls, game: Game) -> GameResponse:
        return cls(
            id=game.id,
            title=game.title,
            season=game.season,
            mode=game.mode,
            status=game.status.name,
            storage=game.storage or {},
            schedule=GameScheduleResponse.from_schedule(game.schedule) if game.schedule else None,
        )
