"""Games router: /games/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from devwars.db.models import Game
from devwars.games.dependencies import bind_game_from_param
from devwars.games.schemas import GameResponse

router = APIRouter(prefix="/games", tags=["Games"])


@router.get("/{game}", response_model=GameResponse)
async def show(
    bound_game: Game = Depends(bind_game_from_param),
) -> GameResponse:
    """Get a game with its schedule."""
    return GameResponse.from_game(bound_game)
