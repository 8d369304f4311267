"""
Game API endpoints.

Score and status changes respond as soon as the write commits; the
matching "game_update" broadcast is sent on a detached task.
"""

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Query

from ...core.types import GameStatus, Sport
from ...models import GameCreate, ScoreUpdate, StatusUpdate
from ...queries.games import GameQueries
from ..dependencies import DBDependency, GameServiceDependency
from ..errors import NotFoundError
from ._utils import envelope

router = APIRouter()


@router.get("")
async def list_games(
    db: DBDependency,
    status: Annotated[Optional[GameStatus], Query(description="SCHEDULED, LIVE or FINISHED")] = None,
    sport: Annotated[Optional[Sport], Query(description="FOOTBALL, BASKETBALL or CRICKET")] = None,
) -> dict[str, Any]:
    return envelope(await GameQueries(db).list_games(status, sport))


@router.get("/live")
async def list_live_games(db: DBDependency) -> dict[str, Any]:
    return envelope(await GameQueries(db).list_games(GameStatus.LIVE))


@router.get("/upcoming")
async def list_upcoming_games(db: DBDependency) -> dict[str, Any]:
    return envelope(await GameQueries(db).list_games(GameStatus.SCHEDULED))


@router.get("/finished")
async def list_finished_games(db: DBDependency) -> dict[str, Any]:
    return envelope(await GameQueries(db).list_games(GameStatus.FINISHED))


@router.get("/{game_id}")
async def get_game(game_id: int, db: DBDependency) -> dict[str, Any]:
    game = await GameQueries(db).get_by_id(game_id)
    if not game:
        raise NotFoundError("Game", game_id)
    return envelope(game)


@router.get("/{game_id}/info")
async def get_game_info(game_id: int, db: DBDependency) -> dict[str, Any]:
    """Game with player stat lines and the most recent score events."""
    info = await GameQueries(db).get_game_info(game_id)
    if not info:
        raise NotFoundError("Game", game_id)
    return envelope(info)


@router.post("", status_code=201)
async def create_game(
    body: GameCreate,
    db: DBDependency,
    games: GameServiceDependency,
) -> dict[str, Any]:
    game_id = await games.create_game(body)
    game = await GameQueries(db).get_by_id(game_id)
    return envelope(game, "Game created successfully")


@router.put("/{game_id}/score")
async def update_game_score(
    game_id: int,
    body: ScoreUpdate,
    games: GameServiceDependency,
) -> dict[str, Any]:
    game = await games.update_score(game_id, body.team1_score, body.team2_score, body.status)
    return envelope(game, "Game score updated successfully")


@router.put("/{game_id}/status")
async def update_game_status(
    game_id: int,
    body: StatusUpdate,
    games: GameServiceDependency,
) -> dict[str, Any]:
    game = await games.update_status(game_id, body.status)
    return envelope(game, "Game status updated successfully")


@router.delete("/{game_id}")
async def delete_game(game_id: int, games: GameServiceDependency) -> dict[str, Any]:
    await games.delete_game(game_id)
    return envelope(message="Game deleted successfully")
