"""Player API endpoints."""

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Query

from ...models import PlayerIn, PlayerStatIn
from ...queries.players import PlayerQueries
from ..dependencies import DBDependency, PlayerRepositoryDependency
from ..errors import NotFoundError
from ._utils import envelope

router = APIRouter()


@router.get("")
async def list_players(
    db: DBDependency,
    team_id: Annotated[Optional[int], Query(gt=0, description="Only players of this team")] = None,
) -> dict[str, Any]:
    return envelope(await PlayerQueries(db).list_players(team_id))


@router.get("/{player_id}")
async def get_player(player_id: int, db: DBDependency) -> dict[str, Any]:
    player = await PlayerQueries(db).get_by_id(player_id)
    if not player:
        raise NotFoundError("Player", player_id)
    return envelope(player)


@router.get("/{player_id}/stats")
async def get_player_stats(
    player_id: int,
    db: DBDependency,
    game_id: Annotated[Optional[int], Query(gt=0, description="Only this game")] = None,
) -> dict[str, Any]:
    """Per-game stat lines, newest game first."""
    return envelope(await PlayerQueries(db).get_player_stats(player_id, game_id))


@router.post("", status_code=201)
async def create_player(
    body: PlayerIn,
    db: DBDependency,
    players: PlayerRepositoryDependency,
) -> dict[str, Any]:
    player_id = await players.create(body)
    player = await PlayerQueries(db).get_by_id(player_id)
    return envelope(player, "Player created successfully")


@router.put("/{player_id}")
async def update_player(
    player_id: int,
    body: PlayerIn,
    db: DBDependency,
    players: PlayerRepositoryDependency,
) -> dict[str, Any]:
    await players.update(player_id, body)
    player = await PlayerQueries(db).get_by_id(player_id)
    return envelope(player, "Player updated successfully")


@router.put("/{player_id}/stats/{game_id}")
async def update_player_stats(
    player_id: int,
    game_id: int,
    body: PlayerStatIn,
    players: PlayerRepositoryDependency,
) -> dict[str, Any]:
    """Overwrite a player's stat line for one game."""
    await players.overwrite_stat(game_id, player_id, body)
    return envelope(message="Player stats updated successfully")


@router.delete("/{player_id}")
async def delete_player(player_id: int, players: PlayerRepositoryDependency) -> dict[str, Any]:
    await players.delete(player_id)
    return envelope(message="Player deleted successfully")
