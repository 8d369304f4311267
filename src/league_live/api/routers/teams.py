"""Team API endpoints."""

from typing import Any

from fastapi import APIRouter

from ...models import TeamIn
from ...queries.teams import TeamQueries
from ..dependencies import DBDependency, TeamRepositoryDependency
from ..errors import NotFoundError
from ._utils import envelope

router = APIRouter()


@router.get("")
async def list_teams(db: DBDependency) -> dict[str, Any]:
    """All teams with leader name and player count."""
    return envelope(await TeamQueries(db).list_teams())


@router.get("/{team_id}")
async def get_team(team_id: int, db: DBDependency) -> dict[str, Any]:
    """Team with its roster."""
    team = await TeamQueries(db).get_by_id(team_id)
    if not team:
        raise NotFoundError("Team", team_id)
    return envelope(team)


@router.get("/{team_id}/stats")
async def get_team_stats(team_id: int, db: DBDependency) -> dict[str, Any]:
    """Games played and win/loss/draw record."""
    queries = TeamQueries(db)
    if not await queries.get_by_id(team_id):
        raise NotFoundError("Team", team_id)
    return envelope(await queries.get_team_stats(team_id))


@router.post("", status_code=201)
async def create_team(
    body: TeamIn,
    db: DBDependency,
    teams: TeamRepositoryDependency,
) -> dict[str, Any]:
    team_id = await teams.create(body)
    team = await TeamQueries(db).get_by_id(team_id)
    return envelope(team, "Team created successfully")


@router.put("/{team_id}")
async def update_team(
    team_id: int,
    body: TeamIn,
    db: DBDependency,
    teams: TeamRepositoryDependency,
) -> dict[str, Any]:
    await teams.update(team_id, body)
    team = await TeamQueries(db).get_by_id(team_id)
    return envelope(team, "Team updated successfully")


@router.delete("/{team_id}")
async def delete_team(team_id: int, teams: TeamRepositoryDependency) -> dict[str, Any]:
    await teams.delete(team_id)
    return envelope(message="Team deleted successfully")
