"""
Score event API endpoints.

POST /events is the live scoring path: the event, the game's running score
and the scorer's stats are written in one transaction, and subscribers are
notified after the response is already decided.
"""

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Query

from ...models import ScoreEventIn
from ...queries.events import DEFAULT_EVENTS_LIMIT, DEFAULT_RECENT_LIMIT, EventQueries
from ..dependencies import DBDependency, EventRepositoryDependency, ScoringDependency
from ._utils import envelope

router = APIRouter()


@router.get("")
async def list_events(
    db: DBDependency,
    game_id: Annotated[Optional[int], Query(gt=0)] = None,
    team_id: Annotated[Optional[int], Query(gt=0)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = DEFAULT_EVENTS_LIMIT,
) -> dict[str, Any]:
    return envelope(await EventQueries(db).list_events(game_id, team_id, limit))


@router.get("/recent")
async def list_recent_events(
    db: DBDependency,
    limit: Annotated[int, Query(ge=1, le=500)] = DEFAULT_RECENT_LIMIT,
) -> dict[str, Any]:
    """Latest events across all games."""
    return envelope(await EventQueries(db).recent_events(limit))


@router.post("", status_code=201)
async def create_event(body: ScoreEventIn, scoring: ScoringDependency) -> dict[str, Any]:
    event_id = await scoring.record_score_event(body)
    return envelope({"id": event_id}, "Score event created successfully")


@router.delete("/{event_id}")
async def delete_event(event_id: int, events: EventRepositoryDependency) -> dict[str, Any]:
    await events.delete(event_id)
    return envelope(message="Score event deleted successfully")
