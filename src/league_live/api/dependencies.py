"""
Dependency injection for API endpoints.

The database pool and the live hub are created once per application (the
hub in create_app, the pool in the lifespan hook, see main.py) and stored
on app.state. Routes receive them, and the services built from them,
through the Annotated aliases below. Tests replace any of these via
app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..broadcast import LiveHub
from ..core.config import Settings, get_settings
from ..pg_async import AsyncPostgresDB
from ..repositories import (
    PostgresPlayerRepository,
    PostgresScoreEventRepository,
    PostgresTeamRepository,
)
from ..services import GameLifecycleService, ScoreRecordingService
from .errors import ServiceUnavailableError


def get_db(request: Request) -> AsyncPostgresDB:
    """
    Dependency that provides the async database pool.

    Raises:
        ServiceUnavailableError: the pool could not be created at startup
    """
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise ServiceUnavailableError("Database", "Database connection failed")
    return db


def get_hub(request: Request) -> LiveHub:
    """Dependency that provides the application's live hub."""
    return request.app.state.hub


DBDependency = Annotated[AsyncPostgresDB, Depends(get_db)]
HubDependency = Annotated[LiveHub, Depends(get_hub)]
SettingsDependency = Annotated[Settings, Depends(get_settings)]


def get_scoring_service(db: DBDependency, hub: HubDependency) -> ScoreRecordingService:
    return ScoreRecordingService(db, hub)


def get_game_service(
    db: DBDependency,
    hub: HubDependency,
    settings: SettingsDependency,
) -> GameLifecycleService:
    return GameLifecycleService(db, hub, strict_transitions=settings.strict_status_transitions)


def get_team_repository(db: DBDependency) -> PostgresTeamRepository:
    return PostgresTeamRepository(db)


def get_player_repository(db: DBDependency) -> PostgresPlayerRepository:
    return PostgresPlayerRepository(db)


def get_event_repository(db: DBDependency) -> PostgresScoreEventRepository:
    return PostgresScoreEventRepository(db)


ScoringDependency = Annotated[ScoreRecordingService, Depends(get_scoring_service)]
GameServiceDependency = Annotated[GameLifecycleService, Depends(get_game_service)]
TeamRepositoryDependency = Annotated[PostgresTeamRepository, Depends(get_team_repository)]
PlayerRepositoryDependency = Annotated[PostgresPlayerRepository, Depends(get_player_repository)]
EventRepositoryDependency = Annotated[PostgresScoreEventRepository, Depends(get_event_repository)]
