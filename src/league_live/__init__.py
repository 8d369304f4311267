"""
League Live

Backend for a small sports league: teams, players, games and score events
stored in PostgreSQL, with every score change pushed to WebSocket
subscribers as it happens.

Key Features:
- Atomic score recording (event log, running game total, player stats)
- Per-sport game details (football, basketball, cricket)
- Live feed with a global room and one room per game

Usage:
    from league_live import AsyncPostgresDB, ScoreRecordingService, LiveHub

    db = AsyncPostgresDB("postgresql://localhost/league")
    await db.initialize()

    scoring = ScoreRecordingService(db, LiveHub())
    event_id = await scoring.record_score_event(event)
"""

from .broadcast import BroadcastChannel, LiveHub, drain_pending, publish_detached
from .errors import (
    Conflict,
    InvalidInput,
    LeagueError,
    NotFound,
    ReferenceMissing,
    StoreError,
    StoreUnavailable,
)
from .pg_async import AsyncPostgresDB
from .schema import init_database, run_migrations
from .services import GameLifecycleService, ScoreRecordingService

__all__ = [
    # Connection
    "AsyncPostgresDB",
    # Schema
    "init_database",
    "run_migrations",
    # Services
    "ScoreRecordingService",
    "GameLifecycleService",
    # Broadcast
    "BroadcastChannel",
    "LiveHub",
    "publish_detached",
    "drain_pending",
    # Errors
    "LeagueError",
    "InvalidInput",
    "NotFound",
    "Conflict",
    "ReferenceMissing",
    "StoreUnavailable",
    "StoreError",
]

__version__ = "1.0.0"
