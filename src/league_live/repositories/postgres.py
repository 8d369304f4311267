"""
PostgreSQL repository implementations.

Every write is a single statement; a zero row count on update or delete
means the target row does not exist.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import NotFound
from ..models import PlayerIn, PlayerStatIn, TeamIn
from .base import PlayerRepository, ScoreEventRepository, TeamRepository

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)


class PostgresTeamRepository(TeamRepository):
    """PostgreSQL implementation for team writes."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def create(self, team: TeamIn) -> int:
        row = await self.db.fetchone(
            "INSERT INTO teams (name, leader_id) VALUES (%s, %s) RETURNING id",
            (team.name, team.leader_id),
        )
        logger.info("Created team %s (%s)", row["id"], team.name)
        return row["id"]

    async def update(self, team_id: int, team: TeamIn) -> None:
        updated = await self.db.execute(
            "UPDATE teams SET name = %s, leader_id = %s, updated_at = NOW() WHERE id = %s",
            (team.name, team.leader_id, team_id),
        )
        if not updated:
            raise NotFound("Team", team_id)

    async def delete(self, team_id: int) -> None:
        deleted = await self.db.execute("DELETE FROM teams WHERE id = %s", (team_id,))
        if not deleted:
            raise NotFound("Team", team_id)
        logger.info("Deleted team %s", team_id)


class PostgresPlayerRepository(PlayerRepository):
    """PostgreSQL implementation for player writes."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def create(self, player: PlayerIn) -> int:
        row = await self.db.fetchone(
            "INSERT INTO players (name, team_id) VALUES (%s, %s) RETURNING id",
            (player.name, player.team_id),
        )
        return row["id"]

    async def update(self, player_id: int, player: PlayerIn) -> None:
        updated = await self.db.execute(
            "UPDATE players SET name = %s, team_id = %s, last_updated = NOW() WHERE id = %s",
            (player.name, player.team_id, player_id),
        )
        if not updated:
            raise NotFound("Player", player_id)

    async def delete(self, player_id: int) -> None:
        deleted = await self.db.execute("DELETE FROM players WHERE id = %s", (player_id,))
        if not deleted:
            raise NotFound("Player", player_id)

    async def overwrite_stat(self, game_id: int, player_id: int, stat: PlayerStatIn) -> None:
        updated = await self.db.execute(
            """
            UPDATE player_stats
            SET points = %s, runs = %s, balls = %s, wickets = %s, last_updated = NOW()
            WHERE game_id = %s AND player_id = %s
            """,
            (stat.points, stat.runs, stat.balls, stat.wickets, game_id, player_id),
        )
        if not updated:
            raise NotFound("Player stat", f"{player_id} in game {game_id}")


class PostgresScoreEventRepository(ScoreEventRepository):
    """
    PostgreSQL implementation for score event removal.

    Removing an event does not roll back the game score or player stats it
    contributed to.
    """

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def delete(self, event_id: int) -> None:
        deleted = await self.db.execute("DELETE FROM score_events WHERE id = %s", (event_id,))
        if not deleted:
            raise NotFound("Score event", event_id)
