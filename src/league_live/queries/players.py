"""
Player-related read queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB


class PlayerQueries:
    """Query utilities for players and their per-game stats."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def list_players(self, team_id: Optional[int] = None) -> list[dict[str, Any]]:
        """All players with team name, optionally limited to one team."""
        if team_id is not None:
            return await self.db.fetchall(
                """
                SELECT id, name, last_updated, team_id
                FROM players
                WHERE team_id = %s
                ORDER BY name
                """,
                (team_id,),
            )

        return await self.db.fetchall(
            """
            SELECT p.id, p.name, p.last_updated, p.team_id, t.name AS team_name
            FROM players p
            LEFT JOIN teams t ON p.team_id = t.id
            ORDER BY p.name
            """
        )

    async def get_by_id(self, player_id: int) -> Optional[dict[str, Any]]:
        return await self.db.fetchone(
            """
            SELECT p.id, p.name, p.last_updated, p.team_id, t.name AS team_name
            FROM players p
            LEFT JOIN teams t ON p.team_id = t.id
            WHERE p.id = %s
            """,
            (player_id,),
        )

    async def get_player_stats(
        self,
        player_id: int,
        game_id: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        Per-game stat lines for a player, newest game first.

        Args:
            player_id: Player ID
            game_id: Restrict to a single game
        """
        conditions = ["ps.player_id = %s"]
        params: list[Any] = [player_id]
        if game_id is not None:
            conditions.append("ps.game_id = %s")
            params.append(game_id)

        return await self.db.fetchall(
            f"""
            SELECT
                ps.*,
                g.sport,
                g.scheduled_time,
                t1.name AS team1_name,
                t2.name AS team2_name
            FROM player_stats ps
            JOIN games g ON ps.game_id = g.id
            JOIN teams t1 ON g.team1_id = t1.id
            JOIN teams t2 ON g.team2_id = t2.id
            WHERE {" AND ".join(conditions)}
            ORDER BY g.scheduled_time DESC
            """,
            tuple(params),
        )
