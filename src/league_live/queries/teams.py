"""
Team-related read queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB


class TeamQueries:
    """Query utilities for teams and their records."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def list_teams(self) -> list[dict[str, Any]]:
        """All teams with leader name and roster size."""
        return await self.db.fetchall(
            """
            SELECT
                t.id,
                t.name,
                t.leader_id,
                leader.name AS leader_name,
                COUNT(roster.id)::int AS player_count
            FROM teams t
            LEFT JOIN players leader ON t.leader_id = leader.id
            LEFT JOIN players roster ON roster.team_id = t.id
            GROUP BY t.id, t.name, t.leader_id, leader.name
            ORDER BY t.name
            """
        )

    async def get_by_id(self, team_id: int) -> Optional[dict[str, Any]]:
        """Team with its leader name and roster."""
        team = await self.db.fetchone(
            """
            SELECT t.id, t.name, t.leader_id, p.name AS leader_name
            FROM teams t
            LEFT JOIN players p ON t.leader_id = p.id
            WHERE t.id = %s
            """,
            (team_id,),
        )
        if not team:
            return None

        team["players"] = await self.db.fetchall(
            """
            SELECT id, name, last_updated
            FROM players
            WHERE team_id = %s
            ORDER BY name
            """,
            (team_id,),
        )
        return team

    async def get_team_stats(self, team_id: int) -> dict[str, int]:
        """
        Win/loss/draw record.

        Every game the team appears in counts toward games_played; only
        FINISHED games count toward wins, losses and draws.
        """
        row = await self.db.fetchone(
            """
            SELECT
                COUNT(*)::int AS games_played,
                COALESCE(SUM(CASE WHEN g.status = 'FINISHED' AND (
                    (g.team1_id = %(id)s AND g.team1_score > g.team2_score) OR
                    (g.team2_id = %(id)s AND g.team2_score > g.team1_score))
                    THEN 1 ELSE 0 END), 0)::int AS wins,
                COALESCE(SUM(CASE WHEN g.status = 'FINISHED' AND (
                    (g.team1_id = %(id)s AND g.team1_score < g.team2_score) OR
                    (g.team2_id = %(id)s AND g.team2_score < g.team1_score))
                    THEN 1 ELSE 0 END), 0)::int AS losses,
                COALESCE(SUM(CASE WHEN g.status = 'FINISHED'
                    AND g.team1_score = g.team2_score
                    THEN 1 ELSE 0 END), 0)::int AS draws
            FROM games g
            WHERE g.team1_id = %(id)s OR g.team2_id = %(id)s
            """,
            {"id": team_id},
        )
        return row or {"games_played": 0, "wins": 0, "losses": 0, "draws": 0}
