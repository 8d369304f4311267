"""
Score event read queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB

DEFAULT_EVENTS_LIMIT = 50
DEFAULT_RECENT_LIMIT = 20


class EventQueries:
    """Query utilities for the score event log."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def list_events(
        self,
        game_id: Optional[int] = None,
        team_id: Optional[int] = None,
        limit: int = DEFAULT_EVENTS_LIMIT,
    ) -> list[dict[str, Any]]:
        """Events newest first, filtered by game and/or team."""
        conditions = ["1=1"]
        params: list[Any] = []

        if game_id is not None:
            conditions.append("se.game_id = %s")
            params.append(game_id)
        if team_id is not None:
            conditions.append("se.team_id = %s")
            params.append(team_id)
        params.append(limit)

        return await self.db.fetchall(
            f"""
            SELECT
                se.*,
                p.name AS player_name,
                t.name AS team_name,
                g.sport AS game_sport
            FROM score_events se
            JOIN teams t ON se.team_id = t.id
            JOIN games g ON se.game_id = g.id
            LEFT JOIN players p ON se.player_id = p.id
            WHERE {" AND ".join(conditions)}
            ORDER BY se.created_at DESC, se.id DESC
            LIMIT %s
            """,
            tuple(params),
        )

    async def recent_events(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[dict[str, Any]]:
        """Latest events across all games with both team names."""
        return await self.db.fetchall(
            """
            SELECT
                se.*,
                p.name AS player_name,
                t.name AS team_name,
                g.sport AS game_sport,
                t1.name AS team1_name,
                t2.name AS team2_name
            FROM score_events se
            JOIN teams t ON se.team_id = t.id
            JOIN games g ON se.game_id = g.id
            JOIN teams t1 ON g.team1_id = t1.id
            JOIN teams t2 ON g.team2_id = t2.id
            LEFT JOIN players p ON se.player_id = p.id
            ORDER BY se.created_at DESC, se.id DESC
            LIMIT %s
            """,
            (limit,),
        )
