"""
Game-related read queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ..core.types import GameStatus, Sport

if TYPE_CHECKING:
    import psycopg

    from ..pg_async import AsyncPostgresDB

RECENT_EVENTS_LIMIT = 50

_GAME_COLUMNS = """
    g.id,
    g.sport,
    g.status,
    g.scheduled_time,
    g.team1_id,
    g.team2_id,
    g.team1_score,
    g.team2_score,
    g.created_at,
    g.updated_at,
    t1.name AS team1_name,
    t2.name AS team2_name
"""


class GameQueries:
    """Read access to games, their sport details, stats and events."""

    def __init__(self, db: "AsyncPostgresDB"):
        self.db = db

    async def list_games(
        self,
        status: Optional[GameStatus] = None,
        sport: Optional[Sport] = None,
    ) -> list[dict[str, Any]]:
        """
        List games, newest scheduled first.

        Args:
            status: Only games in this status
            sport: Only games of this sport
        """
        conditions = ["1=1"]
        params: list[Any] = []

        if status:
            conditions.append("g.status = %s")
            params.append(status.value)
        if sport:
            conditions.append("g.sport = %s")
            params.append(sport.value)

        query = f"""
            SELECT {_GAME_COLUMNS}
            FROM games g
            JOIN teams t1 ON g.team1_id = t1.id
            JOIN teams t2 ON g.team2_id = t2.id
            WHERE {" AND ".join(conditions)}
            ORDER BY g.scheduled_time DESC
        """
        return await self.db.fetchall(query, tuple(params))

    async def get_by_id(
        self,
        game_id: int,
        conn: Optional["psycopg.AsyncConnection"] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Get a game with team names and its sport details.

        The details are a tagged object keyed by `sport`; cricket details
        carry the current batsman and bowler names. Pass `conn` to read
        inside an open transaction.
        """
        game = await self._fetchone(
            f"""
            SELECT {_GAME_COLUMNS}
            FROM games g
            JOIN teams t1 ON g.team1_id = t1.id
            JOIN teams t2 ON g.team2_id = t2.id
            WHERE g.id = %s
            """,
            (game_id,),
            conn,
        )
        if not game:
            return None

        details: dict[str, Any] = {"sport": game["sport"]}
        if game["sport"] == Sport.CRICKET.value:
            cricket = await self._fetchone(
                """
                SELECT
                    c.team1_deaths,
                    c.team2_deaths,
                    c.batting_side,
                    c.current_batsman_id,
                    c.current_bowler_id,
                    p1.name AS current_batsman_name,
                    p2.name AS current_bowler_name
                FROM cricket_games c
                LEFT JOIN players p1 ON c.current_batsman_id = p1.id
                LEFT JOIN players p2 ON c.current_bowler_id = p2.id
                WHERE c.game_id = %s
                """,
                (game_id,),
                conn,
            )
            if cricket:
                details.update(cricket)

        game["details"] = details
        return game

    async def _fetchone(
        self,
        query: str,
        params: tuple,
        conn: Optional["psycopg.AsyncConnection"] = None,
    ) -> Optional[dict[str, Any]]:
        if conn is None:
            return await self.db.fetchone(query, params)
        cur = await conn.execute(query, params)
        row = await cur.fetchone()
        return dict(row) if row else None

    async def get_game_info(self, game_id: int) -> Optional[dict[str, Any]]:
        """Game with every player's stat line and its most recent events."""
        game = await self.get_by_id(game_id)
        if not game:
            return None

        game["player_stats"] = await self.db.fetchall(
            """
            SELECT
                ps.*,
                p.name AS player_name,
                t.name AS team_name
            FROM player_stats ps
            JOIN players p ON ps.player_id = p.id
            JOIN teams t ON ps.team_id = t.id
            WHERE ps.game_id = %s
            ORDER BY t.name, p.name
            """,
            (game_id,),
        )
        game["score_events"] = await self.db.fetchall(
            """
            SELECT
                se.*,
                p.name AS player_name,
                t.name AS team_name
            FROM score_events se
            JOIN teams t ON se.team_id = t.id
            LEFT JOIN players p ON se.player_id = p.id
            WHERE se.game_id = %s
            ORDER BY se.created_at DESC, se.id DESC
            LIMIT %s
            """,
            (game_id, RECENT_EVENTS_LIMIT),
        )
        return game
