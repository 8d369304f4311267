"""
Game lifecycle: creation, score overwrite, status change and deletion.

A game is created in one transaction together with its sport details row
and a zeroed player_stats row for every player on either team. Score and
status overwrites are followed by a detached "game_update" broadcast.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from ..broadcast import BroadcastChannel, publish_detached
from ..core.types import STATUS_ORDER, GameStatus, get_sport_config
from ..errors import Conflict, NotFound
from ..models import GameCreate, GameDetails, GameUpdateMessage
from ..queries.games import GameQueries

if TYPE_CHECKING:
    import psycopg

    from ..pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)


def _sql_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class GameLifecycleService:
    """Creates games and moves them through their scores and statuses."""

    def __init__(
        self,
        db: "AsyncPostgresDB",
        channel: Optional[BroadcastChannel] = None,
        strict_transitions: bool = False,
    ):
        self.db = db
        self.channel = channel
        self.strict_transitions = strict_transitions
        self.queries = GameQueries(db)

    async def create_game(self, game: GameCreate) -> int:
        """
        Create a game with its sport details and per-player stat rows.

        Returns:
            Id of the new game
        """
        details = game.details()

        async with self.db.transaction() as conn:
            cur = await conn.execute(
                """
                INSERT INTO games
                    (sport, status, scheduled_time, team1_id, team2_id, team1_score, team2_score)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
                """,
                (
                    game.sport.value,
                    game.status.value,
                    game.scheduled_time,
                    game.team1_id,
                    game.team2_id,
                    game.team1_score,
                    game.team2_score,
                ),
            )
            game_id = (await cur.fetchone())["id"]

            await self._insert_details(conn, game_id, details)

            cur = await conn.execute(
                """
                INSERT INTO player_stats (game_id, player_id, team_id)
                SELECT %s, p.id, p.team_id
                FROM players p
                WHERE p.team_id IN (%s, %s)
                """,
                (game_id, game.team1_id, game.team2_id),
            )
            logger.info(
                "Created %s game %s with %d player stat rows",
                game.sport.value,
                game_id,
                cur.rowcount,
            )

        return game_id

    async def _insert_details(
        self,
        conn: "psycopg.AsyncConnection",
        game_id: int,
        details: GameDetails,
    ) -> None:
        config = get_sport_config(details.sport)
        columns = ("game_id",) + config.detail_columns
        values = [game_id] + [_sql_value(getattr(details, c)) for c in config.detail_columns]
        placeholders = ", ".join(["%s"] * len(columns))
        await conn.execute(
            f"INSERT INTO {config.details_table} ({', '.join(columns)}) VALUES ({placeholders})",
            tuple(values),
        )

    async def _lock_for_status(
        self,
        conn: "psycopg.AsyncConnection",
        game_id: int,
        status: GameStatus,
    ) -> None:
        cur = await conn.execute("SELECT status FROM games WHERE id = %s FOR UPDATE", (game_id,))
        row = await cur.fetchone()
        if row is None:
            raise NotFound("Game", game_id)

        current = GameStatus(row["status"])
        if self.strict_transitions and STATUS_ORDER[status] < STATUS_ORDER[current]:
            raise Conflict(
                "Invalid status transition",
                f"Game {game_id} cannot move from {current.value} to {status.value}",
            )

    async def update_score(
        self,
        game_id: int,
        team1_score: int,
        team2_score: int,
        status: GameStatus = GameStatus.LIVE,
    ) -> dict[str, Any]:
        """
        Overwrite both scores and the status.

        Returns:
            The updated game
        """
        async with self.db.transaction() as conn:
            await self._lock_for_status(conn, game_id, status)
            await conn.execute(
                """
                UPDATE games
                SET team1_score = %s, team2_score = %s, status = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (team1_score, team2_score, status.value, game_id),
            )
            game = await self._reload(conn, game_id)

        self._announce("score_update", game)
        return game

    async def update_status(self, game_id: int, status: GameStatus) -> dict[str, Any]:
        """Overwrite the status only."""
        async with self.db.transaction() as conn:
            await self._lock_for_status(conn, game_id, status)
            await conn.execute(
                "UPDATE games SET status = %s, updated_at = NOW() WHERE id = %s",
                (status.value, game_id),
            )
            game = await self._reload(conn, game_id)

        self._announce("status_update", game)
        return game

    async def delete_game(self, game_id: int) -> None:
        """Delete a game; details, stats and events go with it."""
        deleted = await self.db.execute("DELETE FROM games WHERE id = %s", (game_id,))
        if not deleted:
            raise NotFound("Game", game_id)
        logger.info("Deleted game %s", game_id)

    async def _reload(self, conn: "psycopg.AsyncConnection", game_id: int) -> dict[str, Any]:
        # Row is still locked by _lock_for_status
        game = await self.queries.get_by_id(game_id, conn=conn)
        if game is None:
            raise NotFound("Game", game_id)
        return game

    def _announce(self, kind: str, game: dict[str, Any]) -> None:
        message = GameUpdateMessage(
            kind=kind,
            game_id=game["id"],
            sport=game["sport"],
            team1_score=game["team1_score"],
            team2_score=game["team2_score"],
            status=game["status"],
            team1_name=game.get("team1_name"),
            team2_name=game.get("team2_name"),
            timestamp=datetime.now(tz=timezone.utc),
        )
        publish_detached(self.channel, "game_update", message.model_dump(mode="json"), game["id"])
