"""
Score recording.

Applies one scoring action atomically across three tables: the event is
appended to score_events, the scoring side's running total on games is
incremented, and the scorer's player_stats row accumulates points, runs and
wickets. The game row is locked first, so concurrent events for the same
game apply one after another while other games proceed untouched.

Once the transaction commits, a "score_event" message is published on a
detached task. Publishing never affects the outcome of the recording.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..broadcast import BroadcastChannel, publish_detached
from ..errors import InvalidInput, NotFound
from ..models import ScoreEventIn, ScoreEventMessage

if TYPE_CHECKING:
    from ..pg_async import AsyncPostgresDB

logger = logging.getLogger(__name__)


class ScoreRecordingService:
    """Records score events and keeps game totals and player stats in step."""

    def __init__(self, db: "AsyncPostgresDB", channel: Optional[BroadcastChannel] = None):
        self.db = db
        self.channel = channel

    async def record_score_event(self, event: ScoreEventIn) -> int:
        """
        Record a score event.

        Args:
            event: Validated score event

        Returns:
            Id of the new score event

        Raises:
            NotFound: the game does not exist
            InvalidInput: the team is not playing the game, or the sport
                differs from the game's sport
        """
        async with self.db.transaction() as conn:
            cur = await conn.execute(
                "SELECT id, sport, team1_id, team2_id FROM games WHERE id = %s FOR UPDATE",
                (event.game_id,),
            )
            game = await cur.fetchone()
            if game is None:
                raise NotFound("Game", event.game_id)

            if event.team_id not in (game["team1_id"], game["team2_id"]):
                raise InvalidInput(
                    "Team is not playing in this game",
                    f"Team {event.team_id} is not part of game {event.game_id}",
                )
            if event.sport.value != game["sport"]:
                raise InvalidInput(
                    "Sport does not match game",
                    f"Game {event.game_id} is {game['sport']}, event is {event.sport.value}",
                )

            cur = await conn.execute(
                """
                INSERT INTO score_events
                    (game_id, team_id, player_id, sport, points, runs, wicket, batting_side)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING id, created_at
                """,
                (
                    event.game_id,
                    event.team_id,
                    event.player_id,
                    event.sport.value,
                    event.points,
                    event.runs,
                    event.wicket,
                    event.batting_side.value if event.batting_side else None,
                ),
            )
            inserted = await cur.fetchone()

            if event.points > 0:
                column = "team1_score" if event.team_id == game["team1_id"] else "team2_score"
                await conn.execute(
                    f"UPDATE games SET {column} = {column} + %s, updated_at = NOW() WHERE id = %s",
                    (event.points, event.game_id),
                )

            if event.player_id is not None:
                cur = await conn.execute(
                    """
                    UPDATE player_stats
                    SET points = points + %s,
                        runs = runs + %s,
                        wickets = wickets + %s,
                        last_updated = NOW()
                    WHERE game_id = %s AND player_id = %s
                    """,
                    (
                        event.points,
                        event.runs,
                        1 if event.wicket else 0,
                        event.game_id,
                        event.player_id,
                    ),
                )
                if cur.rowcount == 0:
                    logger.info(
                        "Player %s has no stat row for game %s; stats unchanged",
                        event.player_id,
                        event.game_id,
                    )

        event_id = inserted["id"]
        logger.debug("Recorded score event %s for game %s", event_id, event.game_id)

        message = ScoreEventMessage(
            event_id=event_id,
            game_id=event.game_id,
            team_id=event.team_id,
            player_id=event.player_id,
            sport=event.sport,
            points=event.points,
            runs=event.runs,
            wicket=event.wicket,
            batting_side=event.batting_side,
            timestamp=inserted["created_at"],
        )
        publish_detached(self.channel, "score_event", message.model_dump(mode="json"), event.game_id)
        return event_id
