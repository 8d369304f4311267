"""
Pydantic models for league entities.

These models are used for:
- Validating request bodies before anything reaches the store
- Carrying sport-specific game details as a tagged union
- Shaping the messages pushed to live subscribers
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, NonNegativeInt, PositiveInt, model_validator

from .core.types import BattingSide, GameStatus, Sport


# =============================================================================
# Teams and Players
# =============================================================================


class TeamIn(BaseModel):
    """Body for creating or replacing a team."""

    name: str = Field(min_length=1, max_length=100)
    leader_id: Optional[PositiveInt] = None


class PlayerIn(BaseModel):
    """Body for creating or replacing a player."""

    name: str = Field(min_length=1, max_length=100)
    team_id: PositiveInt


class PlayerStatIn(BaseModel):
    """Direct overwrite of a player's stat line for one game."""

    points: NonNegativeInt = 0
    runs: NonNegativeInt = 0
    balls: NonNegativeInt = 0
    wickets: NonNegativeInt = 0


# =============================================================================
# Sport-specific game details (tagged by sport)
# =============================================================================


class FootballDetails(BaseModel):
    sport: Literal[Sport.FOOTBALL] = Sport.FOOTBALL


class BasketballDetails(BaseModel):
    sport: Literal[Sport.BASKETBALL] = Sport.BASKETBALL


class CricketDetails(BaseModel):
    """Innings state carried by cricket games."""

    sport: Literal[Sport.CRICKET] = Sport.CRICKET
    team1_deaths: NonNegativeInt = 0
    team2_deaths: NonNegativeInt = 0
    batting_side: BattingSide = BattingSide.TEAM1
    current_batsman_id: Optional[PositiveInt] = None
    current_bowler_id: Optional[PositiveInt] = None


GameDetails = Annotated[
    Union[FootballDetails, BasketballDetails, CricketDetails],
    Field(discriminator="sport"),
]


# =============================================================================
# Games
# =============================================================================


class GameCreate(BaseModel):
    """
    Body for creating a game.

    Cricket fields are accepted flat on the body and folded into the
    tagged details by details(); they are ignored for other sports.
    """

    sport: Sport
    status: GameStatus = GameStatus.SCHEDULED
    scheduled_time: datetime
    team1_id: PositiveInt
    team2_id: PositiveInt
    team1_score: NonNegativeInt = 0
    team2_score: NonNegativeInt = 0

    team1_deaths: NonNegativeInt = 0
    team2_deaths: NonNegativeInt = 0
    batting_side: BattingSide = BattingSide.TEAM1
    current_batsman_id: Optional[PositiveInt] = None
    current_bowler_id: Optional[PositiveInt] = None

    @model_validator(mode="after")
    def _distinct_teams(self) -> "GameCreate":
        if self.team1_id == self.team2_id:
            raise ValueError("team1_id and team2_id must be different teams")
        return self

    def details(self) -> Union[FootballDetails, BasketballDetails, CricketDetails]:
        """Sport-specific payload selected by `sport`."""
        if self.sport == Sport.CRICKET:
            return CricketDetails(
                team1_deaths=self.team1_deaths,
                team2_deaths=self.team2_deaths,
                batting_side=self.batting_side,
                current_batsman_id=self.current_batsman_id,
                current_bowler_id=self.current_bowler_id,
            )
        if self.sport == Sport.BASKETBALL:
            return BasketballDetails()
        return FootballDetails()


class ScoreUpdate(BaseModel):
    """Direct overwrite of both scores."""

    team1_score: NonNegativeInt
    team2_score: NonNegativeInt
    status: GameStatus = GameStatus.LIVE


class StatusUpdate(BaseModel):
    status: GameStatus


# =============================================================================
# Score events
# =============================================================================


class ScoreEventIn(BaseModel):
    """A single scoring action to record against a game."""

    game_id: PositiveInt
    team_id: PositiveInt
    player_id: Optional[PositiveInt] = None
    sport: Sport
    points: NonNegativeInt = 0
    runs: NonNegativeInt = 0
    wicket: bool = False
    batting_side: Optional[BattingSide] = None


# =============================================================================
# Live messages
# =============================================================================


class ScoreEventMessage(BaseModel):
    """Pushed to subscribers after a score event commits."""

    kind: Literal["score_event"] = "score_event"
    event_id: int
    game_id: int
    team_id: int
    player_id: Optional[int] = None
    sport: Sport
    points: int
    runs: int
    wicket: bool
    batting_side: Optional[BattingSide] = None
    timestamp: datetime


class GameUpdateMessage(BaseModel):
    """Pushed to subscribers after a score overwrite or status change."""

    kind: Literal["score_update", "status_update"]
    game_id: int
    sport: Sport
    team1_score: int
    team2_score: int
    status: GameStatus
    team1_name: Optional[str] = None
    team2_name: Optional[str] = None
    timestamp: datetime
