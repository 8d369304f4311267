"""
Core types and constants for League Live.

This module provides:
- Sport, GameStatus and BattingSide enums
- SportConfig dataclass describing where each sport's game details live
- SPORT_REGISTRY for centralized sport configurations
- Broadcast room naming helpers
"""

from dataclasses import dataclass, field
from enum import Enum


class Sport(str, Enum):
    """Supported sports."""

    FOOTBALL = "FOOTBALL"
    BASKETBALL = "BASKETBALL"
    CRICKET = "CRICKET"


class GameStatus(str, Enum):
    """Game lifecycle status."""

    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    FINISHED = "FINISHED"


class BattingSide(str, Enum):
    """Which side of a cricket game is batting."""

    TEAM1 = "TEAM1"
    TEAM2 = "TEAM2"


# Forward order used when strict status transitions are enabled
STATUS_ORDER: dict[GameStatus, int] = {
    GameStatus.SCHEDULED: 0,
    GameStatus.LIVE: 1,
    GameStatus.FINISHED: 2,
}


@dataclass(frozen=True)
class SportConfig:
    """
    Configuration for a sport.

    Every game has exactly one row in its sport's details table, keyed by
    the game id.
    """

    id: str
    name: str
    details_table: str
    detail_columns: tuple[str, ...] = field(default_factory=tuple)


# =============================================================================
# SPORT REGISTRY - Central configuration for all sports
# =============================================================================

SPORT_REGISTRY: dict[str, SportConfig] = {
    Sport.FOOTBALL.value: SportConfig(
        id="FOOTBALL",
        name="Football",
        details_table="football_games",
    ),
    Sport.BASKETBALL.value: SportConfig(
        id="BASKETBALL",
        name="Basketball",
        details_table="basketball_games",
    ),
    Sport.CRICKET.value: SportConfig(
        id="CRICKET",
        name="Cricket",
        details_table="cricket_games",
        detail_columns=(
            "team1_deaths",
            "team2_deaths",
            "batting_side",
            "current_batsman_id",
            "current_bowler_id",
        ),
    ),
}


def get_sport_config(sport: str | Sport) -> SportConfig:
    """
    Get configuration for a sport.

    Raises:
        KeyError: If sport is not in registry
    """
    sport_id = sport.value if isinstance(sport, Sport) else sport
    return SPORT_REGISTRY[sport_id]


# =============================================================================
# Table names
# =============================================================================

TEAMS_TABLE = "teams"
PLAYERS_TABLE = "players"
GAMES_TABLE = "games"
PLAYER_STATS_TABLE = "player_stats"
SCORE_EVENTS_TABLE = "score_events"

# =============================================================================
# Broadcast rooms
# =============================================================================

LIVE_ROOM = "live"


def game_room(game_id: int) -> str:
    """Room name receiving a single game's updates."""
    return f"game_{game_id}"
