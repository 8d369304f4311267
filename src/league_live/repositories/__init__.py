"""Repositories for single-table writes."""

from .base import PlayerRepository, ScoreEventRepository, TeamRepository
from .postgres import (
    PostgresPlayerRepository,
    PostgresScoreEventRepository,
    PostgresTeamRepository,
)

__all__ = [
    "PlayerRepository",
    "ScoreEventRepository",
    "TeamRepository",
    "PostgresPlayerRepository",
    "PostgresScoreEventRepository",
    "PostgresTeamRepository",
]
