"""Read-only queries for listings, detail views and aggregates."""

from .events import EventQueries
from .games import GameQueries
from .players import PlayerQueries
from .teams import TeamQueries

__all__ = ["EventQueries", "GameQueries", "PlayerQueries", "TeamQueries"]
