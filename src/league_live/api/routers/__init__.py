"""API routers module."""

from . import events, games, live, players, teams

__all__ = ["events", "games", "live", "players", "teams"]
