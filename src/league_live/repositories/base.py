"""
Base repository protocols.

Defines abstract interfaces for the plain CRUD writes on teams, players,
player stat lines and score events. Multi-table writes live in the services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import PlayerIn, PlayerStatIn, TeamIn


class TeamRepository(ABC):
    """Abstract interface for team writes."""

    @abstractmethod
    async def create(self, team: TeamIn) -> int:
        """Insert a team and return its id."""
        ...

    @abstractmethod
    async def update(self, team_id: int, team: TeamIn) -> None:
        """
        Replace a team's name and leader.

        Raises:
            NotFound: no team with that id
        """
        ...

    @abstractmethod
    async def delete(self, team_id: int) -> None:
        ...


class PlayerRepository(ABC):
    """Abstract interface for player and player stat writes."""

    @abstractmethod
    async def create(self, player: PlayerIn) -> int:
        ...

    @abstractmethod
    async def update(self, player_id: int, player: PlayerIn) -> None:
        ...

    @abstractmethod
    async def delete(self, player_id: int) -> None:
        ...

    @abstractmethod
    async def overwrite_stat(self, game_id: int, player_id: int, stat: PlayerStatIn) -> None:
        """
        Replace a player's stat line for one game.

        Raises:
            NotFound: the player has no stat row for that game
        """
        ...


class ScoreEventRepository(ABC):
    """Abstract interface for score event removal."""

    @abstractmethod
    async def delete(self, event_id: int) -> None:
        ...
