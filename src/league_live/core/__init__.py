"""
Core module for League Live.

This module provides the foundational components:
- Configuration management (config.py)
- Type definitions and sport registry (types.py)

Usage:
    from league_live.core import Settings, get_settings
    from league_live.core import Sport, GameStatus, get_sport_config
"""

from .config import Settings, get_settings
from .types import (
    BattingSide,
    GameStatus,
    LIVE_ROOM,
    SPORT_REGISTRY,
    Sport,
    SportConfig,
    game_room,
    get_sport_config,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "BattingSide",
    "GameStatus",
    "Sport",
    "SportConfig",
    "SPORT_REGISTRY",
    "get_sport_config",
    "LIVE_ROOM",
    "game_room",
]
