"""Session environment for tile path levels."""

from .models import (
    GameStatus,
    MapSettings,
    MoveConfig,
    LevelConfig,
    PlacementOutcome,
)
from .board import Board, generate_random_walk
from .session import GameSession

__all__ = [
    "GameStatus",
    "MapSettings",
    "MoveConfig",
    "LevelConfig",
    "PlacementOutcome",
    "Board",
    "generate_random_walk",
    "GameSession",
]
