"""
Pydantic models for the environment layer.

This module contains the level configuration (map settings, inventory,
scripted moves) and the per-move outcomes produced by a session. The logic
classes (Board, GameSession) stay in their own files.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..tiles.catalog import TileShape
from ..tiles.models import GridCell
from ..verifiers.models import PathResult, ValidationResult


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


class MapSettings(BaseModel):
    """Size and seed of a generated map."""
    use_level_formula: bool = True  # size = 4 + level
    level: int = Field(default=1, ge=0)
    size: int = Field(default=5, ge=1)  # used when the formula is off
    seed: Optional[int] = None

    def resolve_size(self) -> int:
        n = 4 + self.level if self.use_level_formula else self.size
        return max(n, 1)


class MoveConfig(BaseModel):
    """One scripted placement in a level file."""
    shape: TileShape
    x: int
    y: int

    @property
    def position(self) -> GridCell:
        return GridCell(self.x, self.y)


class LevelConfig(BaseModel):
    """Configuration for one level, as loaded from YAML."""
    model_config = ConfigDict(extra='forbid')

    name: str = "level"
    map: MapSettings = Field(default_factory=MapSettings)
    layout: Optional[str] = None  # text layout, overrides `map` when given
    start: Optional[Tuple[int, int]] = None
    goal: Optional[Tuple[int, int]] = None
    inventory: List[TileShape] = Field(default_factory=list)
    global_validation: bool = True
    moves: List[MoveConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _distinct_start_goal(self) -> "LevelConfig":
        if self.start is not None and self.start == self.goal:
            raise ValueError("start and goal must be different cells")
        return self


class PlacementOutcome(BaseModel):
    """Result of one placement attempt in a session."""
    model_config = ConfigDict(frozen=True)

    tile_id: str
    shape: TileShape
    position: GridCell
    accepted: bool
    validation: ValidationResult
    path: Optional[PathResult] = None
    status: GameStatus = GameStatus.IN_PROGRESS
