"""Value types shared by the catalog, the verifiers and the session."""

from enum import Enum
from typing import NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .catalog import ConnectorMask, Direction, TileShape, connectors_of, direction_vector


class GridCell(NamedTuple):
    """A 2D integer board coordinate."""
    x: int
    y: int

    def step(self, direction: Direction) -> "GridCell":
        """The neighbouring cell on the given side."""
        dx, dy = direction_vector(direction)
        return GridCell(self.x + dx, self.y + dy)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class SpecialRole(str, Enum):
    NONE = "none"
    START = "start"
    GOAL = "goal"


class TileDefinition(BaseModel):
    """An inventory item: a named tile with a shape and an optional footprint."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    shape: TileShape
    # Cells relative to the tile's anchor; single-cell tiles use the default
    footprint: Tuple[Tuple[int, int], ...] = ((0, 0),)

    @property
    def connectors(self) -> ConnectorMask:
        return connectors_of(self.shape)
