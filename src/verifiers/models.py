"""Result models for placement validation and reachability checks."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..tiles.catalog import Direction
from ..tiles.models import GridCell


IssueCode = Literal[
    "OCCUPIED",
    "OUT_OF_BOUNDS",
    "CONNECTION_CONFLICT",
    "NEIGHBOR_EXPECTS_CONNECTION",
    "NO_CONNECTION",
    "PATH_BLOCKED",
    "TILE_UNAVAILABLE",
    "ROUND_OVER",
]


class PlacementIssue(BaseModel):
    """A single reason a placement was rejected."""

    model_config = ConfigDict(frozen=True)

    code: IssueCode
    message: str
    position: Optional[GridCell] = None
    direction: Optional[Direction] = None  # side of the candidate that clashed


class ValidationResult(BaseModel):
    """Result of validating one placement. Issues keep discovery order."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: List[PlacementIssue] = Field(default_factory=list)

    @property
    def issues(self) -> List[str]:
        return [e.message for e in self.errors]

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self.errors]


class PathResult(BaseModel):
    """Result of a Start/Goal reachability check."""

    model_config = ConfigDict(frozen=True)

    path_possible: bool
    currently_connected: bool
    issues: List[str] = Field(default_factory=list)
    tiles_needed: Optional[int] = None  # lower bound on tiles still to place
