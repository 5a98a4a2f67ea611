import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..errors import LevelConfigError
from ..tiles.models import GridCell, SpecialRole, TileDefinition
from ..tiles.pool import TilePool
from ..verifiers.models import PathResult, PlacementIssue, ValidationResult
from ..verifiers.parsing import parse_layout
from ..verifiers.placement import can_place_quick, validate_placement, validate_placement_with_path
from ..verifiers.reachability import check_reachability
from .board import Board
from .models import GameStatus, LevelConfig, PlacementOutcome

logger = logging.getLogger(__name__)


def _farthest_from(board: Board, start) -> Optional[GridCell]:
    """The board cell with the largest Manhattan distance from `start`."""
    start = GridCell(*start)
    candidates = [c for c in board.cells if c != start]
    if not candidates:
        return None
    return max(candidates, key=lambda c: (abs(c.x - start.x) + abs(c.y - start.y), c))


class GameSession(BaseModel):
    """
    Manages one round of a tile path level.

    Owns the board and the tile pool, routes every placement through the
    verifiers and keeps track of win/loss. The pool belongs to the session
    alone; callers that share a session across threads must lock around it.

    Attributes:
        board: Playable cells and placed tiles
        pool: Tiles still available to the player
        start: Start cell, if the level has one
        goal: Goal cell, if the level has one
        global_validation: Reject placements that make the goal unreachable
        history: Outcomes of every placement attempt this round
        status: Current win/loss state
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    board: Board = Field(default_factory=Board)
    pool: TilePool = Field(default_factory=TilePool)
    start: Optional[GridCell] = None
    goal: Optional[GridCell] = None
    global_validation: bool = True
    history: List[PlacementOutcome] = Field(default_factory=list)
    status: GameStatus = GameStatus.IN_PROGRESS

    @classmethod
    def create(cls, config: Optional[LevelConfig] = None, **config_kwargs) -> "GameSession":
        """
        Factory method to create a session from a level configuration.

        A text layout wins over generated map settings. For generated maps
        Start defaults to the origin, and a Goal that is not on the map falls
        back to the cell farthest from Start.

        Args:
            config: Optional LevelConfig instance
            **config_kwargs: Config parameters if config not provided

        Returns:
            A new GameSession ready for the first placement

        Raises:
            LevelConfigError: If the layout is malformed or Start and Goal end
                up on the same cell
        """
        if config is None:
            config = LevelConfig(**config_kwargs)

        if config.layout is not None:
            layout = parse_layout(config.layout)
            board = Board.from_layout(layout)
            start = config.start or layout.start
            goal = config.goal or layout.goal
        else:
            board = Board.generate(config.map)
            start = config.start or (0, 0)
            goal = config.goal
            if goal is None or not board.contains(goal):
                goal = _farthest_from(board, start)

        if start is not None and goal is not None and GridCell(*start) == GridCell(*goal):
            raise LevelConfigError(f"Start and Goal resolve to the same cell {GridCell(*start)}")

        session = cls(
            board=board,
            pool=TilePool.from_shapes(config.inventory),
            start=GridCell(*start) if start is not None else None,
            goal=GridCell(*goal) if goal is not None else None,
            global_validation=config.global_validation,
        )
        logger.info(
            "Created session '%s': %d cells, %d tiles, start=%s goal=%s",
            config.name, len(board.cells), session.pool.count, session.start, session.goal,
        )
        return session

    def role_of(self, position) -> SpecialRole:
        position = GridCell(*position)
        if position == self.start:
            return SpecialRole.START
        if position == self.goal:
            return SpecialRole.GOAL
        return SpecialRole.NONE

    def preview(self, tile: TileDefinition, position) -> Tuple[bool, str]:
        """Quick hover check for dragging `tile` over `position`."""
        return can_place_quick(position, tile.shape, self.board.snapshot())

    def check_reachability(self) -> PathResult:
        return check_reachability(self.start, self.goal, self.board.snapshot(), self.pool)

    def check_status(self) -> GameStatus:
        """
        Evaluate the win condition on the current board.

        WON when Start and Goal are joined. LOST when no path can be
        completed any more, or when the pool is used up before they are
        joined. IN_PROGRESS otherwise.
        """
        return self._apply_status(self.check_reachability())

    def _out_of_tiles(self) -> bool:
        return self.pool.is_empty and self.start is not None and self.goal is not None

    def _apply_status(self, path: PathResult) -> GameStatus:
        if path.currently_connected:
            self.status = GameStatus.WON
        elif not path.path_possible or self._out_of_tiles():
            self.status = GameStatus.LOST
        else:
            self.status = GameStatus.IN_PROGRESS
        return self.status

    def place(self, tile: TileDefinition, position) -> PlacementOutcome:
        """
        Try to place a tile from the pool onto the board.

        The tile must still be in the pool and the cell must be on the board.
        A rejected placement leaves board and pool untouched.

        Args:
            tile: A tile from this session's pool
            position: Target cell

        Returns:
            PlacementOutcome with the validation, the path check (if the tile
            was accepted) and the resulting game status
        """
        position = GridCell(*position)
        snapshot = self.board.snapshot()

        if self.status is not GameStatus.IN_PROGRESS:
            result = self._rejection("ROUND_OVER", f"Round is already {self.status.value}", position)
        elif not self.pool.contains(tile):
            result = self._rejection("TILE_UNAVAILABLE", f"Tile {tile.id} is not in the pool", position)
        elif not snapshot.contains(position):
            result = self._rejection("OUT_OF_BOUNDS", f"Position {position} outside map bounds", position)
        elif self.global_validation:
            result = validate_placement_with_path(
                position, tile.shape, snapshot, self.start, self.goal, self.pool
            )
        else:
            result = validate_placement(position, tile.shape, snapshot)

        if not result.valid:
            logger.info("Rejected %s at %s: %s", tile.id, position, "; ".join(result.issues))
            outcome = PlacementOutcome(
                tile_id=tile.id,
                shape=tile.shape,
                position=position,
                accepted=False,
                validation=result,
                status=self.status,
            )
            self.history.append(outcome)
            return outcome

        self.board.place(position, tile)
        self.pool.remove(tile)
        path = self.check_reachability()
        status = self._apply_status(path)
        logger.info("Placed %s at %s (%d tiles left)", tile.id, position, self.pool.count)
        if status is GameStatus.WON:
            logger.info("Start %s connected to Goal %s", self.start, self.goal)
        elif status is GameStatus.LOST:
            logger.info("No path left from Start %s to Goal %s", self.start, self.goal)

        outcome = PlacementOutcome(
            tile_id=tile.id,
            shape=tile.shape,
            position=position,
            accepted=True,
            validation=result,
            path=path,
            status=status,
        )
        self.history.append(outcome)
        return outcome

    def take_back(self, position) -> Optional[TileDefinition]:
        """Lift a placed (non-fixed) tile off the board and return it to the pool."""
        tile = self.board.remove(position)
        if tile is not None:
            self.pool.add(tile)
            self.check_status()
        return tile

    def restart(self) -> None:
        """Clear placed tiles and restore the full inventory."""
        self.board.clear_placed_tiles()
        self.pool.reset()
        self.history = []
        self.status = GameStatus.IN_PROGRESS
        logger.info("Session restarted with %d tiles", self.pool.count)

    @staticmethod
    def _rejection(code: str, message: str, position: GridCell) -> ValidationResult:
        return ValidationResult(
            valid=False,
            errors=[PlacementIssue(code=code, message=message, position=position)],
        )

    def get_state(self) -> Dict:
        """
        Get the current session state as a dictionary.

        Returns:
            Dictionary containing session state
        """
        return {
            "status": self.status.value,
            "start": self.start,
            "goal": self.goal,
            "cells": len(self.board.cells),
            "tiles_placed": self.board.occupied_count,
            "moves_attempted": len(self.history),
            "moves_accepted": sum(1 for o in self.history if o.accepted),
            "pool": self.pool.get_state(),
        }
