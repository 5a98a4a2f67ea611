"""
The live board: playable cells plus the tiles placed on them.

The board is the only mutable picture of the map. Verifiers never see it
directly; they get a GridSnapshot built from it for each query.
"""

import logging
import random
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from pydantic import BaseModel, Field

from ..errors import BoardError, LevelConfigError
from ..tiles.catalog import Direction, shape_for
from ..tiles.models import GridCell, TileDefinition
from ..verifiers.grid import GridSnapshot
from ..verifiers.parsing import ParsedLayout
from .models import MapSettings

logger = logging.getLogger(__name__)


def generate_random_walk(size: int, rng: Optional[random.Random] = None) -> List[GridCell]:
    """
    Grow a connected set of `size` cells outward from the origin.

    Each step picks a random frontier cell (a free neighbour of the map so
    far), so the result is always 4-connected. Cells are returned in the
    order they were added, origin first.

    Args:
        size: Number of cells wanted (at least 1)
        rng: Random source; a fresh unseeded one if omitted

    Returns:
        List of generated cells
    """
    rng = rng or random.Random()
    origin = GridCell(0, 0)
    positions: List[GridCell] = [origin]
    occupied: Set[GridCell] = {origin}
    frontier: List[GridCell] = [origin.step(d) for d in Direction]

    while len(positions) < size and frontier:
        current = frontier.pop(rng.randrange(len(frontier)))
        if current in occupied:
            continue
        positions.append(current)
        occupied.add(current)
        frontier.extend(n for n in (current.step(d) for d in Direction) if n not in occupied)

    logger.debug("Generated %d-cell map", len(positions))
    return positions


class Board(BaseModel):
    """
    Playable cells and the tiles currently on them.

    Attributes:
        cells: Every playable cell
        placed: Cell -> tile for occupied cells
        fixed: Cells whose tiles came with the level and survive a clear
    """

    cells: FrozenSet[GridCell] = Field(default_factory=frozenset)
    placed: Dict[GridCell, TileDefinition] = Field(default_factory=dict)
    fixed: FrozenSet[GridCell] = Field(default_factory=frozenset)

    @classmethod
    def create(cls, cells: Iterable) -> "Board":
        return cls(cells=frozenset(GridCell(*c) for c in cells))

    @classmethod
    def generate(cls, settings: MapSettings) -> "Board":
        """Build an empty board from random-walk map settings."""
        rng = random.Random(settings.seed)
        return cls.create(generate_random_walk(settings.resolve_size(), rng))

    @classmethod
    def from_layout(cls, layout: ParsedLayout) -> "Board":
        """
        Build a board from a parsed text layout.

        Tiles drawn in the layout become fixed tiles with generated ids.
        """
        placed: Dict[GridCell, TileDefinition] = {}
        for pos, mask in layout.snapshot.for_each_cell():
            if mask is None:
                continue
            shape = shape_for(mask)
            if shape is None:
                raise LevelConfigError(f"Layout tile at {pos} has no connectors")
            placed[pos] = TileDefinition(id=f"fixed_{pos.x}_{pos.y}", shape=shape)

        cells = [pos for pos, _ in layout.snapshot.for_each_cell()]
        return cls(
            cells=frozenset(cells),
            placed=placed,
            fixed=frozenset(placed),
        )

    def contains(self, position) -> bool:
        return GridCell(*position) in self.cells

    def is_occupied(self, position) -> bool:
        return GridCell(*position) in self.placed

    def tile_at(self, position) -> Optional[TileDefinition]:
        return self.placed.get(GridCell(*position))

    @property
    def occupied_count(self) -> int:
        return len(self.placed)

    def snapshot(self) -> GridSnapshot:
        """Fresh read-only snapshot of the current board."""
        return GridSnapshot.from_cells(
            self.cells,
            {pos: tile.connectors for pos, tile in self.placed.items()},
        )

    def place(self, position, tile: TileDefinition) -> None:
        """
        Put `tile` on an empty playable cell.

        Raises:
            BoardError: If the cell is off the board or already occupied
        """
        position = GridCell(*position)
        if position not in self.cells:
            raise BoardError(f"Cell {position} is not on the board")
        if position in self.placed:
            raise BoardError(
                f"Cell {position} already holds {self.placed[position].id}"
            )
        self.placed[position] = tile

    def remove(self, position) -> Optional[TileDefinition]:
        """Take the tile off a cell and return it; fixed tiles stay put."""
        position = GridCell(*position)
        if position in self.fixed:
            return None
        return self.placed.pop(position, None)

    def clear_placed_tiles(self) -> List[TileDefinition]:
        """Remove every non-fixed tile, returning what was removed."""
        removed = [tile for pos, tile in self.placed.items() if pos not in self.fixed]
        self.placed = {pos: tile for pos, tile in self.placed.items() if pos in self.fixed}
        logger.debug("Cleared %d placed tiles", len(removed))
        return removed
