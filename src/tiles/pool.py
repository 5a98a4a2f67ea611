import logging
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, PrivateAttr

from .catalog import ConnectorMask, Direction, TileShape
from .models import TileDefinition

logger = logging.getLogger(__name__)


class TilePool(BaseModel):
    """
    The tiles still available to the player.

    Holds the live inventory plus a backup of the inventory captured at
    construction, so a restart can bring back every consumed tile in its
    original order.

    Membership is by identity: two definitions with equal fields are still
    two separate tiles, which matters when an inventory holds several tiles
    of the same shape.

    Attributes:
        available: The live, ordered inventory
    """

    available: List[TileDefinition] = Field(default_factory=list)
    _original: Tuple[TileDefinition, ...] = PrivateAttr(default=())

    def model_post_init(self, __context) -> None:
        """Capture the starting inventory as the reset backup."""
        self._original = tuple(self.available)

    @classmethod
    def create(cls, tiles: Iterable[TileDefinition]) -> "TilePool":
        """
        Factory method to create a pool from an inventory.

        Args:
            tiles: Tile definitions in the order they should be offered

        Returns:
            A new TilePool whose backup is that same inventory
        """
        return cls(available=list(tiles))

    @classmethod
    def from_shapes(cls, shapes: Iterable[TileShape]) -> "TilePool":
        """Create a pool with one generated definition per shape entry."""
        tiles = [
            TileDefinition(id=f"{TileShape(shape).value}_{i}", shape=shape)
            for i, shape in enumerate(shapes)
        ]
        return cls.create(tiles)

    @property
    def count(self) -> int:
        return len(self.available)

    @property
    def is_empty(self) -> bool:
        return len(self.available) == 0

    @property
    def original_tiles(self) -> Tuple[TileDefinition, ...]:
        return self._original

    def available_tiles(self) -> Tuple[TileDefinition, ...]:
        """Read-only snapshot of the live inventory."""
        return tuple(self.available)

    def shapes(self) -> List[TileShape]:
        """Shapes of the live inventory, in order."""
        return [tile.shape for tile in self.available]

    def contains(self, tile: TileDefinition) -> bool:
        return self._index_of(tile) is not None

    def remove(self, tile: TileDefinition) -> None:
        """Remove one occurrence of `tile`; do nothing if it is not available."""
        index = self._index_of(tile)
        if index is None:
            return
        del self.available[index]
        logger.debug("Removed %s from pool (%d left)", tile.id, self.count)

    def add(self, tile: TileDefinition) -> None:
        """Append `tile` unless it is already available."""
        if tile is None or self._index_of(tile) is not None:
            return
        self.available.append(tile)
        logger.debug("Returned %s to pool (%d available)", tile.id, self.count)

    def reset(self) -> None:
        """Restore the live inventory from the construction-time backup."""
        self.available = list(self._original)
        logger.debug("Pool reset to %d tiles", self.count)

    def tiles_matching_exactly(self, required: ConnectorMask) -> List[TileDefinition]:
        """Tiles whose connectors equal `required` on all four sides."""
        required = ConnectorMask(*required)
        return [tile for tile in self.available if tile.connectors == required]

    def can_satisfy(self, required: ConnectorMask) -> bool:
        """Exact-match test: True if some tile has exactly `required`."""
        return bool(self.tiles_matching_exactly(required))

    def tiles_offering(self, required: ConnectorMask) -> List[TileDefinition]:
        """Tiles open on at least every side of `required` (extras allowed)."""
        return [tile for tile in self.available if tile.connectors.covers(required)]

    def can_offer(self, required: ConnectorMask) -> bool:
        """Superset test: True if some tile opens at least the `required` sides."""
        return bool(self.tiles_offering(required))

    def can_provide_connection(self, direction: Direction) -> bool:
        """True if any available tile is open on `direction`."""
        return any(tile.connectors.has_connection(direction) for tile in self.available)

    def _index_of(self, tile: TileDefinition) -> Optional[int]:
        for i, candidate in enumerate(self.available):
            if candidate is tile:
                return i
        return None

    def get_state(self) -> Dict:
        """
        Get the current pool state as a dictionary.

        Returns:
            Dictionary containing pool state
        """
        summary: Dict[str, int] = {}
        for tile in self.available:
            summary[tile.shape.value] = summary.get(tile.shape.value, 0) + 1
        return {
            "tiles_remaining": self.count,
            "tiles_total": len(self._original),
            "is_empty": self.is_empty,
            "shape_summary": dict(sorted(summary.items())),
        }
