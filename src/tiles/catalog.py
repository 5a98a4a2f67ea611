"""
Connection catalog: directions, connector masks and the tile shape table.

Every shape maps to exactly one ConnectorMask. The table is checked once at
import so a typo in the data fails loudly instead of producing silently
unplayable tiles.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

from ..errors import CatalogIntegrityError


class Direction(str, Enum):
    """A side of a cell. Definition order is the scan order used everywhere."""
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"


_OPPOSITES: Dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.RIGHT: Direction.LEFT,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
}

# y grows upward: Up is (0, +1)
_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, 1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
}


def opposite(direction: Direction) -> Direction:
    """Return the side facing `direction` across a shared edge."""
    return _OPPOSITES[direction]


def direction_vector(direction: Direction) -> Tuple[int, int]:
    """Return the (dx, dy) offset of the neighbour on that side."""
    return _VECTORS[direction]


class ConnectorMask(NamedTuple):
    """Open connectors of a tile, one flag per side."""
    up: bool = False
    right: bool = False
    down: bool = False
    left: bool = False

    @classmethod
    def from_directions(cls, *directions: Direction) -> "ConnectorMask":
        """Build a mask with exactly the given sides open."""
        opened = set(directions)
        return cls(*(d in opened for d in Direction))

    def has_connection(self, direction: Direction) -> bool:
        return getattr(self, direction.value)

    @property
    def connection_count(self) -> int:
        return sum(1 for flag in self if flag)

    def directions(self) -> List[Direction]:
        """Open sides in scan order."""
        return [d for d in Direction if self.has_connection(d)]

    def covers(self, required: "ConnectorMask") -> bool:
        """True if every side open in `required` is also open here."""
        return all(mine or not needed for mine, needed in zip(self, required))


EMPTY_MASK = ConnectorMask()


class TileShape(str, Enum):
    # Dead ends (1 connection)
    DEAD_END_UP = "dead_end_up"
    DEAD_END_DOWN = "dead_end_down"
    DEAD_END_LEFT = "dead_end_left"
    DEAD_END_RIGHT = "dead_end_right"

    # Straights (2 connections)
    STRAIGHT_HORIZONTAL = "straight_horizontal"
    STRAIGHT_VERTICAL = "straight_vertical"

    # Corners (2 connections)
    CORNER_UP_RIGHT = "corner_up_right"
    CORNER_UP_LEFT = "corner_up_left"
    CORNER_DOWN_RIGHT = "corner_down_right"
    CORNER_DOWN_LEFT = "corner_down_left"

    # T-junctions (3 connections)
    T_JUNCTION_UP_LEFT_RIGHT = "t_junction_up_left_right"
    T_JUNCTION_DOWN_LEFT_RIGHT = "t_junction_down_left_right"
    T_JUNCTION_LEFT_UP_DOWN = "t_junction_left_up_down"
    T_JUNCTION_RIGHT_UP_DOWN = "t_junction_right_up_down"

    # Cross (4 connections)
    CROSS = "cross"


# mask (up, right, down, left), connection count of the category, glyph
_SHAPE_TABLE: Dict[TileShape, Tuple[ConnectorMask, int, str]] = {
    TileShape.DEAD_END_UP: (ConnectorMask(True, False, False, False), 1, "╹"),
    TileShape.DEAD_END_DOWN: (ConnectorMask(False, False, True, False), 1, "╻"),
    TileShape.DEAD_END_LEFT: (ConnectorMask(False, False, False, True), 1, "╸"),
    TileShape.DEAD_END_RIGHT: (ConnectorMask(False, True, False, False), 1, "╺"),
    TileShape.STRAIGHT_HORIZONTAL: (ConnectorMask(False, True, False, True), 2, "━"),
    TileShape.STRAIGHT_VERTICAL: (ConnectorMask(True, False, True, False), 2, "┃"),
    TileShape.CORNER_UP_RIGHT: (ConnectorMask(True, True, False, False), 2, "┗"),
    TileShape.CORNER_UP_LEFT: (ConnectorMask(True, False, False, True), 2, "┛"),
    TileShape.CORNER_DOWN_RIGHT: (ConnectorMask(False, True, True, False), 2, "┏"),
    TileShape.CORNER_DOWN_LEFT: (ConnectorMask(False, False, True, True), 2, "┓"),
    TileShape.T_JUNCTION_UP_LEFT_RIGHT: (ConnectorMask(True, True, False, True), 3, "┻"),
    TileShape.T_JUNCTION_DOWN_LEFT_RIGHT: (ConnectorMask(False, True, True, True), 3, "┳"),
    TileShape.T_JUNCTION_LEFT_UP_DOWN: (ConnectorMask(True, False, True, True), 3, "┫"),
    TileShape.T_JUNCTION_RIGHT_UP_DOWN: (ConnectorMask(True, True, True, False), 3, "┣"),
    TileShape.CROSS: (ConnectorMask(True, True, True, True), 4, "╋"),
}


def _build_catalog() -> Mapping[TileShape, ConnectorMask]:
    """Check the shape table and freeze it into a read-only mapping."""
    missing = [shape.value for shape in TileShape if shape not in _SHAPE_TABLE]
    if missing:
        raise CatalogIntegrityError(f"Shapes without connectors: {missing}")

    masks: Dict[TileShape, ConnectorMask] = {}
    for shape, (mask, category, _glyph) in _SHAPE_TABLE.items():
        if mask.connection_count != category:
            raise CatalogIntegrityError(
                f"{shape.value} has {mask.connection_count} connectors, "
                f"expected {category}"
            )
        masks[shape] = mask

    if len(set(masks.values())) != len(masks):
        raise CatalogIntegrityError("Two shapes share the same connector mask")

    return MappingProxyType(masks)


TILE_CONNECTIONS: Mapping[TileShape, ConnectorMask] = _build_catalog()
GLYPHS: Mapping[TileShape, str] = MappingProxyType(
    {shape: glyph for shape, (_mask, _count, glyph) in _SHAPE_TABLE.items()}
)
_SHAPES_BY_MASK: Mapping[ConnectorMask, TileShape] = MappingProxyType(
    {mask: shape for shape, mask in TILE_CONNECTIONS.items()}
)


def connectors_of(shape) -> ConnectorMask:
    """
    Look up the connector mask of a shape.

    Unknown shapes (including raw strings that are not shape values) get the
    all-closed mask rather than an error.
    """
    try:
        shape = TileShape(shape)
    except ValueError:
        return EMPTY_MASK
    return TILE_CONNECTIONS.get(shape, EMPTY_MASK)


def shape_for(mask: ConnectorMask) -> Optional[TileShape]:
    """Reverse lookup: the shape whose mask equals `mask`, if any."""
    return _SHAPES_BY_MASK.get(ConnectorMask(*mask))


def describe(mask: ConnectorMask) -> str:
    """Short human label for a mask, used in diagnostics."""
    shape = shape_for(mask)
    if shape is not None:
        return shape.value
    return "closed tile"
