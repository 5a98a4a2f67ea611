"""Tile shapes, connector masks and the tile pool."""

from .catalog import (
    Direction,
    ConnectorMask,
    TileShape,
    EMPTY_MASK,
    GLYPHS,
    TILE_CONNECTIONS,
    connectors_of,
    opposite,
    direction_vector,
    shape_for,
    describe,
)
from .models import GridCell, SpecialRole, TileDefinition
from .pool import TilePool

__all__ = [
    # Catalog
    "Direction",
    "ConnectorMask",
    "TileShape",
    "EMPTY_MASK",
    "GLYPHS",
    "TILE_CONNECTIONS",
    "connectors_of",
    "opposite",
    "direction_vector",
    "shape_for",
    "describe",
    # Models
    "GridCell",
    "SpecialRole",
    "TileDefinition",
    # Pool
    "TilePool",
]
