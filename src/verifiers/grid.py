"""Grid snapshot model and text rendering."""

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..tiles.catalog import GLYPHS, ConnectorMask, TileShape, connectors_of, shape_for
from ..tiles.models import GridCell

CellState = Optional[ConnectorMask]
Occupant = Union[ConnectorMask, TileShape, None]


def as_mask(occupant: Occupant) -> CellState:
    """Normalise a shape or raw tuple to a ConnectorMask; None stays None."""
    if occupant is None:
        return None
    if isinstance(occupant, ConnectorMask):
        return occupant
    if isinstance(occupant, tuple):
        return ConnectorMask(*occupant)
    return connectors_of(occupant)


class GridSnapshot:
    """
    Read-only view of the board at one moment.

    Maps each playable cell to the connectors of the tile on it, or None when
    the slot is empty. Cells outside the playable area are simply absent.
    Snapshots are values: build a fresh one per query and never mutate it.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Optional[Mapping[Tuple[int, int], Occupant]] = None):
        normalised: Dict[GridCell, CellState] = {}
        for pos, occupant in (cells or {}).items():
            normalised[GridCell(*pos)] = as_mask(occupant)
        self._cells: Mapping[GridCell, CellState] = MappingProxyType(normalised)

    @classmethod
    def from_cells(
        cls,
        cells: Iterable[Tuple[int, int]],
        placed: Optional[Mapping[Tuple[int, int], Occupant]] = None,
    ) -> "GridSnapshot":
        """
        Build a snapshot from the playable cells and the tiles placed on them.

        Args:
            cells: Every playable position (empty or not)
            placed: Position -> shape or mask for occupied positions. Positions
                not listed in `cells` become playable too.
        """
        data: Dict[Tuple[int, int], Occupant] = {tuple(pos): None for pos in cells}
        for pos, occupant in (placed or {}).items():
            data[tuple(pos)] = occupant
        return cls(data)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, position) -> bool:
        return self.contains(position)

    def __eq__(self, other) -> bool:
        if not isinstance(other, GridSnapshot):
            return NotImplemented
        return dict(self._cells) == dict(other._cells)

    def __repr__(self) -> str:
        return f"GridSnapshot({len(self._cells)} cells, {self.occupied_count()} occupied)"

    def for_each_cell(self) -> Iterator[Tuple[GridCell, CellState]]:
        """Yield (position, mask or None) for every playable cell."""
        return iter(self._cells.items())

    def contains(self, position) -> bool:
        return GridCell(*position) in self._cells

    def mask_at(self, position) -> CellState:
        """Connectors at `position`; None for empty or absent cells."""
        return self._cells.get(GridCell(*position))

    def is_occupied(self, position) -> bool:
        return self.mask_at(position) is not None

    def is_empty(self, position) -> bool:
        """True for a playable slot with nothing on it."""
        position = GridCell(*position)
        return position in self._cells and self._cells[position] is None

    def occupied_cells(self) -> List[GridCell]:
        return [pos for pos, mask in self._cells.items() if mask is not None]

    def empty_cells(self) -> List[GridCell]:
        return [pos for pos, mask in self._cells.items() if mask is None]

    def occupied_count(self, excluding: Optional[Tuple[int, int]] = None) -> int:
        """Number of occupied cells, optionally not counting `excluding`."""
        skip = GridCell(*excluding) if excluding is not None else None
        return sum(1 for pos, mask in self._cells.items() if mask is not None and pos != skip)

    def with_placement(self, position, occupant: Occupant) -> "GridSnapshot":
        """A new snapshot with `occupant` put at `position`."""
        data: Dict[Tuple[int, int], Occupant] = dict(self._cells)
        data[GridCell(*position)] = occupant
        return GridSnapshot(data)

    def bounds(self) -> Optional[Tuple[int, int, int, int]]:
        """(min_x, min_y, max_x, max_y) of the playable area."""
        if not self._cells:
            return None
        xs = [pos.x for pos in self._cells]
        ys = [pos.y for pos in self._cells]
        return min(xs), min(ys), max(xs), max(ys)


def render_snapshot(
    snapshot: GridSnapshot,
    start: Optional[Tuple[int, int]] = None,
    goal: Optional[Tuple[int, int]] = None,
) -> str:
    """
    Render the snapshot as a text layout, top row first.

    Occupied cells use the shape glyph, empty slots '.', absent cells ' '.
    Empty Start/Goal slots are shown as 'S' and 'G'. The output can be read
    back with parsing.parse_layout.
    """
    box = snapshot.bounds()
    if box is None:
        return ""
    min_x, min_y, max_x, max_y = box
    start = GridCell(*start) if start is not None else None
    goal = GridCell(*goal) if goal is not None else None

    def glyph(pos: GridCell) -> str:
        if not snapshot.contains(pos):
            return " "
        mask = snapshot.mask_at(pos)
        if mask is not None:
            shape = shape_for(mask)
            return GLYPHS[shape] if shape is not None else "o"
        if pos == start:
            return "S"
        if pos == goal:
            return "G"
        return "."

    lines = [
        "".join(glyph(GridCell(x, y)) for x in range(min_x, max_x + 1)).rstrip()
        for y in range(max_y, min_y - 1, -1)
    ]
    return "\n".join(lines)
