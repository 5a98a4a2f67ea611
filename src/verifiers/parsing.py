"""Text layout parsing utilities."""

import textwrap
from typing import Dict, List, NamedTuple, Optional

from ..errors import LevelConfigError
from ..tiles.catalog import EMPTY_MASK, GLYPHS, ConnectorMask, connectors_of
from ..tiles.models import GridCell
from .grid import GridSnapshot, CellState

_MASKS_BY_GLYPH: Dict[str, ConnectorMask] = {
    glyph: connectors_of(shape) for shape, glyph in GLYPHS.items()
}
_MASKS_BY_GLYPH["o"] = EMPTY_MASK  # occupied, no connectors

EMPTY_CHARS = {".", "S", "G"}
ABSENT_CHARS = {" ", "#"}


class ParsedLayout(NamedTuple):
    snapshot: GridSnapshot
    start: Optional[GridCell]
    goal: Optional[GridCell]


def parse_layout(text: str) -> ParsedLayout:
    """
    Parse a text board into a snapshot plus Start/Goal markers.

    Each character is one cell; the top row has the highest y and the left
    column is x = 0, the bottom row is y = 0.

        glyph (╋ ━ ┃ ┗ ...)  occupied cell with that shape
        .                    empty playable slot
        S / G                empty slot marked Start / Goal
        space or #           outside the board

    Raises LevelConfigError on unknown characters or duplicate markers.
    """
    lines = [line.rstrip() for line in textwrap.dedent(text).split("\n")]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        raise LevelConfigError("Layout is empty")

    height = len(lines)
    cells: Dict[GridCell, CellState] = {}
    markers: Dict[str, GridCell] = {}
    problems: List[str] = []

    for row, line in enumerate(lines):
        y = height - 1 - row
        for x, char in enumerate(line):
            pos = GridCell(x, y)
            if char in ABSENT_CHARS:
                continue
            if char in EMPTY_CHARS:
                cells[pos] = None
                if char in ("S", "G"):
                    if char in markers:
                        problems.append(f"Duplicate '{char}' marker at {pos}")
                    markers[char] = pos
            elif char in _MASKS_BY_GLYPH:
                cells[pos] = _MASKS_BY_GLYPH[char]
            else:
                problems.append(f"Unknown layout character '{char}' at {pos}")

    if problems:
        raise LevelConfigError("; ".join(problems))

    return ParsedLayout(GridSnapshot(cells), markers.get("S"), markers.get("G"))
