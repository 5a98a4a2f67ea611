"""
Start/Goal reachability for tile path boards.

Two questions are answered from one snapshot:
1. Are Start and Goal joined right now through mutually connected tiles?
2. Could they still be joined by filling empty cells with tiles from the pool?

The second is a conservative search: it never answers "impossible" while a
legal completion exists, but it may answer "possible" for boards that cannot
actually be finished (see _min_tiles_to_connect).
"""

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from ..tiles.catalog import EMPTY_MASK, TILE_CONNECTIONS, ConnectorMask, Direction, opposite
from ..tiles.models import GridCell
from .grid import GridSnapshot, as_mask
from .models import PathResult

# (cell, side the cell was entered through; None for the Start cell)
_State = Tuple[GridCell, Optional[Direction]]


def pool_masks(pool) -> Optional[List[ConnectorMask]]:
    """
    Normalise a pool argument to the connector masks of its tiles (with repeats).

    Accepts a TilePool, an iterable of TileDefinitions, or an iterable of
    shapes or masks. None stays None, meaning "any shape, unlimited supply".
    Unknown shapes become closed tiles: they count toward the pool size but
    can never carry a path.
    """
    if pool is None:
        return None
    items = pool.shapes() if hasattr(pool, "shapes") else [getattr(item, "shape", item) for item in pool]
    return [as_mask(item) or EMPTY_MASK for item in items]


def _mutual(mask: ConnectorMask, neighbor_mask: ConnectorMask, direction: Direction) -> bool:
    return mask.has_connection(direction) and neighbor_mask.has_connection(opposite(direction))


def find_connected_region(start, snapshot: GridSnapshot) -> Set[GridCell]:
    """
    Cells reachable from `start` over mutual connections between placed tiles.

    Empty when `start` is not occupied. Each cell is enqueued at most once,
    so cycles in the tile network are harmless.
    """
    start = GridCell(*start)
    if not snapshot.is_occupied(start):
        return set()

    visited: Set[GridCell] = {start}
    queue: Deque[GridCell] = deque([start])

    while queue:
        current = queue.popleft()
        mask = snapshot.mask_at(current)
        for direction in Direction:
            neighbor = current.step(direction)
            if neighbor in visited:
                continue
            neighbor_mask = snapshot.mask_at(neighbor)
            if neighbor_mask is not None and _mutual(mask, neighbor_mask, direction):
                visited.add(neighbor)
                queue.append(neighbor)

    return visited


def _fitting_masks(
    cell: GridCell,
    snapshot: GridSnapshot,
    candidates: Iterable[ConnectorMask],
) -> List[ConnectorMask]:
    """Candidate masks that agree with every occupied neighbour of an empty cell."""
    fitting = []
    for mask in candidates:
        agrees = True
        for direction in Direction:
            neighbor_mask = snapshot.mask_at(cell.step(direction))
            if neighbor_mask is None:
                continue
            if mask.has_connection(direction) != neighbor_mask.has_connection(opposite(direction)):
                agrees = False
                break
        if agrees:
            fitting.append(mask)
    return fitting


def _min_tiles_to_connect(
    start: GridCell,
    goal: GridCell,
    snapshot: GridSnapshot,
    candidates: List[ConnectorMask],
) -> Optional[int]:
    """
    Fewest empty cells any Start-to-Goal path must fill, or None if no path.

    0-1 BFS over (cell, entry side). Moving onto an occupied cell costs 0 and
    needs a mutual joint. Moving onto an empty cell costs 1 and needs some
    candidate mask that fits the cell's current neighbours and opens toward
    both the side entered and the side left.

    Relaxations (sources of false positives): tile counts per shape are
    ignored, the same cell may be reused by different states, and future
    tiles are only checked against tiles already on the board.
    """
    fits: Dict[GridCell, List[ConnectorMask]] = {}

    def fitting(cell: GridCell) -> List[ConnectorMask]:
        if cell not in fits:
            fits[cell] = _fitting_masks(cell, snapshot, candidates)
        return fits[cell]

    def can_route(cell: GridCell, *sides: Optional[Direction]) -> bool:
        needed = [side for side in sides if side is not None]
        return any(all(m.has_connection(side) for side in needed) for m in fitting(cell))

    start_occupied = snapshot.is_occupied(start)
    if not start_occupied and not can_route(start):
        return None

    initial: _State = (start, None)
    dist: Dict[_State, int] = {initial: 0 if start_occupied else 1}
    queue: Deque[_State] = deque([initial])

    while queue:
        state = queue.popleft()
        cell, entered = state
        cost = dist[state]
        if cell == goal:
            return cost

        mask = snapshot.mask_at(cell)
        for direction in Direction:
            neighbor = cell.step(direction)
            if not snapshot.contains(neighbor):
                continue

            if mask is not None:
                if not mask.has_connection(direction):
                    continue
            elif not can_route(cell, entered, direction):
                continue

            back = opposite(direction)
            neighbor_mask = snapshot.mask_at(neighbor)
            if neighbor_mask is not None:
                if not neighbor_mask.has_connection(back):
                    continue
                step_cost = 0
            else:
                if not can_route(neighbor, back):
                    continue
                step_cost = 1

            next_state: _State = (neighbor, back)
            next_cost = cost + step_cost
            if next_cost < dist.get(next_state, next_cost + 1):
                dist[next_state] = next_cost
                if step_cost == 0:
                    queue.appendleft(next_state)
                else:
                    queue.append(next_state)

    return None


def check_reachability(start, goal, snapshot: GridSnapshot, pool=None) -> PathResult:
    """
    Decide whether Start and Goal are connected, and whether they still can be.

    Args:
        start: Start cell, or None if the level has none yet
        goal: Goal cell, or None
        snapshot: Current board
        pool: Remaining tiles (TilePool, definitions or shapes). None or an
            empty pool means tile supply is not constrained; deciding what an
            exhausted inventory means is left to the caller.

    Returns a PathResult. Missing Start/Goal, an empty snapshot, or Start/Goal
    outside the board give "possible, not yet connected" with no issues.
    """
    if start is None or goal is None or len(snapshot) == 0:
        return PathResult(path_possible=True, currently_connected=False)

    start, goal = GridCell(*start), GridCell(*goal)
    if not snapshot.contains(start) or not snapshot.contains(goal):
        return PathResult(path_possible=True, currently_connected=False)

    if goal in find_connected_region(start, snapshot):
        return PathResult(path_possible=True, currently_connected=True, tiles_needed=0)

    masks = pool_masks(pool) or None
    if masks is None:
        candidates = list(TILE_CONNECTIONS.values())
    else:
        candidates = list(dict.fromkeys(masks))

    needed = _min_tiles_to_connect(start, goal, snapshot, candidates)
    if needed is None:
        return PathResult(
            path_possible=False,
            currently_connected=False,
            issues=[f"No possible path from Start {start} to Goal {goal}"],
        )

    if masks is not None and needed > len(masks):
        return PathResult(
            path_possible=False,
            currently_connected=False,
            issues=[
                f"Path from Start {start} to Goal {goal} needs at least {needed} "
                f"more tiles but only {len(masks)} remain"
            ],
            tiles_needed=needed,
        )

    return PathResult(path_possible=True, currently_connected=False, tiles_needed=needed)
