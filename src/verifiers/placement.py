"""
Placement validation for tile path boards.

Validates a single candidate tile against its four neighbours:
1. The target cell must not already be occupied
2. No joint conflicts (one side open toward the other, the other side closed)
3. At least one mutual connection, unless this is the first tile on the board

Empty and off-board neighbours never constrain a placement, so connectors may
dangle toward the frontier.
"""

from enum import Enum
from typing import List, Optional, Tuple

from ..tiles.catalog import EMPTY_MASK, ConnectorMask, Direction, describe, opposite
from ..tiles.models import GridCell
from .grid import GridSnapshot, Occupant, as_mask
from .models import PlacementIssue, ValidationResult
from .reachability import check_reachability, pool_masks


class Joint(Enum):
    """How a candidate meets one occupied neighbour."""
    NONE = "none"  # both sides closed
    MUTUAL = "mutual"  # both sides open
    CANDIDATE_OPEN = "candidate_open"  # candidate open, neighbour closed
    NEIGHBOR_OPEN = "neighbor_open"  # neighbour open, candidate closed


def classify_joint(mask: ConnectorMask, neighbor_mask: ConnectorMask, direction: Direction) -> Joint:
    """Classify the edge between `mask` and the neighbour lying on `direction`."""
    wants = mask.has_connection(direction)
    neighbor_wants = neighbor_mask.has_connection(opposite(direction))
    if wants and neighbor_wants:
        return Joint.MUTUAL
    if wants:
        return Joint.CANDIDATE_OPEN
    if neighbor_wants:
        return Joint.NEIGHBOR_OPEN
    return Joint.NONE


def _candidate_mask(candidate: Occupant) -> ConnectorMask:
    mask = as_mask(candidate)
    return mask if mask is not None else EMPTY_MASK


def _is_first_tile(position: GridCell, snapshot: GridSnapshot) -> bool:
    return snapshot.occupied_count(excluding=position) == 0


def validate_placement(position, candidate: Occupant, snapshot: GridSnapshot) -> ValidationResult:
    """
    Validate placing `candidate` (a shape or connector mask) at `position`.

    Returns a ValidationResult with:
    - valid: True if the placement breaks no rule
    - errors: issues in discovery order (Up, Right, Down, Left, then the
      mutual-connection rule). An occupied target yields a single OCCUPIED
      issue and nothing else is checked.
    """
    position = GridCell(*position)
    mask = _candidate_mask(candidate)
    label = describe(mask)

    if snapshot.is_occupied(position):
        return ValidationResult(
            valid=False,
            errors=[PlacementIssue(
                code="OCCUPIED",
                message=(
                    f"Position {position} is already occupied by "
                    f"{describe(snapshot.mask_at(position))}"
                ),
                position=position,
            )],
        )

    errors: List[PlacementIssue] = []
    mutual_connections = 0

    for direction in Direction:
        neighbor_pos = position.step(direction)
        neighbor_mask = snapshot.mask_at(neighbor_pos)
        if neighbor_mask is None:
            continue  # empty or off-board: open ends are allowed

        joint = classify_joint(mask, neighbor_mask, direction)
        neighbor_label = describe(neighbor_mask)

        if joint is Joint.CANDIDATE_OPEN:
            errors.append(PlacementIssue(
                code="CONNECTION_CONFLICT",
                message=(
                    f"Connection conflict: {label} at {position} wants to connect "
                    f"{direction.value}, but {neighbor_label} at {neighbor_pos} "
                    f"has no connection back"
                ),
                position=neighbor_pos,
                direction=direction,
            ))
        elif joint is Joint.NEIGHBOR_OPEN:
            errors.append(PlacementIssue(
                code="NEIGHBOR_EXPECTS_CONNECTION",
                message=(
                    f"Connection conflict: {neighbor_label} at {neighbor_pos} expects "
                    f"connection from {label} at {position}, but tile has no "
                    f"connection {direction.value}"
                ),
                position=neighbor_pos,
                direction=direction,
            ))
        elif joint is Joint.MUTUAL:
            mutual_connections += 1

    if mutual_connections == 0 and not _is_first_tile(position, snapshot):
        errors.append(PlacementIssue(
            code="NO_CONNECTION",
            message=(
                f"No valid connections: {label} at {position} has no valid "
                f"connections to existing network"
            ),
            position=position,
        ))

    return ValidationResult(valid=len(errors) == 0, errors=errors)


def can_place(position, candidate: Occupant, snapshot: GridSnapshot) -> bool:
    """Same rules as validate_placement, stopping at the first failure."""
    position = GridCell(*position)
    mask = _candidate_mask(candidate)

    if snapshot.is_occupied(position):
        return False

    has_mutual = False
    for direction in Direction:
        neighbor_mask = snapshot.mask_at(position.step(direction))
        if neighbor_mask is None:
            continue
        joint = classify_joint(mask, neighbor_mask, direction)
        if joint in (Joint.CANDIDATE_OPEN, Joint.NEIGHBOR_OPEN):
            return False
        if joint is Joint.MUTUAL:
            has_mutual = True

    return has_mutual or _is_first_tile(position, snapshot)


def can_place_quick(position, candidate: Occupant, snapshot: GridSnapshot) -> Tuple[bool, str]:
    """
    Hover feedback: verdict plus the first reason it fails.

    Unlike validate_placement this also rejects cells outside the playable
    area, since a hovered tile can be over anything.
    """
    position = GridCell(*position)
    mask = _candidate_mask(candidate)

    if not snapshot.contains(position):
        return False, "Position outside map bounds"
    if snapshot.is_occupied(position):
        return False, "Position already occupied"

    has_mutual = False
    for direction in Direction:
        neighbor_mask = snapshot.mask_at(position.step(direction))
        if neighbor_mask is None:
            continue
        joint = classify_joint(mask, neighbor_mask, direction)
        if joint is Joint.CANDIDATE_OPEN:
            return False, f"Connection conflict with {describe(neighbor_mask)} to the {direction.value}"
        if joint is Joint.NEIGHBOR_OPEN:
            return False, f"{describe(neighbor_mask)} to the {direction.value} expects connection"
        if joint is Joint.MUTUAL:
            has_mutual = True

    if not has_mutual and not _is_first_tile(position, snapshot):
        return False, "No valid connections to existing network"
    return True, "Valid placement"


def _pool_after_placing(pool, mask: ConnectorMask) -> Optional[List[ConnectorMask]]:
    """The pool left once one tile with `mask` has been used."""
    remaining = pool_masks(pool)
    if remaining is None:
        return None
    if mask in remaining:
        remaining.remove(mask)
    return remaining


def validate_placement_with_path(
    position,
    candidate: Occupant,
    snapshot: GridSnapshot,
    start=None,
    goal=None,
    pool=None,
) -> ValidationResult:
    """
    Validate a placement, then check Start can still reach Goal afterwards.

    The local rules run first; the global check is skipped when they fail or
    when Start/Goal are not both defined. `pool` holds the tiles still
    available, including the one being placed. When it is None, tile supply
    is treated as unlimited.
    """
    result = validate_placement(position, candidate, snapshot)
    if not result.valid or start is None or goal is None:
        return result

    mask = _candidate_mask(candidate)
    simulated = snapshot.with_placement(position, mask)
    path = check_reachability(start, goal, simulated, _pool_after_placing(pool, mask))
    if path.path_possible:
        return result

    position = GridCell(*position)
    errors = [PlacementIssue(
        code="PATH_BLOCKED",
        message=(
            f"Global validation failed: No possible path from Start to Goal "
            f"after placing {position}"
        ),
        position=position,
    )]
    errors.extend(
        PlacementIssue(code="PATH_BLOCKED", message=issue, position=position)
        for issue in path.issues
    )
    return ValidationResult(valid=False, errors=errors)


def can_place_with_path(
    position,
    candidate: Occupant,
    snapshot: GridSnapshot,
    start=None,
    goal=None,
    pool=None,
) -> bool:
    """Boolean twin of validate_placement_with_path."""
    if not can_place(position, candidate, snapshot):
        return False
    if start is None or goal is None:
        return True
    mask = _candidate_mask(candidate)
    simulated = snapshot.with_placement(position, mask)
    return check_reachability(start, goal, simulated, _pool_after_placing(pool, mask)).path_possible
