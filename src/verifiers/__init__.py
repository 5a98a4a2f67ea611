"""Placement and reachability verification for tile path boards."""

from .models import PlacementIssue, ValidationResult, PathResult
from .grid import GridSnapshot, render_snapshot
from .parsing import ParsedLayout, parse_layout
from .placement import (
    Joint,
    classify_joint,
    validate_placement,
    can_place,
    can_place_quick,
    validate_placement_with_path,
    can_place_with_path,
)
from .reachability import check_reachability, find_connected_region, pool_masks

__all__ = [
    # Models
    "PlacementIssue",
    "ValidationResult",
    "PathResult",
    # Grid utilities
    "GridSnapshot",
    "render_snapshot",
    "ParsedLayout",
    "parse_layout",
    # Placement rules
    "Joint",
    "classify_joint",
    "validate_placement",
    "can_place",
    "can_place_quick",
    "validate_placement_with_path",
    "can_place_with_path",
    # Reachability
    "check_reachability",
    "find_connected_region",
    "pool_masks",
]
