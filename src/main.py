"""
Main entry point for replaying a tile path level.

Usage:
    python -m src.main level.yaml
    python -m src.main level.yaml --verbose --show-board
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .environment import GameSession, LevelConfig, PlacementOutcome
from .errors import LevelConfigError, TilePathError
from .tiles.models import TileDefinition
from .utils.logger_config import configure_logging
from .verifiers.grid import render_snapshot


def load_level(config_path: str) -> LevelConfig:
    """Load a level configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise LevelConfigError(f"Level file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return LevelConfig(**data)
    except yaml.YAMLError as e:
        raise LevelConfigError(f"Invalid YAML in {config_path}: {e}") from e
    except (TypeError, ValidationError) as e:
        raise LevelConfigError(f"Invalid level in {config_path}: {e}") from e


def _pick_tile(session: GameSession, shape) -> Optional[TileDefinition]:
    for tile in session.pool.available_tiles():
        if tile.shape == shape:
            return tile
    return None


def _print_outcome(number: int, outcome: PlacementOutcome) -> None:
    verdict = "ok" if outcome.accepted else "rejected"
    print(f"{number:>3}. {outcome.shape.value} at {outcome.position}: {verdict}")
    for issue in outcome.validation.issues:
        print(f"       - {issue}")


def main():
    parser = argparse.ArgumentParser(
        description="Replay the moves of a tile path level and report the result",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example level.yaml:
  layout: |
    S..
    ..G
  inventory: [corner_down_right, straight_horizontal, corner_up_left]
  moves:
    - {shape: corner_down_right, x: 0, y: 1}
        """
    )
    parser.add_argument(
        "config",
        help="Path to YAML level file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every placement decision"
    )
    parser.add_argument(
        "--show-board",
        action="store_true",
        help="Print the board after the last move"
    )
    parser.add_argument(
        "--no-global-validation",
        action="store_true",
        help="Only apply the local placement rules"
    )

    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else "WARNING")

    try:
        config = load_level(args.config)
        if args.no_global_validation:
            config = config.model_copy(update={"global_validation": False})
        session = GameSession.create(config=config)
    except TilePathError as e:
        print(f"Error loading level: {e}", file=sys.stderr)
        return 1

    for number, move in enumerate(config.moves, start=1):
        tile = _pick_tile(session, move.shape)
        if tile is None:
            print(f"{number:>3}. {move.shape.value} at {move.position}: no such tile left in the pool")
            continue
        _print_outcome(number, session.place(tile, move.position))

    if args.show_board:
        print()
        print(render_snapshot(session.board.snapshot(), session.start, session.goal))

    path = session.check_reachability()
    status = session.check_status()

    print()
    print("=== Level Summary ===")
    print(f"Status: {status.value}")
    print(f"Tiles left: {session.pool.count}")
    if path.tiles_needed is not None and not path.currently_connected:
        print(f"Tiles still needed: at least {path.tiles_needed}")
    for issue in path.issues:
        print(f"Issue: {issue}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
