"""
Tests for the board, level loading and the game session.

Covers:
- Random-walk map generation
- Level configuration validation and YAML loading
- Placement flow (accept, reject, win, loss)
- Take-back and restart
- Command line replay
"""

import random
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.environment import Board, GameSession, GameStatus, LevelConfig, MapSettings, generate_random_walk
from src.errors import BoardError, LevelConfigError
from src.main import load_level, main
from src.tiles import Direction, GridCell, SpecialRole, TileDefinition, TileShape
from src.verifiers import parse_layout

LEVELS_DIR = Path(__file__).parent.parent / "levels"

CORRIDOR = [TileShape.DEAD_END_RIGHT, TileShape.STRAIGHT_HORIZONTAL, TileShape.DEAD_END_LEFT]


def make_session(layout="S.G", inventory=CORRIDOR, **kwargs):
    return GameSession.create(layout=layout, inventory=inventory, **kwargs)


def tile_of(session, shape):
    for tile in session.pool.available_tiles():
        if tile.shape == shape:
            return tile
    raise AssertionError(f"no {shape.value} left")


class TestMapGeneration:
    """Test random-walk maps."""

    def test_size_and_origin(self):
        cells = generate_random_walk(10, random.Random(0))
        assert len(cells) == 10
        assert len(set(cells)) == 10
        assert cells[0] == GridCell(0, 0)

    def test_cells_are_connected(self):
        """Every cell after the first touches an earlier one."""
        cells = generate_random_walk(25, random.Random(5))
        for i, cell in enumerate(cells[1:], start=1):
            assert any(cell.step(d) in cells[:i] for d in Direction)

    def test_single_cell(self):
        assert generate_random_walk(1) == [GridCell(0, 0)]

    def test_seed_is_reproducible(self):
        settings = MapSettings(level=3, seed=7)
        assert Board.generate(settings).cells == Board.generate(settings).cells
        assert len(Board.generate(settings).cells) == 7

    def test_resolve_size(self):
        assert MapSettings(level=0).resolve_size() == 4
        assert MapSettings(use_level_formula=False, size=3).resolve_size() == 3

    def test_invalid_settings(self):
        with pytest.raises(ValidationError):
            MapSettings(level=-1)
        with pytest.raises(ValidationError):
            MapSettings(use_level_formula=False, size=0)


class TestBoard:
    """Test direct board manipulation."""

    def test_place_and_remove(self):
        board = Board.create([(0, 0), (1, 0)])
        tile = TileDefinition(id="t", shape=TileShape.CROSS)
        board.place((0, 0), tile)
        assert board.tile_at((0, 0)) is tile
        assert board.snapshot().is_occupied((0, 0))
        assert board.remove((0, 0)) is tile
        assert board.occupied_count == 0

    def test_place_errors(self):
        board = Board.create([(0, 0)])
        tile = TileDefinition(id="t", shape=TileShape.CROSS)
        with pytest.raises(BoardError, match="not on the board"):
            board.place((3, 3), tile)
        board.place((0, 0), tile)
        with pytest.raises(BoardError, match="already holds t"):
            board.place((0, 0), tile)

    def test_layout_tiles_are_fixed(self):
        board = Board.from_layout(parse_layout("╺.."))
        assert board.tile_at((0, 0)).shape == TileShape.DEAD_END_RIGHT
        assert board.remove((0, 0)) is None
        board.place((1, 0), TileDefinition(id="t", shape=TileShape.STRAIGHT_HORIZONTAL))
        removed = board.clear_placed_tiles()
        assert [tile.id for tile in removed] == ["t"]
        assert board.is_occupied((0, 0))

    def test_closed_layout_tile_rejected(self):
        with pytest.raises(LevelConfigError):
            Board.from_layout(parse_layout("o."))


class TestLevelConfig:
    """Test level configuration models and loading."""

    def test_start_and_goal_must_differ(self):
        with pytest.raises(ValidationError):
            LevelConfig(start=(0, 0), goal=(0, 0))

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            LevelConfig(board="S.G")

    def test_unknown_shape_rejected(self):
        with pytest.raises(ValidationError):
            LevelConfig(inventory=["spiral"])

    def test_load_level(self, tmp_path):
        path = tmp_path / "level.yaml"
        path.write_text(
            "name: tiny\n"
            "layout: |\n"
            "  S.G\n"
            "inventory: [dead_end_right, straight_horizontal]\n"
            "moves:\n"
            "  - {shape: dead_end_right, x: 0, y: 0}\n",
            encoding="utf-8",
        )
        config = load_level(str(path))
        assert config.name == "tiny"
        assert config.inventory == [TileShape.DEAD_END_RIGHT, TileShape.STRAIGHT_HORIZONTAL]
        assert config.moves[0].position == GridCell(0, 0)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(LevelConfigError, match="not found"):
            load_level(str(tmp_path / "missing.yaml"))

    def test_load_bad_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("layout: [unclosed\n", encoding="utf-8")
        with pytest.raises(LevelConfigError, match="Invalid YAML"):
            load_level(str(path))

    def test_load_bad_level(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("inventory: [spiral]\n", encoding="utf-8")
        with pytest.raises(LevelConfigError, match="Invalid level"):
            load_level(str(path))


class TestSessionSetup:
    """Test building sessions from configuration."""

    def test_layout_markers(self):
        session = make_session()
        assert session.start == GridCell(0, 0)
        assert session.goal == GridCell(2, 0)
        assert session.pool.count == 3
        assert session.status == GameStatus.IN_PROGRESS
        assert session.role_of((0, 0)) == SpecialRole.START
        assert session.role_of((2, 0)) == SpecialRole.GOAL
        assert session.role_of((1, 0)) == SpecialRole.NONE

    def test_explicit_markers_win(self):
        session = make_session(layout="...", start=(2, 0), goal=(0, 0))
        assert session.start == GridCell(2, 0)
        assert session.goal == GridCell(0, 0)

    def test_generated_map(self):
        session = GameSession.create(map=MapSettings(level=2, seed=3), inventory=[TileShape.CROSS])
        assert len(session.board.cells) == 6
        assert session.start == GridCell(0, 0)
        assert session.goal in session.board.cells
        assert session.goal != session.start

    def test_goal_off_map_falls_back(self):
        session = GameSession.create(map=MapSettings(level=1, seed=3), goal=(99, 99))
        assert session.goal in session.board.cells
        assert session.goal != GridCell(99, 99)

    def test_generated_goal_on_default_start(self):
        """Start defaults to the origin, so a Goal there collides with it."""
        with pytest.raises(LevelConfigError, match="same cell"):
            GameSession.create(map=MapSettings(level=1, seed=1), goal=(0, 0), inventory=[TileShape.CROSS])

    def test_layout_start_marker_on_goal(self):
        with pytest.raises(LevelConfigError, match="same cell"):
            make_session(layout="S..", goal=(0, 0))


class TestPlacementFlow:
    """Test placing tiles through the session."""

    def test_win(self):
        session = make_session()
        first = session.place(tile_of(session, TileShape.DEAD_END_RIGHT), (0, 0))
        assert first.accepted is True
        assert first.status == GameStatus.IN_PROGRESS
        assert first.path.tiles_needed == 2

        session.place(tile_of(session, TileShape.STRAIGHT_HORIZONTAL), (1, 0))
        last = session.place(tile_of(session, TileShape.DEAD_END_LEFT), (2, 0))
        assert last.accepted is True
        assert last.status == GameStatus.WON
        assert session.status == GameStatus.WON
        assert session.pool.is_empty
        assert len(session.history) == 3

    def test_rejection_leaves_state(self):
        session = make_session()
        session.place(tile_of(session, TileShape.DEAD_END_RIGHT), (0, 0))
        outcome = session.place(tile_of(session, TileShape.DEAD_END_LEFT), (2, 0))
        assert outcome.accepted is False
        assert outcome.validation.codes == ["NO_CONNECTION"]
        assert outcome.path is None
        assert session.pool.count == 2
        assert not session.board.is_occupied((2, 0))

    def test_dead_end_into_goal_side_rejected(self):
        """Locally fine, but it seals the corridor before the goal."""
        session = make_session()
        session.place(tile_of(session, TileShape.DEAD_END_RIGHT), (0, 0))
        outcome = session.place(tile_of(session, TileShape.DEAD_END_LEFT), (1, 0))
        assert outcome.accepted is False
        assert set(outcome.validation.codes) == {"PATH_BLOCKED"}

    def test_path_blocked_rejected(self):
        session = make_session(inventory=[TileShape.DEAD_END_UP] + CORRIDOR)
        outcome = session.place(tile_of(session, TileShape.DEAD_END_UP), (0, 0))
        assert outcome.accepted is False
        assert outcome.validation.codes[0] == "PATH_BLOCKED"
        assert session.pool.count == 4

    def test_loss_without_global_validation(self):
        session = make_session(inventory=[TileShape.DEAD_END_UP] + CORRIDOR, global_validation=False)
        outcome = session.place(tile_of(session, TileShape.DEAD_END_UP), (0, 0))
        assert outcome.accepted is True
        assert outcome.status == GameStatus.LOST
        assert outcome.path.path_possible is False

        after = session.place(tile_of(session, TileShape.STRAIGHT_HORIZONTAL), (1, 0))
        assert after.validation.codes == ["ROUND_OVER"]

    def test_loss_when_pool_runs_out(self):
        session = make_session(layout="S..G", inventory=[TileShape.DEAD_END_RIGHT])
        outcome = session.place(tile_of(session, TileShape.DEAD_END_RIGHT), (0, 0))
        assert outcome.accepted is True
        assert outcome.path.path_possible is True
        assert outcome.status == GameStatus.LOST

    def test_out_of_bounds(self):
        session = make_session()
        outcome = session.place(tile_of(session, TileShape.DEAD_END_RIGHT), (5, 5))
        assert outcome.validation.codes == ["OUT_OF_BOUNDS"]
        assert session.pool.count == 3

    def test_tile_not_in_pool(self):
        session = make_session()
        stranger = TileDefinition(id="dead_end_right_0", shape=TileShape.DEAD_END_RIGHT)
        outcome = session.place(stranger, (0, 0))
        assert outcome.validation.codes == ["TILE_UNAVAILABLE"]
        assert session.board.occupied_count == 0

    def test_occupied_fixed_tile(self):
        session = make_session(layout="╺.G", start=(0, 0))
        outcome = session.place(tile_of(session, TileShape.STRAIGHT_HORIZONTAL), (0, 0))
        assert outcome.validation.codes == ["OCCUPIED"]

    def test_preview(self):
        session = make_session()
        tile = tile_of(session, TileShape.DEAD_END_RIGHT)
        assert session.preview(tile, (0, 0)) == (True, "Valid placement")
        assert session.preview(tile, (9, 9)) == (False, "Position outside map bounds")


class TestUndo:
    """Test take-back and restart."""

    def test_take_back(self):
        session = make_session()
        session.place(tile_of(session, TileShape.DEAD_END_RIGHT), (0, 0))
        straight = tile_of(session, TileShape.STRAIGHT_HORIZONTAL)
        session.place(straight, (1, 0))

        assert session.take_back((1, 0)) is straight
        assert session.pool.contains(straight)
        assert not session.board.is_occupied((1, 0))
        assert session.take_back((1, 0)) is None

    def test_take_back_fixed_tile(self):
        session = make_session(layout="╺.G", start=(0, 0))
        assert session.take_back((0, 0)) is None
        assert session.board.is_occupied((0, 0))

    def test_restart(self):
        session = make_session(
            layout="╺.G", start=(0, 0), inventory=[TileShape.STRAIGHT_HORIZONTAL, TileShape.DEAD_END_LEFT]
        )
        original = session.pool.available_tiles()
        assert session.place(original[0], (1, 0)).accepted is True
        session.restart()
        assert session.pool.available_tiles() == original
        assert session.history == []
        assert session.status == GameStatus.IN_PROGRESS
        assert session.board.is_occupied((0, 0))
        assert not session.board.is_occupied((1, 0))

    def test_get_state(self):
        session = make_session()
        session.place(tile_of(session, TileShape.DEAD_END_RIGHT), (0, 0))
        state = session.get_state()
        assert state["status"] == "in_progress"
        assert state["tiles_placed"] == 1
        assert state["moves_accepted"] == 1
        assert state["pool"]["tiles_remaining"] == 2


class TestCommandLine:
    """Test replaying a level file from the command line."""

    def test_replay_corridor(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["tile-path", str(LEVELS_DIR / "corridor.yaml"), "--show-board"])
        assert main() == 0
        out = capsys.readouterr().out
        assert "3. cross at (2, 2): rejected" in out
        assert "╺━━╸" in out
        assert "Status: won" in out
        assert "Tiles left: 2" in out

    def test_missing_level(self, monkeypatch, capsys, tmp_path):
        monkeypatch.setattr(sys, "argv", ["tile-path", str(tmp_path / "nope.yaml")])
        assert main() == 1
        assert "Error loading level" in capsys.readouterr().err
