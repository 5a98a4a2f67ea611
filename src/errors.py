"""Exceptions raised at the edges of the tile path engine.

The rules themselves never raise: placement problems come back as issues in a
ValidationResult and reachability problems in a PathResult. These exceptions
cover broken static data, direct misuse of the board, and bad level files.
"""


class TilePathError(Exception):
    """Base class for all tile path errors."""


class CatalogIntegrityError(TilePathError):
    """A shape's connector mask does not match its category."""


class BoardError(TilePathError):
    """A tile was put on a cell that cannot take it."""


class LevelConfigError(TilePathError):
    """A level file or text layout could not be loaded."""
