"""
Grid model for the maze.

A Level is one tile grid taken from the level set. It records where the
player starts and where the enemy spawns, turns both markers into plain
floor, and answers the bounds / wall / goal questions the actors need
when they try to move. Nothing in here draws or reads the clock.

Tile legend (the values stored in levels.json):
    0 = floor
    1 = wall
    2 = start
    3 = goal
    4 = enemy spawn   (load-time marker only)
"""

import json
import logging
from enum import IntEnum

logger = logging.getLogger(__name__)


class Tile(IntEnum):
    FLOOR = 0
    WALL  = 1
    START = 2
    GOAL  = 3
    ENEMY = 4


TILE_VALUES = frozenset(t.value for t in Tile)


class LevelFormatError(ValueError):
    """Raised when level data is not a usable set of rectangular grids."""


def copy_grid(grid) -> list:
    # New outer list and new rows, so normalising a Level never touches the asset.
    return [list(row) for row in grid]


def validate_grid(grid, index: int = 0):
    if not isinstance(grid, list) or not grid:
        raise LevelFormatError(f"Level {index + 1}: grid must be a non-empty list of rows.")
    width = None
    for r, row in enumerate(grid):
        if not isinstance(row, list) or not row:
            raise LevelFormatError(f"Level {index + 1}: row {r} must be a non-empty list.")
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise LevelFormatError(
                f"Level {index + 1}: row {r} has {len(row)} cells, expected {width}.")
        for c, v in enumerate(row):
            # bool is an int subclass; true/false in the JSON is still a typo.
            if isinstance(v, bool) or not isinstance(v, int) or v not in TILE_VALUES:
                raise LevelFormatError(
                    f"Level {index + 1}: invalid tile {v!r} at ({r}, {c}).")


# ══════════════════════════════════════════════════════════════════════════════
#  Level
# ══════════════════════════════════════════════════════════════════════════════
class Level:
    def __init__(self, grid):
        self.grid = copy_grid(grid)

        self.start       = self._find(Tile.START)
        self.enemy_spawn = self._find(Tile.ENEMY)

        # Both markers behave (and draw) like floor once they have been read.
        for marker in (self.start, self.enemy_spawn):
            if marker is not None:
                r, c = marker
                self.grid[r][c] = Tile.FLOOR

    # ── Size helpers ─────────────────────────────────────────────────────────
    def rows(self) -> int:
        return len(self.grid)

    def cols(self) -> int:
        return len(self.grid[0])

    def pixel_width(self, ts: int) -> int:
        return self.cols() * ts

    def pixel_height(self, ts: int) -> int:
        return self.rows() * ts

    # ── Semantic helpers ─────────────────────────────────────────────────────
    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows() and 0 <= c < self.cols()

    def tile_at(self, r: int, c: int) -> Tile:
        """Caller checks in_bounds() first."""
        return Tile(self.grid[r][c])

    def is_wall(self, r: int, c: int) -> bool:
        return self.tile_at(r, c) == Tile.WALL

    def is_goal(self, r: int, c: int) -> bool:
        return self.tile_at(r, c) == Tile.GOAL

    def is_enemy_spawn(self, r: int, c: int) -> bool:
        # The spawn cell already reads as floor, so compare against the stored coordinate.
        return self.enemy_spawn == (r, c)

    def is_walkable(self, r: int, c: int) -> bool:
        return self.in_bounds(r, c) and not self.is_wall(r, c)

    def _find(self, tile: Tile):
        """Row-major scan; the first matching cell wins."""
        for r, row in enumerate(self.grid):
            for c, v in enumerate(row):
                if v == tile:
                    return (r, c)
        return None

    def __repr__(self):
        return f"Level({self.rows()}x{self.cols()}, start={self.start}, enemy={self.enemy_spawn})"


# ══════════════════════════════════════════════════════════════════════════════
#  Loading
# ══════════════════════════════════════════════════════════════════════════════
def load_levels(path: str) -> list:
    """
    Read a level set from a JSON file.

    Expected schema
    ---------------
    {
        "levels": [
            [[1, 1, 1], [1, 2, 1], ...],   # one rectangular int grid per level
            ...
        ]
    }

    Returns the raw grids, untouched, so callers can build fresh Level
    objects from them as many times as they like (e.g. on restart).
    """
    with open(path, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise LevelFormatError(f"{path}: not valid JSON ({exc}).") from exc

    if not isinstance(data, dict) or not isinstance(data.get("levels"), list) or not data["levels"]:
        raise LevelFormatError(f"{path}: expected an object with a non-empty 'levels' list.")

    grids = data["levels"]
    for i, grid in enumerate(grids):
        validate_grid(grid, i)
    logger.debug("Read %d level(s) from %s", len(grids), path)
    return grids


def build_levels(grids) -> list:
    """Validate *grids* and turn each one into a Level built from a copy."""
    if not grids:
        raise LevelFormatError("A level set needs at least one level.")
    levels = []
    for i, grid in enumerate(grids):
        validate_grid(grid, i)
        levels.append(Level(grid))
    return levels
