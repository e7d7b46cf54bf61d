"""
Session controller: the live state of one play-through.

Owns the list of Levels, the active level index, the Player, the Enemy of
the active level (None when the level has no spawn marker) and the
game-over flag. The frame loop feeds it ``tick(now)`` once per frame and
``move_player(dr, dc, now)`` for every direction key; the renderer only
reads from it.

States
------
  playing  --player reaches goal-->   playing (next level, wraps to 0)
  playing  --player on enemy cell-->  game over (actors frozen)
  game over --Redo-->                 a brand-new Session (see main.py)
"""

import logging
import random

from agents.random_walker import RandomWalkAgent
from env.actors import Enemy, Player
from env.level import LevelFormatError
from env.settings import FALLBACK_START, TS

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, levels, tile_size=TS, rng=None, on_resize=None, start_level=0):
        if not levels:
            raise LevelFormatError("A session needs at least one level.")
        self.levels    = list(levels)
        self.ts        = tile_size
        self.rng       = rng if rng is not None else random.Random()
        self.on_resize = on_resize

        self.level_index = 0
        self.is_over     = False
        self.player      = Player()
        self.enemy       = None

        self.load_level(start_level)

    # ── Queries ──────────────────────────────────────────────────────────────
    @property
    def level(self):
        return self.levels[self.level_index]

    @property
    def levels_count(self) -> int:
        return len(self.levels)

    def pixel_size(self) -> tuple:
        return self.level.pixel_width(self.ts), self.level.pixel_height(self.ts)

    def hud_text(self) -> str:
        return f"Level {self.level_index + 1}/{self.levels_count} — WASD/Arrows to move - Avoid the Enemy"

    # ── Level switching ──────────────────────────────────────────────────────
    def load_level(self, idx: int):
        if not 0 <= idx < self.levels_count:
            raise IndexError(f"Level {idx + 1} not found. Available: 1-{self.levels_count}")
        self.level_index = idx
        level = self.level

        start = level.start if level.start is not None else FALLBACK_START
        self.player.set_cell(*start)

        if level.enemy_spawn is not None:
            self.enemy = Enemy(level.enemy_spawn, agent=RandomWalkAgent(self.rng))
        else:
            self.enemy = None

        self.is_over = False
        logger.info("Loaded level %d/%d (%dx%d), player at %s, enemy at %s",
                    idx + 1, self.levels_count, level.rows(), level.cols(),
                    self.player.pos, level.enemy_spawn)

        if self.on_resize is not None:
            self.on_resize(*self.pixel_size())

    def next_level(self):
        self.load_level((self.level_index + 1) % self.levels_count)

    # ── Per-event / per-frame updates ────────────────────────────────────────
    def move_player(self, dr: int, dc: int, now) -> bool:
        if self.is_over:
            return False

        moved = self.player.try_move(self.level, dr, dc, now)
        if moved and self.level.is_goal(*self.player.pos):
            logger.info("Goal reached on level %d", self.level_index + 1)
            self.next_level()
        return moved

    def tick(self, now):
        if not self.is_over and self.enemy is not None:
            self.enemy.tick(self.level, now)
            if self.player.pos == self.enemy.pos:
                self.is_over = True
                logger.info("Game over: caught at %s on level %d",
                            self.player.pos, self.level_index + 1)

        self.player.prune_trail(now)
        if self.enemy is not None:
            self.enemy.prune_trail(now)
