"""
Tile Maze
=========
Walk the blue square from the start tile to the orange goal on every level
while the orange enemy jumps around at random. Touching the enemy ends the
run; click Redo on the popup to start over from level 1.

Controls
--------
- Arrow keys or WASD: move one tile
- Mouse click on Redo: restart after a game over
- Esc or closing the window: quit

Run from the repository root:
    python main.py
    python main.py --levels my_levels.json --tile-size 64 --seed 7
"""

import argparse
import logging
import random
import sys

import pygame

from env.level import LevelFormatError, build_levels, load_levels
from env.renderer import Renderer, redo_button_rect
from env.session import Session
from env.settings import CAPTION, FPS, LEVELS_PATH, TS

logger = logging.getLogger(__name__)

# (dr, dc) for each movement key: arrows + WASD
KEY_DIRECTIONS = {
    pygame.K_LEFT:  (0, -1), pygame.K_a: (0, -1),
    pygame.K_RIGHT: (0, 1),  pygame.K_d: (0, 1),
    pygame.K_UP:    (-1, 0), pygame.K_w: (-1, 0),
    pygame.K_DOWN:  (1, 0),  pygame.K_s: (1, 0),
}


def direction_for_key(key):
    """Return the (dr, dc) step for *key*, or None when it is not a movement key."""
    return KEY_DIRECTIONS.get(key)


# ======================================================================
#  LOOP DO JOGO
# ======================================================================
class MazeGame:
    def __init__(self, grids, tile_size=TS, seed=None, start_level=0):
        # Raw grids are kept pristine; every (re)start builds Levels from copies.
        self.grids       = grids
        self.ts          = tile_size
        self.seed        = seed
        self.start_level = start_level

        pygame.init()
        pygame.display.set_caption(CAPTION)
        self.timer    = pygame.time.Clock()
        self.screen   = None
        self.renderer = None
        self.session  = None
        self.restart()

    def _resize(self, width, height):
        self.screen = pygame.display.set_mode((width, height))
        if self.renderer is not None:
            self.renderer.screen = self.screen

    def restart(self):
        """Throw away all state and start again from the first chosen level."""
        rng = random.Random(self.seed)
        self.session = Session(build_levels(self.grids), self.ts, rng=rng,
                               on_resize=self._resize, start_level=self.start_level)
        if self.renderer is None:
            self.renderer = Renderer(self.screen, self.ts)
        logger.info("Session started")

    def handle_event(self, event, now) -> bool:
        """Apply one pygame event. Returns False when the game should quit."""
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            step = direction_for_key(event.key)
            if step is not None and not self.session.is_over:
                self.session.move_player(*step, now)
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.session.is_over:
            if redo_button_rect(*self.screen.get_size()).collidepoint(event.pos):
                self.restart()
        return True

    def run(self):
        running = True
        while running:
            self.timer.tick(FPS)
            now = pygame.time.get_ticks()

            for event in pygame.event.get():
                if not self.handle_event(event, now):
                    running = False

            self.session.tick(now)
            self.renderer.draw(self.session, now, pygame.mouse.get_pos())
            pygame.display.flip()

        pygame.quit()


def positive_int(text):
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a whole number of at least 1, got {text!r}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Tile-based maze with a wandering enemy.")
    parser.add_argument("--levels", default=LEVELS_PATH, help="level set JSON file")
    parser.add_argument("--tile-size", type=positive_int, default=TS, help="pixels per tile")
    parser.add_argument("--seed", type=int, default=None, help="seed for the enemy's moves")
    parser.add_argument("--start-level", type=int, default=1, help="1-based level to start on")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        grids = load_levels(args.levels)
    except FileNotFoundError:
        print(f"Error: level file '{args.levels}' was not found.")
        sys.exit(1)
    except LevelFormatError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    if not 1 <= args.start_level <= len(grids):
        print(f"Level {args.start_level} not found. Available: 1-{len(grids)}")
        sys.exit(1)

    print("=" * 50)
    print(f" {CAPTION} ({len(grids)} levels)")
    print("=" * 50)
    MazeGame(grids, args.tile_size, args.seed, args.start_level - 1).run()


if __name__ == "__main__":
    main()
