import logging
import random

logger = logging.getLogger(__name__)

STEP = 2   # cells per enemy move

# Eight directions: orthogonal first, then diagonals, each scaled to STEP cells.
ENEMY_MOVES = (
    (-STEP, 0), (STEP, 0), (0, -STEP), (0, STEP),
    (-STEP, -STEP), (-STEP, STEP), (STEP, -STEP), (STEP, STEP),
)

# ======================================================================
#  AGENTE ALEATÓRIO
# ======================================================================
class RandomWalkAgent:
    """
    Picks the enemy's next jump without any planning.

    Every call shuffles the eight candidate jumps uniformly and returns the
    first one that lands inside the grid and off a wall. The random source
    only needs a ``shuffle`` method, so tests can pass a seeded
    ``random.Random`` or a scripted stand-in.
    """

    def __init__(self, rng=None, moves=ENEMY_MOVES):
        self.rng   = rng if rng is not None else random.Random()
        self.moves = tuple(moves)

    def candidates(self) -> list:
        shuffled = list(self.moves)
        self.rng.shuffle(shuffled)
        return shuffled

    def get_action(self, level, pos):
        """Return a legal (dr, dc) from *pos*, or None when every jump is blocked."""
        r, c = pos
        for dr, dc in self.candidates():
            if level.is_walkable(r + dr, c + dc):
                return dr, dc
        logger.debug("Enemy at %s has no legal jump", pos)
        return None
