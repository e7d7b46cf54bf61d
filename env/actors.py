"""
Actors that live on a Level: the player and the wandering enemy.

Both share one shape: a grid position, a throttle timestamp and a short
trail of recently vacated cells that fades out over TRAIL_FADE_DURATION.
They differ only in who decides the step (key input vs. RandomWalkAgent)
and in their move delay.

Every time-dependent call takes ``now`` (ms) explicitly; nothing here
reads a clock.
"""

import logging

from agents.random_walker import RandomWalkAgent
from env.settings import (
    ENEMY_MOVE_DELAY, PLAYER_MOVE_DELAY, TRAIL_FADE_DURATION, TRAIL_OPACITY,
)

logger = logging.getLogger(__name__)

PLAYER_STEPS = frozenset({(-1, 0), (1, 0), (0, -1), (0, 1)})


class TrailEntry:
    __slots__ = ("pos", "created_at")

    def __init__(self, pos, created_at):
        self.pos        = pos
        self.created_at = created_at

    def age(self, now) -> float:
        return now - self.created_at

    def __eq__(self, other):
        return (
            isinstance(other, TrailEntry)
            and self.pos        == other.pos
            and self.created_at == other.created_at
        )

    def __repr__(self):
        return f"TrailEntry({self.pos}, {self.created_at})"


# ══════════════════════════════════════════════════════════════════════════════
#  Actor
# ══════════════════════════════════════════════════════════════════════════════
class Actor:
    def __init__(self, pos=(0, 0), move_delay=PLAYER_MOVE_DELAY,
                 fade_duration=TRAIL_FADE_DURATION):
        self.pos           = tuple(pos)
        self.move_delay    = move_delay
        self.fade_duration = fade_duration
        self.moved_at      = None    # None = never moved, so nothing to throttle
        self.trail: list   = []

    @property
    def row(self) -> int:
        return self.pos[0]

    @property
    def col(self) -> int:
        return self.pos[1]

    def set_cell(self, r: int, c: int):
        self.pos = (r, c)

    def cooling_down(self, now) -> bool:
        return self.moved_at is not None and now - self.moved_at < self.move_delay

    def _commit(self, target, now):
        self.trail.append(TrailEntry(self.pos, now))
        self.pos      = target
        self.moved_at = now

    def step(self, level, dr: int, dc: int, now) -> bool:
        """
        Try to move by (dr, dc) cells.

        Returns False, leaving every field untouched, when the actor is
        still cooling down, the target is off the grid or the target is a
        wall. Otherwise the old cell goes on the trail and the move lands.
        """
        if self.cooling_down(now):
            return False

        nr, nc = self.row + dr, self.col + dc
        if not level.in_bounds(nr, nc): return False
        if level.is_wall(nr, nc):       return False

        self._commit((nr, nc), now)
        return True

    # ── Trail ────────────────────────────────────────────────────────────────
    def prune_trail(self, now):
        self.trail = [e for e in self.trail if e.age(now) < self.fade_duration]

    def trail_opacities(self, now) -> list:
        """
        Drop expired entries and return ``[(pos, opacity), ...]`` oldest first.

        The last vacated cell starts at 50 % and the one before it at 25 %;
        older cells start at 0. Each then fades linearly to 0 over
        ``fade_duration``. Entries that end up invisible are left out.
        """
        self.prune_trail(now)
        n   = len(self.trail)
        out = []
        for i, entry in enumerate(self.trail):
            rank = n - 1 - i   # 0 = most recent
            base = TRAIL_OPACITY[rank] if rank < len(TRAIL_OPACITY) else 0.0
            opacity = base * (1 - entry.age(now) / self.fade_duration)
            if opacity > 0:
                out.append((entry.pos, opacity))
        return out


# ══════════════════════════════════════════════════════════════════════════════
#  Player / Enemy
# ══════════════════════════════════════════════════════════════════════════════
class Player(Actor):
    def try_move(self, level, dr: int, dc: int, now) -> bool:
        if (dr, dc) not in PLAYER_STEPS:
            raise ValueError(f"Player moves one orthogonal cell at a time, got ({dr}, {dc}).")
        moved = self.step(level, dr, dc, now)
        if not moved:
            logger.debug("Player move (%d, %d) from %s rejected", dr, dc, self.pos)
        return moved


class Enemy(Actor):
    def __init__(self, pos, agent=None, move_delay=ENEMY_MOVE_DELAY,
                 fade_duration=TRAIL_FADE_DURATION):
        super().__init__(pos, move_delay, fade_duration)
        self.agent = agent if agent is not None else RandomWalkAgent()

    def tick(self, level, now) -> bool:
        """
        Let the agent pick a jump once the cooldown has passed.

        When no jump is legal the enemy stays put and ``moved_at`` is not
        refreshed, so it tries again on the very next frame.
        """
        if self.cooling_down(now):
            return False

        action = self.agent.get_action(level, self.pos)
        if action is None:
            return False

        dr, dc = action
        self._commit((self.row + dr, self.col + dc), now)
        return True
