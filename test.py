import json
import random
from collections import Counter

import pytest

from agents.random_walker import ENEMY_MOVES, RandomWalkAgent
from env.actors import Actor, Enemy, Player, TrailEntry
from env.level import Level, LevelFormatError, Tile, build_levels, load_levels
from env.settings import ENEMY_MOVE_DELAY, LEVELS_PATH, PLAYER_MOVE_DELAY, TRAIL_FADE_DURATION

# ======================================================================
# FIXTURES
# ======================================================================

@pytest.fixture
def mini_grid():
    """
    3x3 maze from the walkthrough scenario.
    2 = start (0,0), 1 = wall, 3 = goal (2,2)
    """
    return [
        [2, 0, 0],
        [1, 0, 1],
        [0, 0, 3],
    ]


@pytest.fixture
def open_level():
    """7x7 floor with no markers, big enough to walk around freely."""
    return Level([[0] * 7 for _ in range(7)])


class FixedAgent:
    """Always proposes the same jump (or None)."""
    def __init__(self, action):
        self.action = action
        self.calls  = 0

    def get_action(self, level, pos):
        self.calls += 1
        return self.action

# ======================================================================
# LEVEL
# ======================================================================

def test_markers_found_and_normalised():
    grid  = [[1, 1, 1, 1], [1, 2, 4, 1], [1, 0, 3, 1], [1, 1, 1, 1]]
    level = Level(grid)

    assert level.start == (1, 1)
    assert level.enemy_spawn == (1, 2)
    assert level.tile_at(1, 1) == Tile.FLOOR
    assert level.tile_at(1, 2) == Tile.FLOOR
    assert level.is_enemy_spawn(1, 2)
    assert not level.is_enemy_spawn(1, 1)
    assert level.is_goal(2, 2)
    assert level.is_wall(0, 0)


def test_source_grid_is_not_mutated(mini_grid):
    original = [list(row) for row in mini_grid]
    Level(mini_grid)
    assert mini_grid == original


def test_first_marker_in_row_major_order_wins():
    level = Level([[0, 0, 4], [2, 4, 2]])
    assert level.start == (1, 0)
    assert level.enemy_spawn == (0, 2)
    # Only the recorded cells are normalised; the duplicates stay as they were.
    assert level.grid[1][2] == Tile.START
    assert level.grid[1][1] == Tile.ENEMY


def test_missing_markers_are_none():
    level = Level([[0, 1], [3, 0]])
    assert level.start is None
    assert level.enemy_spawn is None
    assert not level.is_enemy_spawn(0, 0)


def test_bounds_and_pixel_size(mini_grid):
    level = Level(mini_grid)
    assert level.in_bounds(0, 0) and level.in_bounds(2, 2)
    assert not level.in_bounds(-1, 0)
    assert not level.in_bounds(0, 3)
    assert not level.in_bounds(3, 0)
    assert (level.pixel_width(120), level.pixel_height(120)) == (360, 360)


@pytest.mark.parametrize("grids", [
    [],
    [[]],
    [[[0, 0], [0]]],
    [[[0, 5]]],
    [[[0, "1"]]],
    [[[0, True]]],
])
def test_build_levels_rejects_malformed_grids(grids):
    with pytest.raises(LevelFormatError):
        build_levels(grids)


def test_load_levels_reads_json(tmp_path, mini_grid):
    path = tmp_path / "levels.json"
    path.write_text(json.dumps({"levels": [mini_grid, mini_grid]}), encoding="utf-8")

    grids = load_levels(str(path))
    assert grids == [mini_grid, mini_grid]
    levels = build_levels(grids)
    assert [lv.start for lv in levels] == [(0, 0), (0, 0)]
    # Building Levels leaves the loaded data reusable for a restart.
    assert grids[0][0][0] == Tile.START


@pytest.mark.parametrize("payload", ['{"levels": []}', '{"grids": [[[0]]]}', '[1, 2]', '{not json'])
def test_load_levels_rejects_bad_documents(tmp_path, payload):
    path = tmp_path / "levels.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(LevelFormatError):
        load_levels(str(path))


def test_bundled_levels_are_playable():
    levels = build_levels(load_levels(LEVELS_PATH))
    assert len(levels) >= 2
    for level in levels:
        assert level.start is not None
        assert any(v == Tile.GOAL for row in level.grid for v in row)

# ======================================================================
# PLAYER
# ======================================================================

def test_walkthrough_scenario(mini_grid):
    """
    From (0,0): down is a wall, then right, down, down, right lands on the goal.
    """
    level  = Level(mini_grid)
    player = Player(level.start)
    t = 0

    assert not player.try_move(level, 1, 0, t)
    assert player.pos == (0, 0)

    for dr, dc, expected in [(0, 1, (0, 1)), (1, 0, (1, 1)), (1, 0, (2, 1)), (0, 1, (2, 2))]:
        assert player.try_move(level, dr, dc, t)
        assert player.pos == expected
        t += PLAYER_MOVE_DELAY

    assert level.is_goal(*player.pos)


def test_wall_moves_never_change_state():
    """Every wall cell next to the player rejects the move, even with no throttle."""
    grid = [
        [1, 1, 1],
        [1, 0, 1],
        [1, 1, 1],
    ]
    level  = Level(grid)
    player = Player((1, 1))
    for i, (dr, dc) in enumerate([(-1, 0), (1, 0), (0, -1), (0, 1)]):
        assert not player.try_move(level, dr, dc, i * 1000)
        assert player.pos == (1, 1)
        assert player.trail == []
        assert player.moved_at is None


def test_out_of_bounds_rejected():
    level  = Level([[0, 0]])
    player = Player((0, 0))
    assert not player.try_move(level, -1, 0, 0)
    assert not player.try_move(level, 0, -1, 0)
    assert player.pos == (0, 0)


def test_throttle_allows_one_move_per_window(open_level):
    player = Player((3, 3))
    assert player.try_move(open_level, 0, 1, 1000)
    assert not player.try_move(open_level, 0, 1, 1000 + 1)
    assert not player.try_move(open_level, 0, 1, 1000 + PLAYER_MOVE_DELAY - 1)
    assert player.pos == (3, 4)
    assert player.try_move(open_level, 0, -1, 1000 + PLAYER_MOVE_DELAY)
    assert player.pos == (3, 3)


def test_throttle_property_over_random_timings(open_level):
    """Only moves at least PLAYER_MOVE_DELAY after the last accepted one land."""
    rng = random.Random(42)
    for _ in range(50):
        player = Player((3, 3))
        now, last = 0, None
        direction = 1
        for _ in range(40):
            now += rng.randint(0, 2 * PLAYER_MOVE_DELAY)
            expected = last is None or now - last >= PLAYER_MOVE_DELAY
            moved = player.try_move(open_level, 0, direction, now)
            assert moved == expected
            if moved:
                last = now
                direction = -direction


def test_player_rejects_non_unit_steps(open_level):
    player = Player((3, 3))
    for dr, dc in [(1, 1), (0, 2), (0, 0)]:
        with pytest.raises(ValueError):
            player.try_move(open_level, dr, dc, 0)

# ======================================================================
# TRAIL
# ======================================================================

def test_move_records_vacated_cell(open_level):
    player = Player((3, 3))
    player.try_move(open_level, 1, 0, 500)
    assert player.trail == [TrailEntry((3, 3), 500)]


def test_trail_opacity_by_recency_and_age(open_level):
    player = Player((0, 0))
    player.try_move(open_level, 0, 1, 0)     # leaves (0,0) @ 0
    player.try_move(open_level, 0, 1, 100)   # leaves (0,1) @ 100
    player.try_move(open_level, 0, 1, 200)   # leaves (0,2) @ 200

    shown = player.trail_opacities(200)
    # Oldest entry has base 0 and is not shown.
    assert [pos for pos, _ in shown] == [(0, 1), (0, 2)]
    assert shown[0][1] == pytest.approx(0.25 * (1 - 100 / TRAIL_FADE_DURATION))
    assert shown[1][1] == pytest.approx(0.5)


def test_trail_entries_expire_at_fade_duration():
    actor = Actor((0, 0))
    actor.trail = [TrailEntry((0, 0), 0), TrailEntry((0, 1), 100)]
    actor.prune_trail(TRAIL_FADE_DURATION - 1)
    assert len(actor.trail) == 2
    actor.prune_trail(TRAIL_FADE_DURATION)
    assert actor.trail == [TrailEntry((0, 1), 100)]
    assert actor.trail_opacities(100 + TRAIL_FADE_DURATION) == []
    assert actor.trail == []


def test_trail_never_holds_expired_entries(open_level):
    rng = random.Random(7)
    player = Player((3, 3))
    now = 0
    for _ in range(300):
        now += rng.randint(0, 250)
        dr, dc = rng.choice([(-1, 0), (1, 0), (0, -1), (0, 1)])
        player.try_move(open_level, dr, dc, now)
        player.prune_trail(now)
        assert all(now - e.created_at < TRAIL_FADE_DURATION for e in player.trail)

# ======================================================================
# ENEMY
# ======================================================================

def test_enemy_picks_each_direction_uniformly():
    level = Level([[0] * 5 for _ in range(5)])
    rng   = random.Random(2024)
    agent = RandomWalkAgent(rng)
    counts = Counter()
    trials = 8000
    for _ in range(trials):
        enemy = Enemy((2, 2), agent=agent)
        assert enemy.tick(level, 0)
        counts[(enemy.row - 2, enemy.col - 2)] += 1

    assert set(counts) == set(ENEMY_MOVES)
    for n in counts.values():
        assert abs(n - trials / 8) < trials / 8 * 0.2


def test_enemy_only_takes_legal_jumps():
    """Random mazes, many ticks: the enemy never lands on a wall or off the grid."""
    rng = random.Random(99)
    for _ in range(30):
        rows, cols = rng.randint(3, 9), rng.randint(3, 9)
        grid = [[1 if rng.random() < 0.4 else 0 for _ in range(cols)] for _ in range(rows)]
        r, c = rng.randrange(rows), rng.randrange(cols)
        grid[r][c] = 4
        level = Level(grid)
        enemy = Enemy(level.enemy_spawn, agent=RandomWalkAgent(rng))
        now = 0
        for _ in range(60):
            now += rng.randint(0, ENEMY_MOVE_DELAY)
            enemy.tick(level, now)
            assert level.in_bounds(*enemy.pos)
            assert not level.is_wall(*enemy.pos)


def test_enemy_jump_is_throttled():
    level = Level([[0] * 7 for _ in range(7)])
    enemy = Enemy((3, 3), agent=RandomWalkAgent(random.Random(1)))
    assert enemy.tick(level, 0)
    pos = enemy.pos
    assert not enemy.tick(level, ENEMY_MOVE_DELAY - 1)
    assert enemy.pos == pos
    assert enemy.trail == [TrailEntry((3, 3), 0)]
    assert enemy.tick(level, ENEMY_MOVE_DELAY)


def test_stuck_enemy_retries_on_next_frame():
    """Every jump blocked: no move, no cooldown, so the next frame tries again."""
    grid = [[0] * 5 for _ in range(5)]
    for dr, dc in ENEMY_MOVES:
        grid[2 + dr][2 + dc] = 1
    level = Level(grid)
    enemy = Enemy((2, 2), agent=RandomWalkAgent(random.Random(3)))

    assert not enemy.tick(level, 0)
    assert enemy.pos == (2, 2)
    assert enemy.moved_at is None

    level.grid[0][0] = Tile.FLOOR
    assert enemy.tick(level, 1)
    assert enemy.pos == (0, 0)
    assert enemy.moved_at == 1


def test_agent_returns_none_when_boxed_in():
    level = Level([[0]])
    assert RandomWalkAgent(random.Random(0)).get_action(level, (0, 0)) is None


def test_enemy_uses_its_agent():
    level = Level([[0] * 5 for _ in range(5)])
    agent = FixedAgent((2, -2))
    enemy = Enemy((0, 4), agent=agent)
    assert enemy.tick(level, 0)
    assert enemy.pos == (2, 2)
    assert agent.calls == 1
