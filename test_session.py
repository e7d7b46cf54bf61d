import random

import pygame
import pytest

from env.level import Level, LevelFormatError
from env.renderer import redo_button_rect
from env.session import Session
from env.settings import FALLBACK_START, PLAYER_MOVE_DELAY, TRAIL_FADE_DURATION
from main import MazeGame, direction_for_key, parse_args

# ======================================================================
# FIXTURES
# ======================================================================

@pytest.fixture
def walkthrough_levels():
    """The 3x3 scenario maze followed by a second level with an enemy."""
    first  = Level([[2, 0, 0], [1, 0, 1], [0, 0, 3]])
    second = Level([[1, 1, 1, 1, 1],
                    [1, 2, 0, 4, 1],
                    [1, 0, 0, 3, 1],
                    [1, 1, 1, 1, 1]])
    return [first, second]


@pytest.fixture
def resizes():
    return []


@pytest.fixture
def session(walkthrough_levels, resizes):
    return Session(walkthrough_levels, tile_size=10, rng=random.Random(5),
                   on_resize=lambda w, h: resizes.append((w, h)))


@pytest.fixture
def corridor():
    """
    One row: player at (0,0), enemy at (0,4). The enemy is scripted to
    jump two cells left, onto (0,2).
    """
    s = Session([Level([[2, 0, 0, 0, 4, 0]])], tile_size=10)
    s.enemy.agent = ScriptedAgent((0, -2))
    return s


class ScriptedAgent:
    def __init__(self, action):
        self.action = action
        self.calls  = 0

    def get_action(self, level, pos):
        self.calls += 1
        return self.action

# ======================================================================
# LEVEL SEQUENCING
# ======================================================================

def test_initial_state(session, resizes):
    assert session.level_index == 0
    assert not session.is_over
    assert session.player.pos == (0, 0)
    assert session.enemy is None          # first level has no spawn marker
    assert resizes == [(30, 30)]


def test_walkthrough_reaches_goal_and_advances(session, resizes):
    t = 0
    assert not session.move_player(1, 0, t)
    for dr, dc in [(0, 1), (1, 0), (1, 0), (0, 1)]:
        assert session.move_player(dr, dc, t)
        t += PLAYER_MOVE_DELAY

    assert session.level_index == 1
    assert session.player.pos == (1, 1)
    assert session.enemy is not None and session.enemy.pos == (1, 3)
    assert session.enemy.trail == []
    assert resizes[-1] == (50, 40)


def test_level_advance_wraps_to_first(session):
    session.load_level(1)
    session.next_level()
    assert session.level_index == 0


def test_missing_start_uses_fallback():
    s = Session([Level([[0, 0, 0], [0, 0, 0], [0, 0, 3]])])
    assert s.player.pos == FALLBACK_START


def test_player_is_reused_across_levels(session):
    player = session.player
    session.next_level()
    assert session.player is player


def test_enemy_respawns_at_marker_on_reload(session):
    session.load_level(1)
    session.tick(0)
    session.load_level(0)
    session.load_level(1)
    assert session.enemy.pos == session.level.enemy_spawn


def test_enemy_cooldown_starts_fresh_on_new_level():
    """A jump just before a level change does not delay the next level's enemy."""
    grid = [[0] * 5 for _ in range(5)]
    grid[0][0], grid[2][2] = 2, 4
    s = Session([Level(grid), Level(grid)], rng=random.Random(11))

    s.tick(1000)
    assert s.enemy.moved_at == 1000
    s.next_level()
    assert s.enemy.moved_at is None
    s.tick(1001)
    assert s.enemy.moved_at == 1001


def test_session_needs_levels():
    with pytest.raises(LevelFormatError):
        Session([])


def test_unknown_level_index(session):
    with pytest.raises(IndexError):
        session.load_level(5)


def test_hud_text(session):
    assert session.hud_text().startswith("Level 1/2")

# ======================================================================
# GAME OVER
# ======================================================================

def test_collision_sets_game_over_on_that_frame(corridor):
    assert corridor.move_player(0, 1, 0)
    assert corridor.move_player(0, 1, PLAYER_MOVE_DELAY)
    assert corridor.player.pos == (0, 2)

    corridor.tick(PLAYER_MOVE_DELAY)
    assert corridor.enemy.pos == (0, 2)
    assert corridor.is_over


def test_game_over_freezes_both_actors(corridor):
    corridor.move_player(0, 1, 0)
    corridor.move_player(0, 1, 100)
    corridor.tick(100)
    assert corridor.is_over
    calls = corridor.enemy.agent.calls

    for t in range(1000, 10000, 1000):
        assert not corridor.move_player(0, 1, t)
        corridor.tick(t)

    assert corridor.player.pos == (0, 2)
    assert corridor.enemy.agent.calls == calls
    assert corridor.is_over


def test_no_game_over_when_enemy_lands_elsewhere(corridor):
    corridor.tick(0)
    assert corridor.enemy.pos == (0, 2)
    assert corridor.player.pos == (0, 0)
    assert not corridor.is_over


def test_tick_prunes_both_trails(corridor):
    corridor.move_player(0, 1, 0)
    corridor.tick(0)
    assert corridor.player.trail and corridor.enemy.trail
    corridor.tick(TRAIL_FADE_DURATION)
    assert corridor.player.trail == []
    assert corridor.enemy.trail == []


def test_new_session_is_a_full_restart(corridor):
    corridor.move_player(0, 1, 0)
    corridor.move_player(0, 1, 100)
    corridor.tick(100)
    assert corridor.is_over

    fresh = Session([Level([[2, 0, 0, 0, 4, 0]])])
    assert not fresh.is_over
    assert fresh.player.pos == (0, 0)
    assert fresh.enemy.pos == (0, 4)

# ======================================================================
# INPUT / CLI
# ======================================================================

@pytest.mark.parametrize("key, step", [
    (pygame.K_LEFT, (0, -1)), (pygame.K_a, (0, -1)),
    (pygame.K_RIGHT, (0, 1)), (pygame.K_d, (0, 1)),
    (pygame.K_UP, (-1, 0)),   (pygame.K_w, (-1, 0)),
    (pygame.K_DOWN, (1, 0)),  (pygame.K_s, (1, 0)),
])
def test_movement_keys(key, step):
    assert direction_for_key(key) == step


def test_other_keys_are_ignored():
    assert direction_for_key(pygame.K_SPACE) is None


def test_cli_defaults():
    args = parse_args([])
    assert args.start_level == 1
    assert args.seed is None
    assert args.levels.endswith("levels.json")


@pytest.mark.parametrize("size", ["0", "-5", "abc"])
def test_cli_rejects_bad_tile_size(size):
    with pytest.raises(SystemExit):
        parse_args(["--tile-size", size])


def test_cli_accepts_tile_size():
    assert parse_args(["--tile-size", "64"]).tile_size == 64

# ======================================================================
# REDO BUTTON
# ======================================================================

@pytest.fixture
def game(monkeypatch):
    """A MazeGame on SDL's dummy video driver: 4x5 tiles of 120 px."""
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    grid = [[1, 1, 1, 1, 1],
            [1, 2, 0, 0, 1],
            [1, 0, 0, 3, 1],
            [1, 1, 1, 1, 1]]
    g = MazeGame([grid], tile_size=120, seed=1)
    yield g
    pygame.quit()


def click(pos, button=1):
    return pygame.event.Event(pygame.MOUSEBUTTONDOWN, pos=pos, button=button)


def test_redo_button_is_centred_in_popup():
    button = redo_button_rect(600, 480)
    assert button.size == (100, 50)
    assert button.centerx == 300
    assert button.y == (480 - 220) // 2 + 130


def test_redo_click_ignored_while_playing(game):
    session = game.session
    button  = redo_button_rect(*game.screen.get_size())
    assert game.handle_event(click(button.center), 0)
    assert game.session is session


def test_redo_click_restarts_after_game_over(game):
    session = game.session
    session.player.set_cell(2, 2)
    session.is_over = True
    button = redo_button_rect(*game.screen.get_size())

    assert game.handle_event(click((0, 0)), 0)
    assert game.session is session
    assert game.handle_event(click(button.center, button=3), 0)
    assert game.session is session

    assert game.handle_event(click(button.center), 0)
    assert game.session is not session
    assert not game.session.is_over
    assert game.session.player.pos == (1, 1)


def test_game_over_popup_draws_headless(game):
    game.session.is_over = True
    button = redo_button_rect(*game.screen.get_size())
    game.renderer.draw(game.session, 0, button.center)
    assert game.screen.get_size() == (600, 480)
