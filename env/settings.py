"""
Shared constants for the maze game.

Everything that tunes timing, sizes or colours lives here so the engine,
the renderer and the frame loop read the same values. Times are in
milliseconds, the unit pygame.time.get_ticks() reports.
"""

import os

LEVELS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "levels.json")

TS  = 120   # pixels per tile
FPS = 60
CAPTION = "Tile Maze"

# Fallback spawn when a level has no start tile.
FALLBACK_START = (1, 1)

# ══════════════════════════════════════════════════════════════════════════════
#  Timing (ms)
# ══════════════════════════════════════════════════════════════════════════════
PLAYER_MOVE_DELAY   = 90
ENEMY_MOVE_DELAY    = 667
TRAIL_FADE_DURATION = 400

# Base opacity by recency: most recent, second most recent, the rest.
TRAIL_OPACITY = (0.5, 0.25)

# ══════════════════════════════════════════════════════════════════════════════
#  Colours
# ══════════════════════════════════════════════════════════════════════════════
BACKGROUND   = (240, 240, 240)
WALL_COLOR   = (125, 253, 254)
FLOOR_COLOR  = (1, 31, 38)
GOAL_COLOR   = (242, 160, 7, 200)
PLAYER_COLOR = (20, 120, 255)
ENEMY_COLOR  = (255, 150, 0)
HUD_COLOR    = (0, 0, 0)

OVERLAY_COLOR      = (0, 0, 0, 150)
POPUP_COLOR        = (255, 255, 255)
BUTTON_COLOR       = (100, 150, 255)
BUTTON_HOVER_COLOR = (80, 120, 220)

# ══════════════════════════════════════════════════════════════════════════════
#  Game-over popup layout
# ══════════════════════════════════════════════════════════════════════════════
POPUP_W, POPUP_H   = 300, 220
BUTTON_W, BUTTON_H = 100, 50
BUTTON_OFFSET_Y    = 130   # from the popup's top edge
GOAL_INSET  = 4
GOAL_RADIUS = 6
