"""
pygame drawing for the maze: tiles, trails, actors, HUD and the game-over
popup. Reads a Session, never changes it.
"""

import pygame

from env.level import Tile
from env.settings import (
    BACKGROUND, BUTTON_COLOR, BUTTON_H, BUTTON_HOVER_COLOR, BUTTON_OFFSET_Y, BUTTON_W,
    ENEMY_COLOR, FLOOR_COLOR, GOAL_COLOR, GOAL_INSET, GOAL_RADIUS, HUD_COLOR,
    OVERLAY_COLOR, PLAYER_COLOR, POPUP_COLOR, POPUP_H, POPUP_W, WALL_COLOR,
)


def redo_button_rect(width: int, height: int) -> pygame.Rect:
    """Where the Redo button sits for a window of the given size."""
    popup_y = (height - POPUP_H) // 2
    return pygame.Rect((width - BUTTON_W) // 2, popup_y + BUTTON_OFFSET_Y, BUTTON_W, BUTTON_H)


class Renderer:
    def __init__(self, screen, ts: int):
        self.screen     = screen
        self.ts         = ts
        self.font       = pygame.font.SysFont("sans-serif", 14)
        self.title_font = pygame.font.SysFont("sans-serif", 40)
        self.button_font = pygame.font.SysFont("sans-serif", 18)

    def cell_rect(self, r: int, c: int) -> pygame.Rect:
        return pygame.Rect(c * self.ts, r * self.ts, self.ts, self.ts)

    def _blit_alpha(self, color, rect, radius=0):
        # pygame.draw ignores alpha on the display surface; go through a SRCALPHA layer.
        layer = pygame.Surface(rect.size, pygame.SRCALPHA)
        pygame.draw.rect(layer, color, layer.get_rect(), border_radius=radius)
        self.screen.blit(layer, rect.topleft)

    # ── Board ────────────────────────────────────────────────────────────────
    def draw_level(self, level):
        for r, row in enumerate(level.grid):
            for c, cell in enumerate(row):
                rect = self.cell_rect(r, c)
                pygame.draw.rect(self.screen, WALL_COLOR if cell == Tile.WALL else FLOOR_COLOR, rect)
                if cell == Tile.GOAL:
                    self._blit_alpha(GOAL_COLOR, rect.inflate(-2 * GOAL_INSET, -2 * GOAL_INSET), GOAL_RADIUS)

    def draw_trail(self, actor, color, now):
        for (r, c), opacity in actor.trail_opacities(now):
            self._blit_alpha((*color, int(opacity * 255)), self.cell_rect(r, c))

    def draw_actor(self, actor, color):
        pygame.draw.rect(self.screen, color, self.cell_rect(*actor.pos))

    def draw_hud(self, text: str):
        self.screen.blit(self.font.render(text, True, HUD_COLOR), (10, 6))

    # ── Game over ────────────────────────────────────────────────────────────
    def draw_game_over(self, mouse_pos):
        w, h = self.screen.get_size()
        self._blit_alpha(OVERLAY_COLOR, pygame.Rect(0, 0, w, h))

        popup = pygame.Rect((w - POPUP_W) // 2, (h - POPUP_H) // 2, POPUP_W, POPUP_H)
        pygame.draw.rect(self.screen, POPUP_COLOR, popup)

        title = self.title_font.render("Gameover", True, (0, 0, 0))
        self.screen.blit(title, title.get_rect(center=(w // 2, popup.y + 60)))

        button = redo_button_rect(w, h)
        hover  = button.collidepoint(mouse_pos)
        pygame.draw.rect(self.screen, BUTTON_HOVER_COLOR if hover else BUTTON_COLOR, button)
        label = self.button_font.render("Redo", True, (255, 255, 255))
        self.screen.blit(label, label.get_rect(center=button.center))

    def draw(self, session, now, mouse_pos=(0, 0)):
        self.screen.fill(BACKGROUND)
        self.draw_level(session.level)

        # Enemy trail and enemy first, player on top.
        if session.enemy is not None:
            self.draw_trail(session.enemy, ENEMY_COLOR, now)
            self.draw_actor(session.enemy, ENEMY_COLOR)

        self.draw_trail(session.player, PLAYER_COLOR, now)
        self.draw_actor(session.player, PLAYER_COLOR)

        if session.is_over:
            self.draw_game_over(mouse_pos)
        self.draw_hud(session.hud_text())
