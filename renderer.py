# renderer.py

import pygame
import numpy as np
import constants
from shock_tracker import SUPERSONIC_ENTRY


class Renderer:
    """
    Draws the simulation state onto a pygame surface. The renderer only reads
    from the simulation; it never feeds anything back.

    Data Contract:
    - Inputs: screen (pygame.Surface) - The target surface.
    - Side Effects: Draws on the screen each frame.
    """
    def __init__(self, screen: pygame.Surface):
        self.screen = screen
        self.label_font = None
        self.hud_font = None
        self.resize(screen)

    def resize(self, screen: pygame.Surface):
        self.screen = screen
        size = screen.get_size()
        self.trail_surface = pygame.Surface(size, pygame.SRCALPHA)
        self.trail_surface.fill(constants.TRAIL_EFFECT_COLOR)
        self.overlay = pygame.Surface(size, pygame.SRCALPHA)

    def _fonts(self):
        # Fonts are created lazily so headless use without text never needs pygame.font.
        if self.label_font is None:
            pygame.font.init()
            self.label_font = pygame.font.Font(None, constants.LABEL_FONT_SIZE)
            self.hud_font = pygame.font.Font(None, constants.HUD_FONT_SIZE)
        return self.label_font, self.hud_font

    def fade(self):
        """Darkens the previous frame instead of clearing it, leaving particle trails."""
        self.screen.blit(self.trail_surface, (0, 0))

    def draw_walls(self, walls):
        for wall in walls.walls:
            points = [tuple(p) for p in wall.sample()]
            pygame.draw.lines(self.screen, constants.WHITE, False, points, constants.WALL_LINE_WIDTH)

    def draw_control_points(self, walls):
        """Draws each control point with the average velocity recorded there."""
        label_font, _ = self._fonts()
        for wall in walls.walls:
            # Labels go above the top wall and below the bottom wall.
            y_offset = -15 if wall is walls.top else 15
            for i, (x, y) in enumerate(wall.points):
                pygame.draw.circle(self.screen, constants.RED, (int(x), int(y)), constants.CONTROL_POINT_RADIUS)
                avg_velocity = wall.average_velocity_at(i)
                if avg_velocity > 0:
                    label = label_font.render(f"{avg_velocity:.0f} m/s", True, constants.WHITE)
                    self.screen.blit(label, label.get_rect(center=(int(x), int(y) + y_offset)))

    def draw_shocks(self, markers):
        self.overlay.fill((0, 0, 0, 0))
        for marker in markers:
            rgb = constants.SUPERSONIC_RED if marker.category == SUPERSONIC_ENTRY else constants.SUBSONIC_BLUE
            alpha = int(255 * marker.opacity)
            x = int(marker.position)
            pygame.draw.line(
                self.overlay, (*rgb, alpha),
                (x, int(marker.top)), (x, int(marker.bottom)),
                constants.SHOCK_LINE_WIDTH
            )
        self.screen.blit(self.overlay, (0, 0))

    def draw_particles(self, particles):
        """Draws particles red when supersonic and white otherwise."""
        self.overlay.fill((0, 0, 0, 0))
        alphas = (255 * particles.opacities).astype(int)
        for i in range(particles.num_particles):
            rgb = constants.SUPERSONIC_RED if particles.supersonic[i] else constants.WHITE
            pygame.draw.circle(
                self.overlay,
                (*rgb, int(alphas[i])),
                (int(particles.positions[i]), int(particles.lateral[i])),
                max(1, int(np.round(particles.sizes[i])))
            )
        self.screen.blit(self.overlay, (0, 0))

    def draw_hud(self, params, particles):
        _, hud_font = self._fonts()
        lines = [
            f"Speed of sound: {params.sound_speed:.0f} m/s  [Up/Down]",
            f"Injection velocity: {params.injection_velocity:.0f} m/s  [Left/Right]",
            f"Time scale: {params.time_scale_percent:.1f}%  [ [ / ] ]",
            f"Particles: {particles.num_particles}  [R] reset walls",
        ]
        for row, text in enumerate(lines):
            surface = hud_font.render(text, True, constants.WHITE)
            self.screen.blit(surface, (10, 10 + row * (constants.HUD_FONT_SIZE + 2)))

    def draw_frame(self, walls, markers, particles, params):
        self.fade()
        self.draw_walls(walls)
        self.draw_control_points(walls)
        self.draw_shocks(markers)
        self.draw_particles(particles)
        self.draw_hud(params, particles)
