# spinglobe/rendering/globe_surface.py
"""
pygame drawing surface for the globe.

Paints, in order: the water disc of the full sphere, the landmass subpaths
(filled), their borders. While loading, or after a failure, only the status
text is drawn in the globe's place.

    surface = GlobeSurface(size=400)
    surface.draw(screen, controller, topleft=(20, 20))   # call every frame
"""
from __future__ import annotations

from typing import Optional, Tuple

import pygame

from spinglobe.core.controller import GlobeController, GlobeFrame, RenderState
from spinglobe.utils import settings
from spinglobe.utils.settings import hex_to_rgb

Color = Tuple[int, int, int]


class GlobeSurface:
    def __init__(
        self,
        size: float,
        *,
        water: str = settings.WATER_COLOR,
        land: str = settings.LAND_COLOR,
        border: str = settings.BORDER_COLOR,
        font_size: int = settings.STATUS_FONT_SIZE,
    ) -> None:
        self.size = size
        self.water: Color = hex_to_rgb(water)
        self.land: Color = hex_to_rgb(land)
        self.border: Color = hex_to_rgb(border)
        self._font_size = font_size
        self._font: Optional[pygame.font.Font] = None

    def _get_font(self) -> pygame.font.Font:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.Font(None, self._font_size)
        return self._font

    # ------------------------------------------------------------------ #
    # Drawing
    # ------------------------------------------------------------------ #

    def draw(self, target: pygame.Surface, controller: GlobeController, *, topleft: Tuple[int, int] = (0, 0)) -> None:
        text = controller.status_text
        if text is not None:
            color = settings.ERROR_TEXT_COLOR if controller.state is RenderState.FAILED else settings.STATUS_TEXT_COLOR
            self.draw_status(target, text, color, topleft=topleft)
            return
        if controller.current_frame is not None:
            self.draw_frame(target, controller.current_frame, topleft=topleft)

    def draw_status(self, target: pygame.Surface, text: str, color: Color, *, topleft: Tuple[int, int] = (0, 0)) -> pygame.Rect:
        surf = self._get_font().render(text, True, color)
        rect = surf.get_rect()
        rect.center = (int(topleft[0] + self.size / 2), int(topleft[1] + self.size / 2))
        target.blit(surf, rect)
        return rect

    def draw_frame(self, target: pygame.Surface, frame: GlobeFrame, *, topleft: Tuple[int, int] = (0, 0)) -> int:
        """Paint one frame. Returns the number of subpaths drawn."""
        ox, oy = topleft
        o = frame.outline
        pygame.draw.circle(target, self.water, (round(ox + o.cx), round(oy + o.cy)), round(o.radius))

        drawn = 0
        for pts in frame.path.subpaths():
            if len(pts) < 3:
                continue
            shifted = [(ox + x, oy + y) for x, y in pts]
            pygame.draw.polygon(target, self.land, shifted)
            pygame.draw.aalines(target, self.border, True, shifted)
            drawn += 1
        return drawn
