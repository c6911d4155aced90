# spinglobe/app.py
"""
pygame host for the globe.

The window loop is the display refresh: once per frame it runs the pending
frame callbacks (fetch polling, rotation ticks), then paints whatever the
controller currently exposes.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Tuple

import pygame

from spinglobe.core.assets import AssetSource, FileAssetSource
from spinglobe.core.controller import GlobeController, RenderState
from spinglobe.core.scheduler import FrameRequester
from spinglobe.rendering.globe_surface import GlobeSurface
from spinglobe.utils import settings
from spinglobe.utils.settings import GlobeConfig

log = logging.getLogger(__name__)


def configure_environment(headless: Optional[bool] = None) -> None:
    """SDL defaults for Linux/CI/headless. Call before pygame.init()."""
    ci = os.getenv("CI", "").lower() == "true"
    no_display = not (os.getenv("DISPLAY") or os.getenv("WAYLAND_DISPLAY") or os.name == "nt")
    if headless is None:
        headless = ci or no_display
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    if headless:
        os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")


def create_window(width: int, height: int, title: str) -> Tuple[pygame.Surface, pygame.time.Clock]:
    pygame.init()
    surface = pygame.display.set_mode((width, height))
    pygame.display.set_caption(title)
    return surface, pygame.time.Clock()


class GlobeApp:
    """Window + loop around one GlobeController."""

    def __init__(
        self,
        config: GlobeConfig,
        asset_source: Optional[AssetSource] = None,
        *,
        fps: int = settings.FPS,
        margin: int = settings.WINDOW_MARGIN,
    ) -> None:
        self.config = config
        self.fps = fps
        self.margin = margin
        edge = int(round(config.size)) + 2 * margin
        self.screen, self.clock = create_window(edge, edge, settings.WINDOW_TITLE)

        self.frames = FrameRequester()
        self._owned_source: Optional[FileAssetSource] = None
        if asset_source is None:
            asset_source = self._owned_source = FileAssetSource()
        self.controller = GlobeController(config, asset_source, self.frames)
        self.surface = GlobeSurface(config.size)
        self._running = False

    def _handle_event(self, ev: pygame.event.Event) -> None:
        if ev.type == pygame.QUIT:
            self._running = False
        elif ev.type == pygame.KEYDOWN and ev.key == pygame.K_ESCAPE:
            self._running = False

    def render(self) -> None:
        self.screen.fill(settings.BG_COLOR)
        self.surface.draw(self.screen, self.controller, topleft=(self.margin, self.margin))
        pygame.display.flip()

    def run(self, max_frames: Optional[int] = None) -> int:
        """
        Main loop. Returns 0 on a normal exit, 1 if the globe failed to load
        and the window was closed. `max_frames` bounds the loop (headless runs).
        """
        self._running = True
        self.controller.activate()
        shown = 0
        try:
            while self._running:
                self.clock.tick(self.fps)
                for ev in pygame.event.get():
                    self._handle_event(ev)
                self.frames.run_pending()
                self.render()
                shown += 1
                if max_frames is not None and shown >= max_frames:
                    break
        finally:
            self.controller.deactivate()
            if self._owned_source is not None:
                self._owned_source.close()
            pygame.quit()
        log.info("Loop ended after %d frames", shown)
        return 1 if self.controller.state is RenderState.FAILED else 0
