# spinglobe/core/controller.py
"""
Lifecycle of one globe instance.

    IDLE -(activate)-> LOADING -> READY   (scheduler running, a frame per tick)
                               -> FAILED  (terminal, error text retained)

The controller issues exactly one fetch, waits for it cooperatively by polling
the future once per frame, decodes the asset, and then lets the rotation
scheduler drive projection and path emission. `deactivate()` stops everything
and any fetch that completes afterwards is ignored.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Set, Tuple

from spinglobe.utils.settings import INVALID_STRUCTURE_TEXT, LOADING_TEXT, GlobeConfig

from .assets import AssetSource
from .errors import DecodeError, FetchError
from .geometry import GeometryCollection, ProjectedGeometry, SphereOutline
from .path import PathDescriptor, emit
from .projection import project, sphere_outline
from .scheduler import FrameRequester, RotationScheduler
from .topology import decode

log = logging.getLogger(__name__)

__all__ = ["GlobeController", "GlobeFrame", "RenderState"]

Projector = Callable[[GeometryCollection, float, float], ProjectedGeometry]
Emitter = Callable[[ProjectedGeometry], PathDescriptor]


class RenderState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class GlobeFrame:
    """What the drawing surface paints for one frame."""
    path: PathDescriptor
    outline: SphereOutline
    rotation: float
    dropped: Tuple[Any, ...] = ()


class GlobeController:
    """Owns the decoded geometry, the scheduler and the render state."""

    def __init__(
        self,
        config: GlobeConfig,
        asset_source: AssetSource,
        frames: FrameRequester,
        *,
        projector: Projector = project,
        emitter: Emitter = emit,
        on_frame: Optional[Callable[[GlobeFrame], None]] = None,
        on_state: Optional[Callable[[RenderState], None]] = None,
    ) -> None:
        self.config = config
        self._source = asset_source
        self._frames = frames
        self._projector = projector
        self._emitter = emitter
        self._on_frame = on_frame
        self._on_state = on_state

        self.state = RenderState.IDLE
        self.error: Optional[str] = None
        self.error_detail: Optional[str] = None
        self.geometry: Optional[GeometryCollection] = None
        self.current_frame: Optional[GlobeFrame] = None
        self.scheduler: Optional[RotationScheduler] = None

        self._activated = False
        self._active = False
        self._future: Optional[Future] = None
        self._poll_token: Optional[int] = None
        self._reported_dropped: Set[Any] = set()

    # ------------------------------------------------------------------ #
    # Host-facing helpers
    # ------------------------------------------------------------------ #

    @property
    def outline(self) -> SphereOutline:
        return sphere_outline(self.config.size)

    @property
    def status_text(self) -> Optional[str]:
        """Text to show in place of the globe, or None when ready."""
        if self.state is RenderState.LOADING:
            return LOADING_TEXT
        if self.state is RenderState.FAILED:
            return f"Error: {self.error}"
        return None

    @property
    def active(self) -> bool:
        return self._active

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def activate(self) -> None:
        if self._activated:
            raise RuntimeError("a GlobeController can only be activated once")
        self._activated = True
        self._active = True
        self._set_state(RenderState.LOADING)

        try:
            self._future = self._source.fetch(self.config.asset_path)
        except FetchError as e:
            self._fail(f"Failed to load TopoJSON: {e.reason}", str(e))
            return
        except Exception as e:
            self._fail(f"Failed to load TopoJSON: {e}", repr(e))
            return
        self._poll_token = self._frames.request(self._poll_fetch)

    def deactivate(self) -> None:
        """Stop the scheduler and ignore any fetch still in flight."""
        if not self._active:
            return
        self._active = False
        if self._poll_token is not None:
            self._frames.cancel(self._poll_token)
            self._poll_token = None
        if self.scheduler is not None:
            self.scheduler.stop()
        log.info("Globe deactivated in state %s", self.state.value)

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    def _poll_fetch(self, _timestamp: float) -> None:
        self._poll_token = None
        if not self._active or self._future is None:
            return
        if not self._future.done():
            self._poll_token = self._frames.request(self._poll_fetch)
            return
        self._complete(self._future)

    def _complete(self, future: Future) -> None:
        try:
            asset = future.result()
        except FetchError as e:
            self._fail(f"Failed to load TopoJSON: {e.reason}", str(e))
            return
        except Exception as e:
            self._fail(f"Failed to load TopoJSON: {e}", repr(e))
            return

        try:
            geometry = decode(asset, self.config.collection_key)
        except DecodeError as e:
            self._fail(INVALID_STRUCTURE_TEXT, str(e))
            return

        self.geometry = geometry
        log.info("Decoded %d features; starting rotation", len(geometry))
        self._set_state(RenderState.READY)
        self.scheduler = RotationScheduler(
            self._frames, self.config.rotation_speed, on_frame=self._render
        )
        self._render(self.scheduler.angle)
        self.scheduler.start()

    def _fail(self, message: str, detail: str) -> None:
        self.error = message
        self.error_detail = detail
        log.error("Globe failed: %s (%s)", message, detail)
        self._set_state(RenderState.FAILED)

    def _set_state(self, state: RenderState) -> None:
        log.debug("Render state %s -> %s", self.state.value, state.value)
        self.state = state
        if self._on_state is not None:
            self._on_state(state)

    # ------------------------------------------------------------------ #
    # Per-frame work
    # ------------------------------------------------------------------ #

    def _render(self, angle: float) -> None:
        if not self._active or self.geometry is None:
            return
        projected = self._projector(self.geometry, angle, self.config.size)
        path = self._emitter(projected)

        fresh = set(projected.dropped) - self._reported_dropped
        if fresh:
            self._reported_dropped |= fresh
            log.warning("Dropped %d degenerate feature(s): %s", len(fresh), sorted(map(str, fresh)))

        self.current_frame = GlobeFrame(
            path=path, outline=projected.outline, rotation=angle, dropped=projected.dropped
        )
        if self._on_frame is not None:
            self._on_frame(self.current_frame)
