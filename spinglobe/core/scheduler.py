# spinglobe/core/scheduler.py
"""
Frame-driven rotation.

FrameRequester is the "run once before the next display refresh" primitive:
callbacks requested now run on the next `run_pending()` call, which the host
loop makes exactly once per displayed frame. Callbacks requested while a
frame is being run land in the following frame.

RotationScheduler advances the rotation angle by a fixed number of degrees on
each of those frames and signals that a new frame should be produced:

    frames = FrameRequester()
    sched = RotationScheduler(frames, degrees_per_tick=0.3, on_frame=redraw)
    sched.start()
    while running:
        frames.run_pending()
        ...
    sched.stop()
"""
from __future__ import annotations

import itertools
import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

log = logging.getLogger(__name__)

__all__ = ["FrameRequester", "RotationScheduler", "RotationState", "SchedulerState"]

FrameCallback = Callable[[float], None]


class FrameRequester:
    """Cancellable per-frame callback queue (requestAnimationFrame semantics)."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._tokens = itertools.count(1)
        self._pending: Dict[int, FrameCallback] = {}
        self._running: Dict[int, FrameCallback] = {}
        self.frame_count = 0

    def request(self, callback: FrameCallback) -> int:
        token = next(self._tokens)
        self._pending[token] = callback
        return token

    def cancel(self, token: Optional[int]) -> bool:
        """Drop a request, including one queued for the frame being run."""
        if token is None:
            return False
        found = self._pending.pop(token, None) is not None
        found = self._running.pop(token, None) is not None or found
        return found

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_pending(self, timestamp: Optional[float] = None) -> int:
        """Run everything requested before this call. Returns how many ran."""
        ts = self._clock() * 1000.0 if timestamp is None else float(timestamp)
        self._running, self._pending = self._pending, {}
        self.frame_count += 1
        ran = 0
        try:
            while self._running:
                token = next(iter(self._running))
                callback = self._running.pop(token)
                callback(ts)
                ran += 1
        finally:
            self._running = {}
        return ran


@dataclass
class RotationState:
    """Rotation about the polar axis in degrees. Unbounded, never normalised."""
    angle: float = 0.0


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class RotationScheduler:
    """
    Idle -(start)-> Running -(stop)-> Idle.

    While running there is always exactly one pending tick. The angle after
    `n` ticks is `start_angle + n * degrees_per_tick`, which is the same as
    repeated addition without accumulating rounding error.
    """

    def __init__(
        self,
        frames: FrameRequester,
        degrees_per_tick: float,
        on_frame: Optional[Callable[[float], None]] = None,
        *,
        state: Optional[RotationState] = None,
    ) -> None:
        velocity = float(degrees_per_tick)
        if not math.isfinite(velocity):
            raise ValueError(f"degrees_per_tick must be finite, got {degrees_per_tick!r}")
        self._frames = frames
        self._velocity = velocity
        self._on_frame = on_frame
        self._rotation = state if state is not None else RotationState()
        self._state = SchedulerState.IDLE
        self._token: Optional[int] = None
        self._origin = self._rotation.angle
        self._ticks = 0

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def angle(self) -> float:
        return self._rotation.angle

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def degrees_per_tick(self) -> float:
        return self._velocity

    # ------------------------------------------------------------------ #
    # State machine
    # ------------------------------------------------------------------ #

    def start(self) -> None:
        if self.running:
            return
        self._origin = self._rotation.angle
        self._ticks = 0
        self._state = SchedulerState.RUNNING
        self._token = self._frames.request(self._tick)
        log.debug("Rotation started at %.3f deg (%.3f deg/tick)", self._origin, self._velocity)

    def stop(self) -> None:
        """After this returns no tick will run, even one already queued."""
        if self._token is not None:
            self._frames.cancel(self._token)
            self._token = None
        if self.running:
            self._state = SchedulerState.IDLE
            log.debug("Rotation stopped at %.3f deg after %d ticks", self._rotation.angle, self._ticks)

    def _tick(self, _timestamp: float) -> None:
        self._token = None
        if not self.running:
            return
        self._ticks += 1
        self._rotation.angle = self._origin + self._ticks * self._velocity
        if self._on_frame is not None:
            self._on_frame(self._rotation.angle)
        if self.running and self._token is None:
            self._token = self._frames.request(self._tick)
