# tests/test_controller.py
"""
Lifecycle controller: loading, failure, frame production and teardown.
"""
from __future__ import annotations

import json
import time
from concurrent.futures import Future

import pytest

from spinglobe.core.assets import FileAssetSource
from spinglobe.core.controller import GlobeController, RenderState
from spinglobe.core.errors import FetchError
from spinglobe.core.projection import project
from spinglobe.core.scheduler import FrameRequester
from spinglobe.utils.settings import GlobeConfig
from tests.util_topology import make_topology

KEY = "ne_110m_admin_0_countries"


class StubSource:
    """Hands out one prepared future per fetch and records the paths asked for."""

    def __init__(self, future: Future) -> None:
        self.future = future
        self.paths = []

    def fetch(self, path):
        self.paths.append(path)
        return self.future

    @classmethod
    def ready(cls, asset):
        fut: Future = Future()
        fut.set_result(asset)
        return cls(fut)

    @classmethod
    def failing(cls, exc):
        fut: Future = Future()
        fut.set_exception(exc)
        return cls(fut)


class CountingProjector:
    def __init__(self):
        self.calls = 0

    def __call__(self, geometry, rotation, size):
        self.calls += 1
        return project(geometry, rotation, size)


def _controller(source, speed=1.0, **kwargs):
    frames = FrameRequester()
    config = GlobeConfig(size=400, rotation_speed=speed, asset_path="world.json", collection_key=KEY)
    return frames, GlobeController(config, source, frames, **kwargs)


def test_loading_then_ready(sample_asset):
    source = StubSource.ready(sample_asset)
    states = []
    frames, ctl = _controller(source, on_state=states.append)

    assert ctl.state is RenderState.IDLE
    ctl.activate()
    assert ctl.state is RenderState.LOADING
    assert ctl.status_text == "Loading globe data..."
    assert source.paths == ["world.json"]

    frames.run_pending()
    assert ctl.state is RenderState.READY
    assert ctl.status_text is None
    assert ctl.scheduler is not None and ctl.scheduler.running
    assert ctl.current_frame is not None
    assert ctl.current_frame.rotation == 0.0
    assert ctl.current_frame.outline == ctl.outline
    assert states == [RenderState.LOADING, RenderState.READY]

    frames.run_pending()
    frames.run_pending()
    assert ctl.current_frame.rotation == 2.0
    assert ctl.current_frame.path
    assert source.paths == ["world.json"]


def test_frames_reach_listener(sample_asset):
    seen = []
    frames, ctl = _controller(StubSource.ready(sample_asset), speed=0.5, on_frame=seen.append)
    ctl.activate()
    for _ in range(4):
        frames.run_pending()
    assert [f.rotation for f in seen] == [0.0, 0.5, 1.0, 1.5]


def test_missing_collection_fails_without_scheduler():
    asset = make_topology([[[0, 0], [1, 0], [1, 1], [0, 0]]], [], key="something_else")
    projector = CountingProjector()
    frames, ctl = _controller(StubSource.ready(asset), projector=projector)
    ctl.activate()
    for _ in range(5):
        frames.run_pending()

    assert ctl.state is RenderState.FAILED
    assert ctl.error == "Invalid TopoJSON data structure"
    assert ctl.status_text == "Error: Invalid TopoJSON data structure"
    assert KEY in ctl.error_detail
    assert ctl.scheduler is None
    assert ctl.current_frame is None
    assert projector.calls == 0
    assert frames.pending == 0


def test_fetch_error_fails():
    frames, ctl = _controller(StubSource.failing(FetchError("world.json", "file not found")))
    ctl.activate()
    frames.run_pending()
    assert ctl.state is RenderState.FAILED
    assert ctl.error == "Failed to load TopoJSON: file not found"
    assert ctl.scheduler is None


def test_unexpected_fetch_exception_is_reported():
    frames, ctl = _controller(StubSource.failing(RuntimeError("disk on fire")))
    ctl.activate()
    frames.run_pending()
    assert ctl.state is RenderState.FAILED
    assert "disk on fire" in ctl.error


def test_waits_for_pending_fetch(sample_asset):
    fut: Future = Future()
    frames, ctl = _controller(StubSource(fut))
    ctl.activate()
    for _ in range(3):
        frames.run_pending()
    assert ctl.state is RenderState.LOADING
    fut.set_result(sample_asset)
    frames.run_pending()
    assert ctl.state is RenderState.READY


def test_deactivate_stops_rendering(sample_asset):
    projector = CountingProjector()
    frames, ctl = _controller(StubSource.ready(sample_asset), projector=projector)
    ctl.activate()
    frames.run_pending()
    frames.run_pending()
    calls = projector.calls
    last = ctl.current_frame

    ctl.deactivate()
    assert not ctl.scheduler.running
    for _ in range(5):
        frames.run_pending()
    assert projector.calls == calls
    assert ctl.current_frame is last
    assert frames.pending == 0


def test_deactivate_right_after_ready_leaks_no_scheduled_frame(sample_asset):
    projector = CountingProjector()
    frames, ctl = _controller(StubSource.ready(sample_asset), projector=projector)
    ctl.activate()
    frames.run_pending()  # decode + first frame
    assert projector.calls == 1
    ctl.deactivate()
    for _ in range(5):
        frames.run_pending()
    assert projector.calls == 1


def test_late_fetch_after_deactivate_is_ignored(sample_asset):
    fut: Future = Future()
    source = StubSource(fut)
    frames, ctl = _controller(source)
    ctl.activate()
    frames.run_pending()
    ctl.deactivate()
    fut.set_result(sample_asset)
    for _ in range(3):
        frames.run_pending()
    assert ctl.state is RenderState.LOADING
    assert ctl.geometry is None
    assert ctl.scheduler is None
    assert source.paths == ["world.json"]


def test_single_activation_only(sample_asset):
    frames, ctl = _controller(StubSource.ready(sample_asset))
    ctl.activate()
    ctl.deactivate()
    with pytest.raises(RuntimeError):
        ctl.activate()


def test_degenerate_feature_is_dropped_not_fatal():
    asset = make_topology(
        [
            [[0, 0], [10, 0], [10, 10], [0, 0]],
            [[20, 20], [21, 21], [20, 20]],
        ],
        [
            {"type": "Polygon", "id": "ok", "arcs": [[0]]},
            {"type": "Polygon", "id": "sliver", "arcs": [[1]]},
        ],
        key=KEY,
    )
    frames, ctl = _controller(StubSource.ready(asset))
    ctl.activate()
    frames.run_pending()
    assert ctl.state is RenderState.READY
    assert ctl.current_frame.dropped == ("sliver",)
    assert ctl.current_frame.path.to_svg().count("M") == 1


def test_with_real_file_source(tmp_path, sample_asset):
    (tmp_path / "world.json").write_text(json.dumps(sample_asset), encoding="utf-8")
    source = FileAssetSource(root=tmp_path)
    frames, ctl = _controller(source)
    try:
        ctl.activate()
        deadline = time.monotonic() + 5.0
        while ctl.state is RenderState.LOADING and time.monotonic() < deadline:
            frames.run_pending()
            time.sleep(0.005)
        assert ctl.state is RenderState.READY
        assert len(ctl.geometry) == 8
    finally:
        ctl.deactivate()
        source.close()


def test_config_validation():
    with pytest.raises(ValueError):
        GlobeConfig(size=0)
    with pytest.raises(ValueError):
        GlobeConfig(rotation_speed=float("nan"))
    with pytest.raises(ValueError):
        GlobeConfig(collection_key="")
    assert GlobeConfig().size == 400
    assert GlobeConfig().rotation_speed == 0.3


class _RaisingSource:
    def __init__(self, exc):
        self.exc = exc
        self.calls = 0

    def fetch(self, path):
        self.calls += 1
        raise self.exc


@pytest.mark.parametrize(
    "exc, text",
    [
        (FetchError("world.json", "file not found"), "Failed to load TopoJSON: file not found"),
        (RuntimeError("no executor"), "Failed to load TopoJSON: no executor"),
    ],
)
def test_fetch_raising_immediately_fails(exc, text):
    source = _RaisingSource(exc)
    frames, ctl = _controller(source)
    ctl.activate()
    assert ctl.state is RenderState.FAILED
    assert ctl.error == text
    assert source.calls == 1
    assert frames.pending == 0
