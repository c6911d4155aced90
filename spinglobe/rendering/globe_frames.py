# spinglobe/rendering/globe_frames.py
"""
Offline export of the rotating globe: PNG frame sequences and SVG snapshots.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Generator, Optional, Set

from spinglobe.core.controller import GlobeFrame
from spinglobe.core.geometry import GeometryCollection
from spinglobe.core.path import emit
from spinglobe.core.projection import project
from spinglobe.utils import settings

log = logging.getLogger(__name__)

__all__ = ["build_frame", "render_globe_frames", "svg_document", "write_svg"]


def build_frame(
    geometry: GeometryCollection,
    rotation: float,
    size_px: float,
    *,
    reported: Optional[Set[Any]] = None,
) -> GlobeFrame:
    """
    Project and emit one frame outside of any scheduler.

    Dropped degenerate features are logged at WARNING, once per id when a
    `reported` set is shared across calls.
    """
    projected = project(geometry, rotation, size_px)
    fresh = [fid for fid in projected.dropped if reported is None or fid not in reported]
    if fresh:
        if reported is not None:
            reported.update(fresh)
        log.warning("Dropped %d degenerate feature(s): %s", len(fresh), sorted(map(str, fresh)))
    return GlobeFrame(
        path=emit(projected),
        outline=projected.outline,
        rotation=rotation,
        dropped=projected.dropped,
    )


def _render_png(frame: GlobeFrame, filename: str, size_px: int) -> None:
    """Renders and saves a single frame with matplotlib."""
    import matplotlib.pyplot as plt
    from matplotlib.patches import Circle, PathPatch

    dpi = 100
    fig = plt.figure(figsize=(size_px / dpi, size_px / dpi), dpi=dpi)
    try:
        ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
        ax.set_xlim(0, size_px)
        ax.set_ylim(size_px, 0)  # plane coordinates grow downwards
        ax.set_aspect("equal")
        ax.axis("off")

        o = frame.outline
        ax.add_patch(Circle((o.cx, o.cy), o.radius, facecolor=settings.WATER_COLOR, edgecolor="none"))
        if frame.path:
            ax.add_patch(PathPatch(
                frame.path.to_mpl_path(),
                facecolor=settings.LAND_COLOR,
                edgecolor=settings.BORDER_COLOR,
                linewidth=settings.BORDER_WIDTH,
            ))
        fig.savefig(filename, dpi=dpi, transparent=True)
    except OSError as e:
        log.error("Error saving frame %s: %s", filename, e)
    finally:
        # Close the figure to free up memory
        plt.close(fig)


def render_globe_frames(
    geometry: GeometryCollection,
    out_dir: str = settings.GLOBE_FRAMES_DIR,
    *,
    frames: int = settings.GLOBE_NUM_FRAMES,
    size_px: int = settings.GLOBE_SIZE,
) -> Generator[float, None, None]:
    """
    Generates and saves a series of PNG images of one full turn of the globe.

    Args:
        geometry: Decoded landmasses.
        out_dir: Directory receiving frame_000.png, frame_001.png, ...
        frames: Number of frames in the turn.
        size_px: Edge length of each square image.
    Yields:
        A float representing the progress of the generation (from 0.0 to 1.0).
    """
    if frames <= 0:
        raise ValueError(f"frames must be positive, got {frames}")

    out = Path(out_dir)
    if out.is_dir() and len(list(out.glob("frame_*.png"))) >= frames:
        log.info("Globe frames already present in '%s'. Skipping generation.", out)
        return

    os.makedirs(out, exist_ok=True)
    log.info("Generating %d globe frames in '%s'...", frames, out)
    reported: Set[Any] = set()

    for i in range(frames):
        frame = build_frame(geometry, 360.0 * i / frames, size_px, reported=reported)
        _render_png(frame, str(out / f"frame_{str(i).zfill(3)}.png"), size_px)
        # Yield the progress after each frame is saved
        yield (i + 1) / frames

    log.info("Done! All %d frames have been generated.", frames)


def svg_document(frame: GlobeFrame, size: float, *, padding_ratio: float = settings.GLOBE_PADDING_RATIO) -> str:
    """Standalone SVG: water disc under the landmass path, padded viewBox."""
    pad = size * padding_ratio
    o = frame.outline
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size:g}" height="{size:g}" '
        f'viewBox="-{pad:g} -{pad:g} {size + 2 * pad:g} {size + 2 * pad:g}">\n'
        f'  <circle cx="{o.cx:g}" cy="{o.cy:g}" r="{o.radius:g}" fill="{settings.WATER_COLOR}"/>\n'
        f'  <path d="{frame.path.to_svg()}" fill="{settings.LAND_COLOR}" '
        f'stroke="{settings.BORDER_COLOR}" stroke-width="{settings.BORDER_WIDTH:g}"/>\n'
        f"</svg>\n"
    )


def write_svg(frame: GlobeFrame, path: str | Path, size: float) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(svg_document(frame, size), encoding="utf-8")
    log.info("Wrote SVG snapshot to %s", p)
    return p
