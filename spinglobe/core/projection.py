# spinglobe/core/projection.py
"""
Orthographic projection of a rotating unit sphere with horizon clipping.

The sphere turns about its polar axis by `rotation_deg` and is viewed from
outside along +z:

    lambda' = lon + rotation
    x = cos(lat) * sin(lambda')
    y = sin(lat)
    z = cos(lat) * cos(lambda')        (depth, visible when z >= 0)

Edges between consecutive vertices are great-circle arcs. An edge that
crosses the horizon is cut where the arc meets the z = 0 plane, and the
visible fragments of a ring are closed again by walking along the horizon
circle. This keeps every emitted ring closed, so fills never leak across the
limb of the globe.

The sphere is fitted to the viewport, not to the data: radius is
viewport_size / 2 and the centre is the middle of the square.
"""
from __future__ import annotations

import logging
import math
from typing import Any, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from spinglobe.utils import settings

from .errors import ProjectionDegenerate
from .geometry import (
    MIN_RING_POINTS,
    Feature,
    GeometryCollection,
    ProjectedFeature,
    ProjectedGeometry,
    Ring,
    SphereOutline,
)

log = logging.getLogger(__name__)

__all__ = ["project", "project_feature", "sphere_outline", "to_view_vectors", "HORIZON_STEP_DEG"]

HORIZON_STEP_DEG = settings.HORIZON_STEP_DEG

_TWO_PI = 2.0 * math.pi
_EPS = 1e-12
_HORIZON_EPS = 1e-12
_ANGLE_EPS = 1e-9


def sphere_outline(viewport_size: float) -> SphereOutline:
    """The full sphere's circle on the drawing surface; depends on size only."""
    if not viewport_size > 0:
        raise ValueError(f"viewport_size must be positive, got {viewport_size!r}")
    r = float(viewport_size) / 2.0
    return SphereOutline(cx=r, cy=r, radius=r)


def to_view_vectors(ring: Ring, rotation_deg: float) -> NDArray[np.float64]:
    """(lon, lat) degrees -> (n, 3) unit vectors in the viewer's frame."""
    lam = np.radians(ring[:, 0] + rotation_deg)
    phi = np.radians(ring[:, 1])
    cos_phi = np.cos(phi)
    return np.column_stack((cos_phi * np.sin(lam), np.sin(phi), cos_phi * np.cos(lam)))


# --------------------------------------------------------------------------- #
# Horizon clipping
# --------------------------------------------------------------------------- #

def _horizon_point(a: NDArray, b: NDArray) -> Tuple[float, float]:
    """
    Point where the great-circle arc a->b meets the horizon, as (x, y) on the
    unit circle. Exactly one of a, b has z < 0.
    """
    za, zb = abs(a[2]), abs(b[2])
    m = zb * a + za * b
    norm = math.hypot(m[0], m[1])
    if norm < _EPS:
        # one endpoint sits on the horizon, or the two are antipodal
        p = a if za <= zb else b
        norm = math.hypot(p[0], p[1])
        if norm < _EPS:
            return (1.0, 0.0)
        return (p[0] / norm, p[1] / norm)
    return (m[0] / norm, m[1] / norm)


def _winding(pts: NDArray) -> int:
    """
    +1 if the ring turns counter-clockwise seen from outside the sphere above
    its centroid, -1 otherwise. Rings are assumed smaller than a hemisphere.
    """
    centroid = pts.sum(axis=0)
    norm = float(np.linalg.norm(centroid))
    if norm < _EPS:
        return 1
    area = np.cross(pts, np.roll(pts, -1, axis=0)).sum(axis=0)
    return 1 if float(np.dot(area, centroid)) >= 0.0 else -1


def _fragments(pts: NDArray, visible: NDArray) -> List[List[Tuple[float, float]]]:
    """Split an open ring with at least one hidden vertex into visible runs."""
    # start on a hidden vertex so every run has both an entry and an exit
    start = int(np.argmin(visible))
    pts = np.roll(pts, -start, axis=0)
    visible = np.roll(visible, -start)
    n = len(pts)

    runs: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []
    for k in range(n):
        a, b = pts[k], pts[(k + 1) % n]
        va, vb = bool(visible[k]), bool(visible[(k + 1) % n])
        if va and vb:
            current.append((b[0], b[1]))
        elif va:
            current.append(_horizon_point(a, b))
            runs.append(current)
            current = []
        elif vb:
            current = [_horizon_point(a, b), (b[0], b[1])]
    return runs


def _sweep(start: float, end: float, direction: int) -> float:
    """Angle travelled along the circle from `start` to `end` in `direction`."""
    sweep = ((end - start) * direction) % _TWO_PI
    # an exit and entry at the same point must not turn into a full circle
    return 0.0 if sweep > _TWO_PI - _ANGLE_EPS else sweep


def _horizon_arc(start: float, end: float, direction: int, step: float) -> List[Tuple[float, float]]:
    """Interior points along the unit circle from angle `start` to `end`."""
    sweep = _sweep(start, end, direction)
    # a sweep of exactly k steps must not round up to k + 1
    count = int(math.ceil(sweep / step - _ANGLE_EPS)) - 1
    if count <= 0:
        return []
    inc = sweep / (count + 1)
    out = []
    for i in range(1, count + 1):
        t = start + direction * inc * i
        out.append((math.cos(t), math.sin(t)))
    return out


def _rejoin(runs: Sequence[List[Tuple[float, float]]], direction: int, step: float) -> List[NDArray]:
    """Close visible runs into rings by following the horizon between them."""
    entries = [math.atan2(run[0][1], run[0][0]) for run in runs]
    used = [False] * len(runs)
    rings: List[NDArray] = []

    for first in range(len(runs)):
        if used[first]:
            continue
        points: List[Tuple[float, float]] = []
        current = first
        while True:
            used[current] = True
            points.extend(runs[current])
            exit_x, exit_y = runs[current][-1]
            exit_angle = math.atan2(exit_y, exit_x)

            best, best_delta = first, math.inf
            for k, entry in enumerate(entries):
                if used[k] and k != first:
                    continue
                delta = _sweep(exit_angle, entry, direction)
                if delta < best_delta:
                    best, best_delta = k, delta

            points.extend(_horizon_arc(exit_angle, entries[best], direction, step))
            if best == first:
                break
            current = best

        points.append(points[0])
        rings.append(np.asarray(points, dtype=float))
    return rings


def _clip_ring(view: NDArray, step: float) -> List[NDArray]:
    """Closed view-frame ring -> closed rings of (x, y) on the unit disk."""
    pts = view[:-1].copy()
    # cos(90 deg) is not exactly 0: poles and the limb meridian land on the horizon
    pts[np.abs(pts[:, 2]) < _HORIZON_EPS, 2] = 0.0
    visible = pts[:, 2] >= 0.0
    if visible.all():
        return [view[:, :2].copy()]
    if not visible.any():
        return []
    runs = _fragments(pts, visible)
    return _rejoin(runs, _winding(pts), step)


def _distinct_points(ring: NDArray) -> int:
    return len(np.unique(np.round(ring[:-1], 9), axis=0))


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #

def _check_ring(feature: Feature, ring: Ring) -> None:
    if len(ring) < MIN_RING_POINTS:
        raise ProjectionDegenerate(feature.id, f"ring has {len(ring)} points, need {MIN_RING_POINTS}")
    if not np.allclose(ring[0], ring[-1], rtol=0.0, atol=1e-9):
        raise ProjectionDegenerate(feature.id, "ring is not closed")


def project_feature(
    feature: Feature,
    rotation_deg: float,
    outline: SphereOutline,
    *,
    step_deg: float = HORIZON_STEP_DEG,
) -> Tuple[Ring, ...]:
    """
    Project and clip every ring of one feature into plane coordinates.

    Raises ProjectionDegenerate if any ring is too short or not closed; the
    whole feature is then unusable.
    """
    for ring in feature.rings:
        _check_ring(feature, ring)

    step = math.radians(step_deg)
    out: List[Ring] = []
    for ring in feature.rings:
        for clipped in _clip_ring(to_view_vectors(ring, rotation_deg), step):
            if _distinct_points(clipped) < 3:
                continue
            plane = np.empty_like(clipped)
            plane[:, 0] = outline.cx + outline.radius * clipped[:, 0]
            plane[:, 1] = outline.cy - outline.radius * clipped[:, 1]
            out.append(plane)
    return tuple(out)


def project(geometry: GeometryCollection, rotation_deg: float, viewport_size: float) -> ProjectedGeometry:
    """
    Project a decoded collection for one frame.

    Features with degenerate rings are dropped (their ids are listed in
    `dropped`) and the rest of the globe is still produced.
    """
    outline = sphere_outline(viewport_size)
    rotation = math.fmod(float(rotation_deg), 360.0)

    features: List[ProjectedFeature] = []
    dropped: List[Any] = []
    for feat in geometry:
        try:
            rings = project_feature(feat, rotation, outline)
        except ProjectionDegenerate as e:
            log.debug("Skipping degenerate feature: %s", e)
            dropped.append(feat.id)
            continue
        features.append(ProjectedFeature(id=feat.id, rings=rings))

    return ProjectedGeometry(
        features=tuple(features),
        outline=outline,
        rotation=float(rotation_deg),
        dropped=tuple(dropped),
    )
