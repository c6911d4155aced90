# spinglobe/core/geometry.py
"""
Data model shared by the decoder, the projector and the path emitter.

Rings are (n, 2) float arrays. On the sphere the columns are
(longitude, latitude) in degrees; after projection they are plane (x, y)
pixel coordinates with y pointing down.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

Ring = NDArray[np.float64]

MIN_RING_POINTS = 4


def as_ring(points: Any) -> Ring:
    """Coerce a sequence of coordinate pairs into a (n, 2) float array."""
    arr = np.asarray(points, dtype=float)
    if arr.size == 0:
        return np.zeros((0, 2), dtype=float)
    if arr.ndim != 2 or arr.shape[1] < 2:
        raise ValueError(f"expected (n, 2) coordinates, got shape {arr.shape}")
    return arr[:, :2]


def is_closed(ring: Ring) -> bool:
    return len(ring) > 0 and bool(np.array_equal(ring[0], ring[-1]))


@dataclass(frozen=True)
class Feature:
    """One landmass (country) with all of its rings, holes included."""
    id: Optional[Any]
    rings: Tuple[Ring, ...]
    properties: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.rings)


@dataclass(frozen=True)
class GeometryCollection:
    """Decoded, independent features. Never mutated after decoding."""
    features: Tuple[Feature, ...]

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)

    def by_id(self, feature_id: Any) -> Optional[Feature]:
        for feat in self.features:
            if feat.id == feature_id:
                return feat
        return None


@dataclass(frozen=True)
class ProjectedFeature:
    id: Optional[Any]
    rings: Tuple[Ring, ...]


@dataclass(frozen=True)
class SphereOutline:
    """Circle covered by the whole sphere on the drawing surface."""
    cx: float
    cy: float
    radius: float


@dataclass(frozen=True)
class ProjectedGeometry:
    """
    One frame worth of plane geometry. Features keep the input order; rings
    that ended up entirely on the far side are simply absent.
    """
    features: Tuple[ProjectedFeature, ...]
    outline: SphereOutline
    rotation: float
    dropped: Tuple[Any, ...] = ()

    def rings(self) -> Iterator[Ring]:
        for feat in self.features:
            yield from feat.rings

    def point_count(self) -> int:
        return sum(len(r) for r in self.rings())
