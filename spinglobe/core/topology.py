# spinglobe/core/topology.py
"""
TopoJSON decoding: shared arcs -> independent polygon rings.

A topology stores every boundary once in `arcs`. Geometries reference arcs by
signed index; a negative index `i` means arc `~i` walked backwards. Rings are
rebuilt by concatenating the referenced arcs, dropping the junction point the
previous arc already contributed.

Usage
-----
    from spinglobe.core.topology import decode
    world = decode(asset, "ne_110m_admin_0_countries")
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import DecodeError
from .geometry import Feature, GeometryCollection, Ring

log = logging.getLogger(__name__)

__all__ = ["decode", "decode_arcs", "stitch_ring"]

_AREA_TYPES = ("Polygon", "MultiPolygon")


def decode(asset: Any, collection_key: str) -> GeometryCollection:
    """
    Decode the object named `collection_key` of a topology into features.

    Raises DecodeError when the asset does not look like a topology, the key is
    missing, or any geometry references arcs that do not exist.
    """
    if not isinstance(asset, Mapping):
        raise DecodeError(f"topology must be a mapping, got {type(asset).__name__}")

    objects = asset.get("objects")
    if not isinstance(objects, Mapping):
        raise DecodeError("topology has no 'objects' mapping")
    if collection_key not in objects:
        raise DecodeError(f"topology has no object named {collection_key!r}")

    arcs = decode_arcs(asset.get("arcs"), asset.get("transform"))
    obj = objects[collection_key]
    if not isinstance(obj, Mapping):
        raise DecodeError(f"object {collection_key!r} is not a geometry")

    if obj.get("type") == "GeometryCollection":
        members = obj.get("geometries")
        if not isinstance(members, list):
            raise DecodeError(f"collection {collection_key!r} has no 'geometries' list")
        features = tuple(_feature(g, arcs) for g in members)
    else:
        features = (_feature(obj, arcs),)

    log.debug("Decoded %d features from %r (%d arcs)", len(features), collection_key, len(arcs))
    return GeometryCollection(features=features)


# --------------------------------------------------------------------------- #
# Arcs
# --------------------------------------------------------------------------- #

def decode_arcs(raw_arcs: Any, transform: Optional[Any] = None) -> List[Ring]:
    """
    Return every arc as an absolute (n, 2) array.

    With a `transform` the positions are quantized and delta encoded, so they
    are summed cumulatively before scale/translate is applied.
    """
    if not isinstance(raw_arcs, list):
        raise DecodeError("topology has no 'arcs' list")

    scale = translate = None
    if transform is not None:
        try:
            scale = np.asarray(transform["scale"], dtype=float)[:2]
            translate = np.asarray(transform["translate"], dtype=float)[:2]
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"malformed transform: {e}") from e
        if scale.shape != (2,) or translate.shape != (2,):
            raise DecodeError("transform scale/translate must be pairs")

    arcs: List[Ring] = []
    for idx, raw in enumerate(raw_arcs):
        try:
            pts = np.asarray(raw, dtype=float)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"arc {idx} is not a list of positions: {e}") from e
        if pts.ndim != 2 or pts.shape[0] == 0 or pts.shape[1] < 2:
            raise DecodeError(f"arc {idx} is not a list of positions")
        pts = pts[:, :2]
        if scale is not None:
            pts = np.cumsum(pts, axis=0) * scale + translate
        arcs.append(pts)
    return arcs


def _arc(arcs: Sequence[Ring], index: Any) -> Ring:
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        raise DecodeError(f"arc reference {index!r} is not an integer")
    i = int(index)
    real = ~i if i < 0 else i
    if real >= len(arcs):
        raise DecodeError(f"arc reference {i} out of range ({len(arcs)} arcs)")
    return arcs[real][::-1] if i < 0 else arcs[real]


def stitch_ring(arcs: Sequence[Ring], refs: Any) -> Ring:
    """Concatenate the referenced arcs into one ring."""
    if not isinstance(refs, list):
        raise DecodeError("ring must be a list of arc references")
    if not refs:
        return np.zeros((0, 2), dtype=float)
    pieces = [_arc(arcs, ref) for ref in refs]
    # each arc starts where the previous one ended; keep that point once
    parts = [p[:-1] for p in pieces[:-1]] + [pieces[-1]]
    return np.concatenate(parts, axis=0)


# --------------------------------------------------------------------------- #
# Geometries
# --------------------------------------------------------------------------- #

def _polygon_rings(arcs: Sequence[Ring], polygon: Any) -> Iterator[Ring]:
    if not isinstance(polygon, list):
        raise DecodeError("polygon must be a list of rings")
    for refs in polygon:
        yield stitch_ring(arcs, refs)


def _geometry_rings(geom: Mapping, arcs: Sequence[Ring]) -> Iterator[Ring]:
    gtype = geom.get("type")
    if gtype is None:
        return
    if gtype == "Polygon":
        yield from _polygon_rings(arcs, geom.get("arcs"))
    elif gtype == "MultiPolygon":
        polygons = geom.get("arcs")
        if not isinstance(polygons, list):
            raise DecodeError("MultiPolygon must hold a list of polygons")
        for polygon in polygons:
            yield from _polygon_rings(arcs, polygon)
    elif gtype == "GeometryCollection":
        members = geom.get("geometries")
        if not isinstance(members, list):
            raise DecodeError("nested GeometryCollection has no 'geometries' list")
        for member in members:
            if not isinstance(member, Mapping):
                raise DecodeError("geometry must be a mapping")
            yield from _geometry_rings(member, arcs)
    else:
        raise DecodeError(
            f"unsupported geometry type {gtype!r}; expected one of {_AREA_TYPES}"
        )


def _feature(geom: Any, arcs: Sequence[Ring]) -> Feature:
    if not isinstance(geom, Mapping):
        raise DecodeError("geometry must be a mapping")
    props = geom.get("properties") or {}
    if not isinstance(props, Mapping):
        raise DecodeError("geometry properties must be a mapping")
    rings: Tuple[Ring, ...] = tuple(_geometry_rings(geom, arcs))
    return Feature(id=geom.get("id"), rings=rings, properties=dict(props))
