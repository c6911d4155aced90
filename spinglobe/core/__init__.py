# spinglobe/core/__init__.py
"""
Renderer core: topology decoding, projection, path emission, scheduling and
the lifecycle controller. Nothing in here imports pygame.
"""
from .errors import DecodeError, FetchError, GlobeError, ProjectionDegenerate
from .geometry import Feature, GeometryCollection, ProjectedGeometry, SphereOutline
from .topology import decode
from .projection import project, sphere_outline
from .path import PathDescriptor, emit
from .scheduler import FrameRequester, RotationScheduler, RotationState
from .controller import GlobeController, GlobeFrame, RenderState

__all__ = [
    "DecodeError",
    "FetchError",
    "GlobeError",
    "ProjectionDegenerate",
    "Feature",
    "GeometryCollection",
    "ProjectedGeometry",
    "SphereOutline",
    "decode",
    "project",
    "sphere_outline",
    "PathDescriptor",
    "emit",
    "FrameRequester",
    "RotationScheduler",
    "RotationState",
    "GlobeController",
    "GlobeFrame",
    "RenderState",
]
