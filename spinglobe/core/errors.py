# spinglobe/core/errors.py
"""
Exception taxonomy for the globe renderer.

FetchError and DecodeError are terminal for a controller instance.
ProjectionDegenerate is absorbed per feature by the projector.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class GlobeError(Exception):
    """Base class for every error raised by spinglobe."""


class FetchError(GlobeError):
    """The map asset could not be acquired (missing file, network, bad JSON)."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{reason} ({path})")
        self.path = path
        self.reason = reason


class DecodeErrorKind(Enum):
    INVALID_STRUCTURE = "invalid_structure"


class DecodeError(GlobeError):
    """The asset does not have the shape of a topology with the wanted collection."""

    def __init__(self, message: str, kind: DecodeErrorKind = DecodeErrorKind.INVALID_STRUCTURE) -> None:
        super().__init__(message)
        self.kind = kind


class ProjectionDegenerate(GlobeError):
    """A feature holds a ring that cannot be projected (too short or not closed)."""

    def __init__(self, feature_id: Optional[Any], reason: str) -> None:
        super().__init__(f"feature {feature_id!r}: {reason}")
        self.feature_id = feature_id
        self.reason = reason
