# tests/test_path.py
"""
Path emission: command layout, SVG text, matplotlib path codes.
"""
from __future__ import annotations

import numpy as np
import pytest

from spinglobe.core.geometry import ProjectedFeature, ProjectedGeometry, as_ring
from spinglobe.core.path import CLOSE, LINE, MOVE, PathDescriptor, emit, emit_rings
from spinglobe.core.projection import project, sphere_outline

TRIANGLE = as_ring([(0, 0), (10, 0), (10, 10), (0, 0)])
SQUARE = as_ring([(20, 20), (30, 20), (30, 30), (20, 30), (20, 20)])


def _projected(*rings_by_feature) -> ProjectedGeometry:
    feats = tuple(ProjectedFeature(id=i, rings=tuple(rings)) for i, rings in enumerate(rings_by_feature))
    return ProjectedGeometry(features=feats, outline=sphere_outline(400), rotation=0.0)


def test_empty_geometry_gives_empty_descriptor():
    path = emit(_projected())
    assert not path
    assert len(path) == 0
    assert path.to_svg() == ""
    assert path.subpaths() == []


def test_feature_without_rings_is_fine():
    assert emit(_projected([])).to_svg() == ""


def test_single_ring_commands():
    path = emit(_projected([TRIANGLE]))
    assert [c.op for c in path.commands] == [MOVE, LINE, LINE, CLOSE]
    assert path.to_svg() == "M0,0L10,0L10,10Z"


def test_rings_of_all_features_become_subpaths():
    path = emit(_projected([TRIANGLE], [SQUARE]))
    svg = path.to_svg()
    assert svg.count("M") == 2
    assert svg.count("Z") == 2
    assert svg == "M0,0L10,0L10,10ZM20,20L30,20L30,30L20,30Z"
    assert path.subpaths() == [
        [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)],
        [(20.0, 20.0), (30.0, 20.0), (30.0, 30.0), (20.0, 30.0)],
    ]


def test_open_ring_is_still_closed_by_the_descriptor():
    path = emit_rings([as_ring([(0, 0), (5, 0), (5, 5)])])
    assert path.to_svg() == "M0,0L5,0L5,5Z"


@pytest.mark.parametrize(
    "value, text",
    [(1.23456, "1.235"), (2.5, "2.5"), (3.0, "3"), (-0.0001, "0"), (-12.3456, "-12.346")],
)
def test_number_formatting(value, text):
    path = PathDescriptor(emit_rings([as_ring([(value, 0), (1, 1), (value, 0)])]).commands)
    assert path.to_svg().startswith(f"M{text},0")


def test_matplotlib_path_codes():
    from matplotlib.path import Path

    mpl = emit(_projected([TRIANGLE])).to_mpl_path()
    assert list(mpl.codes) == [Path.MOVETO, Path.LINETO, Path.LINETO, Path.CLOSEPOLY]
    np.testing.assert_array_equal(mpl.vertices[-1], [0.0, 0.0])


def test_empty_matplotlib_path():
    assert len(PathDescriptor().to_mpl_path().vertices) == 0


# --------------------------------------------------------------------------- #
# Through the projector
# --------------------------------------------------------------------------- #

def test_full_turn_gives_the_same_path(sample_geometry):
    a = emit(project(sample_geometry, 0.0, 400)).to_svg()
    b = emit(project(sample_geometry, 360.0, 400)).to_svg()
    assert a == b
    assert a


@pytest.mark.parametrize("rotation", [0.0, 90.0, 200.0, 315.0])
def test_no_subpath_is_shorter_than_a_triangle(sample_geometry, rotation):
    path = emit(project(sample_geometry, rotation, 400))
    for sub in path.subpaths():
        assert len(sub) >= 3
    assert sum(1 for _ in path.points()) == sum(len(s) for s in path.subpaths())
