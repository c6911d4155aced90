# spinglobe/core/path.py
"""
Serialise projected rings into a single drawable path.

Every ring becomes one subpath: move to its first point, line to each
following point, close. Holes and islands are just more subpaths; the fill
rule of the drawing surface sorts them out.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from .geometry import ProjectedGeometry, Ring

__all__ = ["PathCommand", "PathDescriptor", "emit", "emit_rings"]

MOVE = "M"
LINE = "L"
CLOSE = "Z"


class PathCommand(NamedTuple):
    op: str
    x: Optional[float] = None
    y: Optional[float] = None


def _fmt(value: float, digits: int) -> str:
    text = f"{value:.{digits}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


@dataclass(frozen=True)
class PathDescriptor:
    """Immutable move/line/close command buffer for one frame."""
    commands: Tuple[PathCommand, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def to_svg(self, digits: int = 3) -> str:
        """SVG `d` attribute, e.g. 'M10,20L30,40L10,40Z'."""
        parts: List[str] = []
        for cmd in self.commands:
            if cmd.op == CLOSE:
                parts.append(CLOSE)
            else:
                parts.append(f"{cmd.op}{_fmt(cmd.x, digits)},{_fmt(cmd.y, digits)}")
        return "".join(parts)

    def subpaths(self) -> List[List[Tuple[float, float]]]:
        """Point lists, one per closed subpath (closing point not repeated)."""
        out: List[List[Tuple[float, float]]] = []
        current: List[Tuple[float, float]] = []
        for cmd in self.commands:
            if cmd.op == MOVE:
                if current:
                    out.append(current)
                current = [(cmd.x, cmd.y)]
            elif cmd.op == LINE:
                current.append((cmd.x, cmd.y))
            elif current:
                out.append(current)
                current = []
        if current:
            out.append(current)
        return out

    def points(self) -> Iterator[Tuple[float, float]]:
        for cmd in self.commands:
            if cmd.op != CLOSE:
                yield (cmd.x, cmd.y)

    def to_mpl_path(self):
        """matplotlib Path with MOVETO/LINETO/CLOSEPOLY codes."""
        from matplotlib.path import Path  # heavy; only the exporter needs it

        vertices: List[Tuple[float, float]] = []
        codes: List[int] = []
        start: Tuple[float, float] = (0.0, 0.0)
        for cmd in self.commands:
            if cmd.op == MOVE:
                start = (cmd.x, cmd.y)
                vertices.append(start)
                codes.append(Path.MOVETO)
            elif cmd.op == LINE:
                vertices.append((cmd.x, cmd.y))
                codes.append(Path.LINETO)
            else:
                vertices.append(start)
                codes.append(Path.CLOSEPOLY)
        if not vertices:
            return Path(np.zeros((0, 2)))
        return Path(np.asarray(vertices, dtype=float), codes)


def emit_rings(rings: Iterable[Ring]) -> PathDescriptor:
    commands: List[PathCommand] = []
    for ring in rings:
        n = len(ring)
        if n == 0:
            continue
        if n > 1 and np.array_equal(ring[0], ring[-1]):
            n -= 1
        commands.append(PathCommand(MOVE, float(ring[0][0]), float(ring[0][1])))
        for i in range(1, n):
            commands.append(PathCommand(LINE, float(ring[i][0]), float(ring[i][1])))
        commands.append(PathCommand(CLOSE))
    return PathDescriptor(tuple(commands))


def emit(geometry: ProjectedGeometry) -> PathDescriptor:
    """All rings of all features, in order, as one descriptor."""
    return emit_rings(geometry.rings())
