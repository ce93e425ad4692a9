"""2D/3D geometry utilities: orientation tests, line algebra, point generators.

The segment primitives (`orientation`, `on_segment`, `segments_intersect`)
work on the x-y projection only. They take `Point2D` (or any 2-sequence);
3D points must go through `to_xy()` first, and passing a 3-component point
raises ValueError.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from enum import IntEnum
from typing import NamedTuple

import numpy as np

from roomshell.core.errors import DegenerateGeometryError
from roomshell.core.pointcloud import WHITE, Color, PointCloud

logger = logging.getLogger(__name__)

_EPS = 1e-9


class Point2D(NamedTuple):
    x: float
    y: float


class Orientation2D(IntEnum):
    COLINEAR = 0
    CLOCKWISE = 1
    COUNTER_CLOCKWISE = 2


class Line2D(NamedTuple):
    """Implicit line a*x + b*y = c with (a, b) a unit normal."""

    a: float
    b: float
    c: float


def to_xy(point: Sequence[float] | np.ndarray) -> Point2D:
    """Project a 3D (or 2D) point onto the x-y plane."""
    arr = np.asarray(point, dtype=float).ravel()
    if arr.size < 2:
        raise ValueError(f"Point needs at least x and y, got {arr.size} components")
    return Point2D(float(arr[0]), float(arr[1]))


def _as_2d(point: Sequence[float]) -> Point2D:
    if isinstance(point, Point2D):
        return point
    if len(point) != 2:
        raise ValueError(
            f"Expected an x-y point, got {len(point)} components; project with to_xy() first"
        )
    return Point2D(float(point[0]), float(point[1]))


# ---------------------------------------------------------------------------
# Segment primitives (x-y only)
# ---------------------------------------------------------------------------

def orientation(p: Sequence[float], q: Sequence[float], r: Sequence[float]) -> Orientation2D:
    """Orientation of the ordered triplet (p, q, r)."""
    p, q, r = _as_2d(p), _as_2d(q), _as_2d(r)
    val = (q.y - p.y) * (r.x - q.x) - (q.x - p.x) * (r.y - q.y)
    if val == 0:
        return Orientation2D.COLINEAR
    return Orientation2D.CLOCKWISE if val > 0 else Orientation2D.COUNTER_CLOCKWISE


def on_segment(p: Sequence[float], q: Sequence[float], r: Sequence[float]) -> bool:
    """True if q lies within the bounding box of segment pr.

    Only meaningful when p, q, r are already known to be colinear.
    """
    p, q, r = _as_2d(p), _as_2d(q), _as_2d(r)
    return (
        min(p.x, r.x) <= q.x <= max(p.x, r.x)
        and min(p.y, r.y) <= q.y <= max(p.y, r.y)
    )


def segments_intersect(
    p1: Sequence[float], q1: Sequence[float],
    p2: Sequence[float], q2: Sequence[float],
) -> bool:
    """Test whether segments p1q1 and p2q2 intersect in the x-y plane."""
    o1 = orientation(p1, q1, p2)
    o2 = orientation(p1, q1, q2)
    o3 = orientation(p2, q2, p1)
    o4 = orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True

    # Colinear special cases
    if o1 == Orientation2D.COLINEAR and on_segment(p1, p2, q1):
        return True
    if o2 == Orientation2D.COLINEAR and on_segment(p1, q2, q1):
        return True
    if o3 == Orientation2D.COLINEAR and on_segment(p2, p1, q2):
        return True
    if o4 == Orientation2D.COLINEAR and on_segment(p2, q1, q2):
        return True
    return False


# ---------------------------------------------------------------------------
# Implicit lines
# ---------------------------------------------------------------------------

def line_through(point: Sequence[float], direction: Sequence[float]) -> Line2D:
    """Line through `point` with the given x-y direction."""
    p = _as_2d(point)
    dx, dy = float(direction[0]), float(direction[1])
    length = math.hypot(dx, dy)
    if length < _EPS:
        raise DegenerateGeometryError(
            f"Zero-length direction ({dx:.3g}, {dy:.3g}) through ({p.x:.3f}, {p.y:.3f})"
        )
    a, b = -dy / length, dx / length
    return Line2D(a, b, a * p.x + b * p.y)


def line_through_points(p: Sequence[float], q: Sequence[float]) -> Line2D:
    p, q = _as_2d(p), _as_2d(q)
    return line_through(p, (q.x - p.x, q.y - p.y))


def intersect_lines(l1: Line2D, l2: Line2D) -> Point2D:
    """Solve the 2x2 system of two implicit lines."""
    A = np.array([[l1.a, l1.b], [l2.a, l2.b]])
    det = l1.a * l2.b - l2.a * l1.b
    # Unit normals: |det| is the sine of the angle between the lines
    if abs(det) < 1e-6:
        raise DegenerateGeometryError(f"Parallel or coincident lines (det={det:.2e})")
    x, y = np.linalg.solve(A, np.array([l1.c, l2.c]))
    return Point2D(float(x), float(y))


def point_line_distance(point: Sequence[float], line: Line2D) -> float:
    p = _as_2d(point)
    return abs(line.a * p.x + line.b * p.y - line.c)


def project_onto_line(point: Sequence[float], line: Line2D) -> Point2D:
    """Foot of the perpendicular from `point` onto `line`."""
    p = _as_2d(point)
    offset = line.a * p.x + line.b * p.y - line.c
    return Point2D(p.x - offset * line.a, p.y - offset * line.b)


def angle_between(n1: np.ndarray, n2: np.ndarray) -> float:
    """Angle in degrees between two (not necessarily unit) vectors."""
    norm = np.linalg.norm(n1) * np.linalg.norm(n2)
    if norm < _EPS:
        raise DegenerateGeometryError("Angle with a zero-length vector")
    cos_angle = float(np.dot(n1, n2) / norm)
    return math.degrees(math.acos(np.clip(cos_angle, -1.0, 1.0)))


# ---------------------------------------------------------------------------
# Point generators
# ---------------------------------------------------------------------------

def generate_line(
    p1: Sequence[float] | np.ndarray,
    p2: Sequence[float] | np.ndarray,
    density: float,
    color: Color = WHITE,
) -> PointCloud:
    """Evenly spaced points from p1 to p2 (inclusive).

    The count is round(|p2 - p1| * density); a zero count gives an empty cloud.
    """
    start = np.asarray(p1, dtype=float)
    end = np.asarray(p2, dtype=float)
    count = int(round(float(np.linalg.norm(end - start)) * density))
    if count <= 0:
        return PointCloud()
    return PointCloud.from_points(np.linspace(start, end, count), color)


def fill_quad(
    a0: np.ndarray, a1: np.ndarray,
    b0: np.ndarray, b1: np.ndarray,
    density: float,
    color: Color = WHITE,
) -> PointCloud:
    """Bilinear grid of points spanning segment a0-a1 and segment b0-b1.

    a0 pairs with b0 and a1 with b1. The grid has at least two samples in each
    direction so degenerate (zero-width) quads still produce their edges.
    """
    a0, a1, b0, b1 = (np.asarray(p, dtype=float) for p in (a0, a1, b0, b1))
    along = max(np.linalg.norm(a1 - a0), np.linalg.norm(b1 - b0))
    across = max(np.linalg.norm(b0 - a0), np.linalg.norm(b1 - a1))
    n_along = max(int(round(along * density)), 1) + 1
    n_across = max(int(round(across * density)), 1) + 1

    s = np.linspace(0.0, 1.0, n_along)[:, None]
    t = np.linspace(0.0, 1.0, n_across)[:, None, None]
    edge_a = a0 + s * (a1 - a0)
    edge_b = b0 + s * (b1 - b0)
    grid = (1.0 - t) * edge_a[None] + t * edge_b[None]
    return PointCloud.from_points(grid.reshape(-1, 3), color)


def fill_rectangle(
    corners: Sequence[np.ndarray],
    density: float,
    color: Color = WHITE,
) -> PointCloud:
    """Grid over a rectangle given as (left_up, left_down, right_up, right_down)."""
    left_up, left_down, right_up, right_down = corners
    return fill_quad(left_up, right_up, left_down, right_down, density, color)
