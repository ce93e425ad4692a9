"""Adjacency and coplanarity tests between vertical planes.

All tests work on the x-y projection of each plane's top edge
(left_up -> right_up). The top edge is held as an implicit line, so walls
parallel to either axis need no special handling.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from roomshell.core.contracts import CombineConfig
from roomshell.core.errors import DegenerateGeometryError
from roomshell.core.plane import Plane
from roomshell.utils.geometry import (
    Line2D,
    angle_between,
    line_through_points,
    point_line_distance,
    project_onto_line,
    to_xy,
)

logger = logging.getLogger(__name__)

# Max disagreement (meters) between the two edge-distance estimates
SANITY_TOLERANCE = 1.0

_SLACK = 1e-9


def top_edge_line(plane: Plane) -> Line2D:
    """x-y line through the plane's two top corners."""
    try:
        return line_through_points(to_xy(plane.left_up), to_xy(plane.right_up))
    except DegenerateGeometryError as e:
        raise DegenerateGeometryError(f"Zero-length top edge on {plane!r}") from e


def edge_distance(a: Plane, b: Plane) -> float:
    """Gap between a's top-edge line and b's top corners, averaged over both corners."""
    line = top_edge_line(a)
    dist1 = point_line_distance(to_xy(b.left_up), line)
    dist2 = point_line_distance(to_xy(b.right_up), line)
    if abs(dist1 - dist2) > SANITY_TOLERANCE:
        logger.warning(
            f"Edge distance estimates disagree ({dist1:.3f} vs {dist2:.3f}) "
            f"between {a!r} and {b!r}; planes may not be parallel"
        )
    return (dist1 + dist2) / 2


def edges_overlap(a: Plane, b: Plane) -> bool:
    """Directional: does b project onto a's top edge?

    The feet of the perpendiculars from b's top corners onto a's top-edge line
    are tested against a's top-edge x interval and y interval. Either foot
    landing in either interval counts.
    """
    line = top_edge_line(a)
    a_left, a_right = to_xy(a.left_up), to_xy(a.right_up)
    x_lo, x_hi = min(a_left.x, a_right.x) - _SLACK, max(a_left.x, a_right.x) + _SLACK
    y_lo, y_hi = min(a_left.y, a_right.y) - _SLACK, max(a_left.y, a_right.y) + _SLACK

    for corner in (b.left_up, b.right_up):
        foot = project_onto_line(to_xy(corner), line)
        if x_lo <= foot.x <= x_hi or y_lo <= foot.y <= y_hi:
            return True
    return False


def coplanar_overlap(a: Plane, b: Plane) -> bool:
    """Symmetric overlap: true if either plane projects onto the other."""
    return edges_overlap(a, b) or edges_overlap(b, a)


def normal_angle(a: Plane, b: Plane) -> float:
    """Angle in degrees between the two unit normals."""
    return angle_between(a.normal, b.normal)


def is_connected(a: Plane, b: Plane, config: CombineConfig) -> bool:
    """Connection predicate used by group clustering.

    Raises:
        DegenerateGeometryError: when either top edge has zero length.
    """
    if normal_angle(a, b) > config.min_angle_normal_diff:
        return False
    if edge_distance(a, b) > config.min_planes_dist:
        return False
    return coplanar_overlap(a, b)


def find_near_planes(source: int, planes: Sequence[Plane], threshold: float) -> list[int]:
    """Indices of planes whose top corners come within `threshold` of the source's.

    Distances are taken in x-y (z flattened). The source itself is never
    returned.
    """
    src = planes[source]
    src_corners = (to_xy(src.left_up), to_xy(src.right_up))
    near = []
    for i, plane in enumerate(planes):
        if i == source:
            continue
        corners = (to_xy(plane.left_up), to_xy(plane.right_up))
        gap = min(
            math.hypot(s.x - t.x, s.y - t.y) for s in src_corners for t in corners
        )
        if gap <= threshold:
            near.append(i)
    return near
