"""Plane entity: a point set with its plane equation and bounding rectangle.

The bounding rectangle ("corners") lives in an in-plane frame (u, v):

- non-horizontal planes: u = normalize(z x n) runs along the wall, v = n x u
  points upward, so "up" is always the larger-z side;
- horizontal planes: u is the x axis projected onto the plane, v = n x u.

left/right are the min/max extents along u, up/down the max/min along v.
Corners are cached and recomputed whenever the cloud or coefficients change.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import NamedTuple, Optional, Sequence

import numpy as np

from .errors import DegenerateGeometryError, InsufficientDataError
from .pointcloud import COMMON_PLANE_COLOR, Color, PointCloud
from roomshell.utils.geometry import fill_rectangle

logger = logging.getLogger(__name__)

_UNASSIGNED = -1


class Orientation(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class Corners(NamedTuple):
    left_up: np.ndarray
    left_down: np.ndarray
    right_up: np.ndarray
    right_down: np.ndarray


class _Frame(NamedTuple):
    anchor: np.ndarray
    u: np.ndarray
    v: np.ndarray
    s_min: float
    s_max: float
    t_min: float
    t_max: float


def classify_orientation(normal: np.ndarray) -> Orientation:
    """Horizontal when the normal's dominant axis is z, vertical otherwise."""
    ax, ay, az = np.abs(normal[:3])
    return Orientation.HORIZONTAL if az >= max(ax, ay) else Orientation.VERTICAL


def normalize_coefficients(coefficients: Sequence[float]) -> np.ndarray:
    """Scale (a, b, c, d) so that (a, b, c) has unit length."""
    abcd = np.asarray(coefficients, dtype=float).ravel()
    if abcd.size != 4:
        raise ValueError(f"Plane coefficients need 4 values, got {abcd.size}")
    norm = np.linalg.norm(abcd[:3])
    if norm < 1e-12 or not np.all(np.isfinite(abcd)):
        raise DegenerateGeometryError(f"Invalid plane normal {abcd[:3]}")
    return abcd / norm


class Plane:
    """A planar surface patch.

    Args:
        cloud: points belonging to the surface (owned, mutated in place).
        coefficients: (a, b, c, d) with a*x + b*y + c*z + d = 0; normalized here.
        group_index: cluster id, -1 when unassigned.
        color: colour tag; the cloud is not repainted unless `paint` is called.
    """

    def __init__(
        self,
        cloud: PointCloud,
        coefficients: Optional[Sequence[float]] = None,
        group_index: int = _UNASSIGNED,
        color: Color = COMMON_PLANE_COLOR,
    ):
        self.cloud = cloud
        self._coefficients = (
            normalize_coefficients(coefficients) if coefficients is not None else None
        )
        self.group_index = group_index
        self.color = color
        self._corners: Optional[Corners] = None

    def __repr__(self) -> str:
        orient = self.orientation.value if self._coefficients is not None else "unfit"
        return (
            f"Plane(points={len(self.cloud)}, orientation={orient}, "
            f"group={self.group_index})"
        )

    def __len__(self) -> int:
        return len(self.cloud)

    # -- equation -----------------------------------------------------------

    @property
    def coefficients(self) -> np.ndarray:
        if self._coefficients is None:
            raise InsufficientDataError("Plane has no fitted coefficients")
        return self._coefficients

    @coefficients.setter
    def coefficients(self, value: Sequence[float]) -> None:
        self._coefficients = normalize_coefficients(value)
        self._corners = None

    @property
    def has_coefficients(self) -> bool:
        return self._coefficients is not None

    @property
    def normal(self) -> np.ndarray:
        return self.coefficients[:3]

    @property
    def d(self) -> float:
        return float(self.coefficients[3])

    @property
    def orientation(self) -> Orientation:
        return classify_orientation(self.normal)

    def height_at_origin(self) -> float:
        """z where a horizontal plane crosses the z axis (z = -d / n_z)."""
        nz = self.normal[2]
        if abs(nz) < 1e-6:
            raise DegenerateGeometryError("Plane is vertical; it has no single height")
        return -self.d / nz

    # -- group --------------------------------------------------------------

    @property
    def is_grouped(self) -> bool:
        return self.group_index != _UNASSIGNED

    def assign_group(self, index: int) -> None:
        """Set the group id; a plane belongs to exactly one group for its lifetime."""
        if self.is_grouped and self.group_index != index:
            raise ValueError(
                f"Plane already in group {self.group_index}, cannot move to {index}"
            )
        self.group_index = index

    # -- corners ------------------------------------------------------------

    def _axes(self) -> tuple[np.ndarray, np.ndarray]:
        n = self.normal
        if self.orientation == Orientation.VERTICAL:
            u = np.cross([0.0, 0.0, 1.0], n)
        else:
            u = np.array([1.0, 0.0, 0.0]) - n[0] * n
        u /= np.linalg.norm(u)
        v = np.cross(n, u)
        return u, v / np.linalg.norm(v)

    def _frame(self) -> _Frame:
        pts = self.cloud.points
        if len(pts) == 0:
            raise InsufficientDataError("Cannot compute corners of an empty plane")
        n, d = self.normal, self.d
        u, v = self._axes()
        centroid = pts.mean(axis=0)
        anchor = centroid - (centroid @ n + d) * n
        rel = pts - anchor
        s, t = rel @ u, rel @ v
        return _Frame(anchor, u, v, float(s.min()), float(s.max()), float(t.min()), float(t.max()))

    @staticmethod
    def _rectangle(frame: _Frame, t_min: float, t_max: float) -> Corners:
        a, u, v = frame.anchor, frame.u, frame.v
        return Corners(
            left_up=a + frame.s_min * u + t_max * v,
            left_down=a + frame.s_min * u + t_min * v,
            right_up=a + frame.s_max * u + t_max * v,
            right_down=a + frame.s_max * u + t_min * v,
        )

    @property
    def corners(self) -> Corners:
        if self._corners is None:
            frame = self._frame()
            self._corners = self._rectangle(frame, frame.t_min, frame.t_max)
        return self._corners

    @property
    def left_up(self) -> np.ndarray:
        return self.corners.left_up

    @property
    def left_down(self) -> np.ndarray:
        return self.corners.left_down

    @property
    def right_up(self) -> np.ndarray:
        return self.corners.right_up

    @property
    def right_down(self) -> np.ndarray:
        return self.corners.right_down

    @property
    def top_z(self) -> float:
        return float(self.left_up[2])

    @property
    def bottom_z(self) -> float:
        return float(self.left_down[2])

    # -- cloud mutation -----------------------------------------------------

    def set_cloud(self, cloud: PointCloud) -> None:
        self.cloud = cloud
        self._corners = None

    def append(self, cloud: PointCloud) -> None:
        self.cloud.append(cloud)
        self._corners = None

    def paint(self, color: Color) -> None:
        self.color = color
        self.cloud.paint(color)

    def remove_within(
        self,
        x_range: tuple[float, float],
        y_range: tuple[float, float],
        z_range: tuple[float, float],
    ) -> int:
        """Drop every point inside the axis-aligned box; returns the count removed."""
        pts = self.cloud.points
        inside = np.ones(len(pts), dtype=bool)
        for axis, (lo, hi) in enumerate((x_range, y_range, z_range)):
            lo, hi = min(lo, hi), max(lo, hi)
            inside &= (pts[:, axis] >= lo) & (pts[:, axis] <= hi)
        removed = int(inside.sum())
        if removed:
            self.set_cloud(self.cloud.select(~inside))
        return removed

    def fill(
        self,
        point_pitch: int,
        z_max: Optional[float] = None,
        z_min: Optional[float] = None,
    ) -> None:
        """Replace the cloud with a uniform grid over the bounding rectangle.

        With z limits the rectangle is stretched (or cut) along the plane's up
        axis to span exactly [z_min, z_max].
        """
        frame = self._frame()
        t_min, t_max = frame.t_min, frame.t_max
        if z_max is not None or z_min is not None:
            vz = frame.v[2]
            if vz < 1e-6:
                raise DegenerateGeometryError("Cannot apply z limits to a horizontal plane")
            if z_max is not None:
                t_max = (z_max - frame.anchor[2]) / vz
            if z_min is not None:
                t_min = (z_min - frame.anchor[2]) / vz
        corners = self._rectangle(frame, t_min, t_max)

        self.set_cloud(fill_rectangle(corners, point_pitch, self.color))
        logger.debug(f"Filled {self!r} at {point_pitch} pts/m")

    def copy(self) -> Plane:
        twin = Plane(
            self.cloud.copy(),
            self._coefficients.copy() if self._coefficients is not None else None,
            self.group_index,
            self.color,
        )
        return twin
