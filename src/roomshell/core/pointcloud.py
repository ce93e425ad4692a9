"""Coloured point cloud container and the colour tags used by the pipeline.

Points are (N, 3) float64, colours are (N, 3) float64 RGB in [0, 1] (the
Open3D convention), so conversion to and from `open3d.geometry.PointCloud`
is a plain array copy.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

import numpy as np

from .errors import InsufficientDataError

Color = tuple[float, float, float]

WHITE: Color = (1.0, 1.0, 1.0)
RED: Color = (1.0, 0.0, 0.0)
GREEN: Color = (0.0, 1.0, 0.0)
BLUE: Color = (0.0, 0.0, 1.0)
YELLOW: Color = (1.0, 1.0, 0.0)
PEACH: Color = (1.0, 192 / 255, 203 / 255)

# Roles, as used across stages
COMMON_PLANE_COLOR = WHITE
INNER_PLANE_COLOR = BLUE
UP_DOWN_PLANE_COLOR = GREEN
FILL_COLOR = PEACH
BOUNDARY_COLOR = BLUE


def _empty() -> np.ndarray:
    return np.empty((0, 3), dtype=float)


@dataclass
class PointCloud:
    """Array-backed coloured point set. Iterating yields (3,) point rows."""

    points: np.ndarray = field(default_factory=_empty)
    colors: np.ndarray = field(default_factory=_empty)

    def __post_init__(self) -> None:
        self.points = np.asarray(self.points, dtype=float).reshape(-1, 3)
        colors = np.asarray(self.colors, dtype=float).reshape(-1, 3)
        if len(colors) == 0 and len(self.points) > 0:
            colors = np.tile(np.asarray(WHITE, dtype=float), (len(self.points), 1))
        if len(colors) != len(self.points):
            raise ValueError(
                f"colors ({len(colors)}) and points ({len(self.points)}) differ in length"
            )
        self.colors = colors

    @classmethod
    def from_points(cls, points: np.ndarray, color: Color = WHITE) -> PointCloud:
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        return cls(pts, np.tile(np.asarray(color, dtype=float), (len(pts), 1)))

    @classmethod
    def concatenate(cls, clouds: Iterable[PointCloud]) -> PointCloud:
        clouds = [c for c in clouds if len(c) > 0]
        if not clouds:
            return cls()
        return cls(
            np.vstack([c.points for c in clouds]),
            np.vstack([c.colors for c in clouds]),
        )

    @classmethod
    def from_open3d(cls, pcd) -> PointCloud:
        points = np.asarray(pcd.points, dtype=float).copy()
        colors = np.asarray(pcd.colors, dtype=float).copy() if pcd.has_colors() else _empty()
        return cls(points, colors)

    def to_open3d(self):
        import open3d as o3d

        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(self.points)
        pcd.colors = o3d.utility.Vector3dVector(self.colors)
        return pcd

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.points)

    def copy(self) -> PointCloud:
        return PointCloud(self.points.copy(), self.colors.copy())

    def append(self, other: PointCloud) -> None:
        """Append another cloud in place."""
        if len(other) == 0:
            return
        self.points = np.vstack([self.points, other.points])
        self.colors = np.vstack([self.colors, other.colors])

    def select(self, mask: np.ndarray) -> PointCloud:
        return PointCloud(self.points[mask], self.colors[mask])

    def paint(self, color: Color) -> None:
        self.colors = np.tile(np.asarray(color, dtype=float), (len(self.points), 1))

    @property
    def min_bound(self) -> np.ndarray:
        if len(self.points) == 0:
            raise InsufficientDataError("min_bound of an empty point cloud")
        return self.points.min(axis=0)

    @property
    def max_bound(self) -> np.ndarray:
        if len(self.points) == 0:
            raise InsufficientDataError("max_bound of an empty point cloud")
        return self.points.max(axis=0)
