"""Shared pytest fixtures for roomshell tests."""

from __future__ import annotations

import numpy as np
import pytest

from roomshell.core.contracts import ReconstructionConfig, RoomBounds
from roomshell.core.plane import Plane
from roomshell.core.pointcloud import PointCloud


def _wall(
    start: tuple[float, float],
    end: tuple[float, float],
    z_min: float = 0.0,
    z_max: float = 2.5,
    pitch: int = 20,
    flip: bool = False,
) -> Plane:
    """Vertical rectangular patch on the segment start -> end, sampled on a grid."""
    p0 = np.array([start[0], start[1]], dtype=float)
    p1 = np.array([end[0], end[1]], dtype=float)
    length = np.linalg.norm(p1 - p0)
    n_along = max(int(round(length * pitch)), 1) + 1
    n_up = max(int(round((z_max - z_min) * pitch)), 1) + 1
    s = np.linspace(0.0, 1.0, n_along)
    z = np.linspace(z_min, z_max, n_up)
    ss, zz = np.meshgrid(s, z)
    xy = p0 + ss.reshape(-1, 1) * (p1 - p0)
    points = np.column_stack([xy, zz.reshape(-1)])

    direction = (p1 - p0) / length
    normal = np.array([direction[1], -direction[0], 0.0])
    if flip:
        normal = -normal
    coefficients = np.append(normal, -normal[:2] @ p0)
    return Plane(PointCloud.from_points(points), coefficients)


def _slab(
    x_range: tuple[float, float],
    y_range: tuple[float, float],
    z: float,
    pitch: int = 10,
) -> Plane:
    """Horizontal rectangular patch at height z."""
    xs = np.linspace(*x_range, max(int(round((x_range[1] - x_range[0]) * pitch)), 1) + 1)
    ys = np.linspace(*y_range, max(int(round((y_range[1] - y_range[0]) * pitch)), 1) + 1)
    xx, yy = np.meshgrid(xs, ys)
    points = np.column_stack([xx.reshape(-1), yy.reshape(-1), np.full(xx.size, z)])
    return Plane(PointCloud.from_points(points), [0.0, 0.0, 1.0, -z])


@pytest.fixture
def make_wall():
    """Factory: make_wall((x0, y0), (x1, y1), z_min=0, z_max=2.5, pitch=20, flip=False)."""
    return _wall


@pytest.fixture
def make_slab():
    """Factory: make_slab((x0, x1), (y0, y1), z, pitch=10)."""
    return _slab


@pytest.fixture
def config() -> ReconstructionConfig:
    return ReconstructionConfig()


@pytest.fixture
def room_bounds() -> RoomBounds:
    return RoomBounds(z_min=0.0, z_max=2.5)


def room_points(size=(4.0, 3.0, 2.5), spacing=0.04) -> np.ndarray:
    """Points on the six faces of an axis-aligned box room."""
    lx, ly, lz = size
    xs = np.arange(0.0, lx + 1e-9, spacing)
    ys = np.arange(0.0, ly + 1e-9, spacing)
    zs = np.arange(0.0, lz + 1e-9, spacing)
    faces = []
    for z in (0.0, lz):
        xx, yy = np.meshgrid(xs, ys)
        faces.append(np.column_stack([xx.ravel(), yy.ravel(), np.full(xx.size, z)]))
    for x in (0.0, lx):
        yy, zz = np.meshgrid(ys, zs)
        faces.append(np.column_stack([np.full(yy.size, x), yy.ravel(), zz.ravel()]))
    for y in (0.0, ly):
        xx, zz = np.meshgrid(xs, zs)
        faces.append(np.column_stack([xx.ravel(), np.full(xx.size, y), zz.ravel()]))
    return np.vstack(faces)


@pytest.fixture
def room_ply(tmp_path):
    """Synthetic box room written as PLY (requires open3d)."""
    import open3d as o3d

    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(room_points())
    path = tmp_path / "room.ply"
    o3d.io.write_point_cloud(str(path), pcd)
    return path


@pytest.fixture
def segmentation_config() -> ReconstructionConfig:
    return ReconstructionConfig(
        RANSAC={"RANSAC_DistThreshold": 0.02, "RANSAC_MinInliers": 200, "RANSAC_PlaneVectorThreshold": 10},
        Downsampling={"KSearch": 20, "leafSize": 0.05},
        Clustering={
            "MinSizeOfCluster": 100, "NumberOfNeighbours": 20,
            "SmoothnessThreshold": 5, "CurvatureThreshold": 0.02,
        },
    )
