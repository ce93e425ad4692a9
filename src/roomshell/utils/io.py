"""I/O utilities: point cloud reading and writing through Open3D."""

from __future__ import annotations

import logging
from pathlib import Path

from roomshell.core.errors import CollaboratorError
from roomshell.core.pointcloud import PointCloud

logger = logging.getLogger(__name__)


def read_point_cloud(path: Path):
    """Load a PLY/PCD/XYZ file as an `open3d.geometry.PointCloud`."""
    import open3d as o3d

    path = Path(path)
    if not path.exists():
        raise CollaboratorError(f"Point cloud not found: {path}")
    pcd = o3d.io.read_point_cloud(str(path))
    if not pcd.has_points():
        raise CollaboratorError(f"Point cloud has no points: {path}")
    logger.info(f"Loaded {len(pcd.points)} points from {path.name}")
    return pcd


def write_point_cloud(cloud: PointCloud, path: Path) -> Path:
    """Write a coloured cloud; the format follows the file suffix (PLY by default)."""
    import open3d as o3d

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not o3d.io.write_point_cloud(str(path), cloud.to_open3d()):
        raise CollaboratorError(f"Failed to write point cloud: {path}")
    logger.info(f"Saved {len(cloud)} points to {path}")
    return path
