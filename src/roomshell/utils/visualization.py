"""Checkpoint views for pipeline debugging.

`simple_view` renders planes or a raw cloud and blocks until the window is
closed. With a `save_dir` it writes a PNG instead (headless runs); with
`enabled=False` it returns immediately. It never modifies what it shows.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Optional, Union

import numpy as np

from roomshell.core.plane import Plane
from roomshell.core.pointcloud import PointCloud

logger = logging.getLogger(__name__)

Viewable = Union[PointCloud, Sequence[Plane]]


def _collect(data: Viewable) -> PointCloud:
    if isinstance(data, PointCloud):
        return data
    return PointCloud.concatenate(p.cloud for p in data)


def _slug(label: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", label.lower()).strip("_") or "view"


def plot_point_cloud(
    points: np.ndarray,
    colors: np.ndarray | None = None,
    title: str = "Point Cloud",
    max_points: int = 50000,
    save_path: Path | None = None,
):
    """Plot 3D point cloud with matplotlib."""
    import matplotlib.pyplot as plt

    if len(points) > max_points:
        indices = np.random.default_rng(42).choice(len(points), max_points, replace=False)
        points = points[indices]
        if colors is not None:
            colors = colors[indices]

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(111, projection="3d")
    ax.scatter(points[:, 0], points[:, 1], points[:, 2], c=colors, s=0.5, alpha=0.6)
    ax.set_title(title)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")

    if save_path:
        fig.savefig(str(save_path), dpi=150, bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)
    return fig


def simple_view(
    label: str,
    data: Viewable,
    enabled: bool = True,
    save_dir: Optional[Path] = None,
) -> Optional[Path]:
    """Show a labelled checkpoint; returns the snapshot path when one was written."""
    if not enabled:
        return None

    cloud = _collect(data)
    if len(cloud) == 0:
        logger.warning(f"View '{label}': nothing to show")
        return None

    save_path = None
    if save_dir is not None:
        save_dir = Path(save_dir)
        save_dir.mkdir(parents=True, exist_ok=True)
        save_path = save_dir / f"{_slug(label)}.png"

    plot_point_cloud(cloud.points, cloud.colors, title=label, save_path=save_path)
    if save_path:
        logger.info(f"View '{label}' saved to {save_path}")
    return save_path
