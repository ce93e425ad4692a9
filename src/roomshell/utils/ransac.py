"""Plane fitting: Open3D RANSAC followed by an SVD least-squares polish."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from roomshell.core.errors import CollaboratorError
from roomshell.core.pointcloud import PointCloud

logger = logging.getLogger(__name__)


def fit_plane_svd(points: np.ndarray) -> np.ndarray:
    """Least-squares plane (a, b, c, d) through points; the normal is unit length."""
    if len(points) < 3:
        raise CollaboratorError(f"Need at least 3 points to fit a plane, got {len(points)}")
    centroid = points.mean(axis=0)
    _, _, Vt = np.linalg.svd(points - centroid, full_matrices=False)
    normal = Vt[2]  # smallest singular value = plane normal
    normal /= np.linalg.norm(normal)
    return np.append(normal, -normal @ centroid)


def fit_plane(
    points: np.ndarray,
    distance_threshold: float,
    min_inlier_ratio: float = 0.8,
    iterations: int = 1000,
    seed: int = 0,
    reference_normal: Optional[np.ndarray] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Fit one dominant plane.

    Open3D's `segment_plane` picks the inliers (its sampler seeded with
    `seed`), then SVD refines the plane over them. A final inlier ratio below
    `min_inlier_ratio` is logged as a warning. When `reference_normal` is given
    the result is flipped to agree with it.

    Returns:
        (coefficients, inlier_mask)
    """
    points = np.asarray(points, dtype=float)
    n = len(points)
    if n < 3:
        raise CollaboratorError(f"Need at least 3 points to fit a plane, got {n}")

    import open3d as o3d

    o3d.utility.random.seed(seed)
    pcd = PointCloud.from_points(points).to_open3d()
    try:
        _, inlier_indices = pcd.segment_plane(
            distance_threshold=distance_threshold,
            ransac_n=3,
            num_iterations=iterations,
        )
    except RuntimeError as e:
        raise CollaboratorError(f"RANSAC failed on {n} points: {e}") from e
    if len(inlier_indices) < 3:
        raise CollaboratorError(f"RANSAC found no plane in {n} points")

    coefficients = fit_plane_svd(points[np.asarray(inlier_indices)])
    inliers = np.abs(points @ coefficients[:3] + coefficients[3]) <= distance_threshold
    ratio = inliers.sum() / n
    if ratio < min_inlier_ratio:
        logger.warning(
            f"RANSAC refit reached inlier ratio {ratio:.2f} < target {min_inlier_ratio:.2f}"
        )
    if reference_normal is not None and coefficients[:3] @ reference_normal < 0:
        coefficients = -coefficients

    logger.debug(f"RANSAC plane {np.round(coefficients, 4)} with {inliers.sum()}/{n} inliers")
    return coefficients, inliers
