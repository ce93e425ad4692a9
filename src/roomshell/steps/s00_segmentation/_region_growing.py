"""Region growing over a normal-annotated point cloud.

Seeds are visited in order of increasing curvature. A neighbour joins the
region when its normal deviates from the current point's normal by at most
the smoothness angle; it becomes a new seed only if its curvature is below
the curvature threshold. Regions smaller than `min_cluster_size` are dropped.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)


def estimate_curvature(points: np.ndarray, k: int) -> np.ndarray:
    """Surface variation λ0 / (λ0 + λ1 + λ2) of each point's k-neighbourhood."""
    n = len(points)
    if n == 0:
        return np.empty(0)
    k = min(k, n)
    _, idx = cKDTree(points).query(points, k=k)
    idx = idx.reshape(n, k)
    nbrs = points[idx] - points[idx].mean(axis=1, keepdims=True)
    cov = np.einsum("nki,nkj->nij", nbrs, nbrs) / k
    eigvals = np.linalg.eigvalsh(cov)  # ascending
    total = eigvals.sum(axis=1)
    curvature = np.zeros(n)
    valid = total > 1e-12
    curvature[valid] = eigvals[valid, 0] / total[valid]
    return curvature


def grow_regions(
    points: np.ndarray,
    normals: np.ndarray,
    curvature: np.ndarray,
    num_neighbours: int = 30,
    smoothness_deg: float = 5.0,
    curvature_threshold: float = 1.0,
    min_cluster_size: int = 100,
) -> list[np.ndarray]:
    """Partition points into smooth regions. Returns index arrays, largest first."""
    n = len(points)
    if n == 0:
        return []
    k = min(num_neighbours, n)
    _, neighbours = cKDTree(points).query(points, k=k)
    neighbours = neighbours.reshape(n, k)
    cos_threshold = np.cos(np.radians(smoothness_deg))

    labels = np.full(n, -1, dtype=int)
    regions: list[np.ndarray] = []

    for start in np.argsort(curvature, kind="stable"):
        if labels[start] != -1:
            continue
        label = len(regions)
        labels[start] = label
        members = [start]
        seeds = [start]
        while seeds:
            current = seeds.pop()
            for j in neighbours[current]:
                if labels[j] != -1:
                    continue
                if abs(normals[current] @ normals[j]) < cos_threshold:
                    continue
                labels[j] = label
                members.append(j)
                if curvature[j] < curvature_threshold:
                    seeds.append(j)
        regions.append(np.asarray(members, dtype=int))

    kept = [r for r in regions if len(r) >= min_cluster_size]
    kept.sort(key=len, reverse=True)
    logger.info(
        f"Region growing: {len(regions)} regions, {len(kept)} with >= {min_cluster_size} points"
    )
    return kept
