"""Stage 00: Segment a raw scan into candidate planes.

Open3D read -> voxel downsampling -> normal estimation -> region growing ->
one RANSAC plane per region. Regions whose fitted plane is neither close to
vertical nor close to horizontal are discarded. Any failure here is fatal.
"""

from __future__ import annotations

import logging
import math
from typing import ClassVar, Optional

import numpy as np

from roomshell.core.errors import CollaboratorError
from roomshell.core.plane import Orientation, Plane
from roomshell.core.pointcloud import COMMON_PLANE_COLOR, UP_DOWN_PLANE_COLOR, PointCloud
from roomshell.core.step_base import BaseStep
from roomshell.utils.io import read_point_cloud
from ._region_growing import estimate_curvature, grow_regions
from .contracts import SegmentationInput, SegmentationOutput

logger = logging.getLogger(__name__)


def _classify_fit(normal: np.ndarray, threshold_deg: float) -> Optional[Orientation]:
    """Orientation of a fitted plane, or None when it is too oblique to keep."""
    cos_angle = abs(float(normal[2]))
    angle_deg = math.degrees(math.acos(np.clip(cos_angle, 0.0, 1.0)))
    if angle_deg <= threshold_deg:
        return Orientation.HORIZONTAL
    if angle_deg >= 90.0 - threshold_deg:
        return Orientation.VERTICAL
    return None


def _face_point(coefficients: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Flip (a, b, c, d) so the normal points toward `target`."""
    if coefficients[:3] @ target + coefficients[3] < 0:
        return -coefficients
    return coefficients


class SegmentationStep(BaseStep[SegmentationInput, SegmentationOutput]):
    """Wraps the point-cloud collaborators that produce the initial patches."""

    name: ClassVar[str] = "segmentation"
    input_type: ClassVar = SegmentationInput
    output_type: ClassVar = SegmentationOutput

    def validate_inputs(self, inputs: SegmentationInput) -> bool:
        if not inputs.cloud_path.exists():
            logger.error(f"Input cloud not found: {inputs.cloud_path}")
            return False
        return True

    def _fit_region(self, pcd, indices: np.ndarray, centroid: np.ndarray) -> Optional[Plane]:
        cfg = self.config.ransac
        region = pcd.select_by_index(indices.tolist())
        try:
            model, inliers = region.segment_plane(
                distance_threshold=cfg.distance_threshold,
                ransac_n=3,
                num_iterations=cfg.iterations,
            )
        except RuntimeError as e:
            raise CollaboratorError(f"RANSAC failed on a region of {len(indices)} points: {e}") from e

        if len(inliers) < cfg.min_inliers:
            logger.debug(f"Region of {len(indices)} points: {len(inliers)} inliers, skipped")
            return None

        coefficients = np.asarray(model, dtype=float)
        coefficients /= np.linalg.norm(coefficients[:3])
        orientation = _classify_fit(coefficients[:3], cfg.plane_vector_threshold)
        if orientation is None:
            logger.debug(f"Oblique plane {np.round(coefficients, 3)} discarded")
            return None
        if orientation == Orientation.VERTICAL:
            coefficients = _face_point(coefficients, centroid)

        cloud = PointCloud.from_open3d(region.select_by_index(inliers))
        color = UP_DOWN_PLANE_COLOR if orientation == Orientation.HORIZONTAL else COMMON_PLANE_COLOR
        plane = Plane(cloud, coefficients, color=color)
        plane.paint(color)
        return plane

    def run(self, inputs: SegmentationInput) -> SegmentationOutput:
        import open3d as o3d

        pcd = read_point_cloud(inputs.cloud_path)
        num_input = len(pcd.points)

        # --- Downsampling + normals ---
        down = pcd.voxel_down_sample(self.config.downsampling.leaf_size)
        if len(down.points) < 3:
            raise CollaboratorError(
                f"Only {len(down.points)} points left after downsampling "
                f"(leafSize={self.config.downsampling.leaf_size})"
            )
        down.estimate_normals(
            search_param=o3d.geometry.KDTreeSearchParamKNN(knn=self.config.downsampling.k_search)
        )
        points = np.asarray(down.points)
        normals = np.asarray(down.normals)
        logger.info(f"Downsampled {num_input} -> {len(points)} points")

        # --- Region growing ---
        ccfg = self.config.clustering
        curvature = estimate_curvature(points, self.config.downsampling.k_search)
        regions = grow_regions(
            points, normals, curvature,
            num_neighbours=ccfg.number_of_neighbours,
            smoothness_deg=ccfg.smoothness_threshold,
            curvature_threshold=ccfg.curvature_threshold,
            min_cluster_size=ccfg.min_cluster_size,
        )

        # --- RANSAC per region ---
        centroid = points.mean(axis=0)
        planes: list[Plane] = []
        for indices in regions:
            plane = self._fit_region(down, indices, centroid)
            if plane is not None:
                planes.append(plane)

        if not planes:
            raise CollaboratorError("Segmentation produced no planes")

        n_vertical = sum(1 for p in planes if p.orientation == Orientation.VERTICAL)
        logger.info(
            f"Segmented {len(planes)} planes: {n_vertical} vertical, "
            f"{len(planes) - n_vertical} horizontal"
        )
        return SegmentationOutput(
            planes=planes,
            num_input_points=num_input,
            num_downsampled_points=len(points),
            num_regions=len(regions),
        )
