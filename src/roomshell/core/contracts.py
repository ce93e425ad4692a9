"""Common Pydantic models shared across pipeline stages.

`ReconstructionConfig` is loaded once from YAML and handed, unchanged, to every
stage. Field aliases match the established `config.yaml` keys, so existing
configuration files load as-is; snake_case names are accepted as well.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class DownsamplingConfig(_Section):
    """Voxel downsampling and normal estimation (segmentation collaborator)."""

    k_search: int = Field(30, alias="KSearch", gt=0, description="Neighbours for normal estimation")
    leaf_size: float = Field(0.05, alias="leafSize", gt=0, description="Voxel size (meters)")


class ClusteringConfig(_Section):
    """Region-growing parameters (segmentation collaborator)."""

    min_cluster_size: int = Field(100, alias="MinSizeOfCluster", gt=0, description="Min points per region")
    number_of_neighbours: int = Field(30, alias="NumberOfNeighbours", gt=0, description="k for region growing")
    smoothness_threshold: float = Field(
        5.0, alias="SmoothnessThreshold", gt=0, le=180, description="Max normal deviation (degrees)",
    )
    curvature_threshold: float = Field(
        1.0, alias="CurvatureThreshold", ge=0, description="Max curvature for a point to seed growth",
    )


class RansacConfig(_Section):
    """Plane fitting parameters (segmentation + refit collaborators)."""

    distance_threshold: float = Field(0.05, alias="RANSAC_DistThreshold", gt=0, description="Inlier distance (meters)")
    min_inliers: int = Field(500, alias="RANSAC_MinInliers", ge=3, description="Min inliers per plane")
    plane_vector_threshold: float = Field(
        15.0, alias="RANSAC_PlaneVectorThreshold", ge=0, le=90,
        description="Max deviation (degrees) from vertical/horizontal for a kept plane",
    )
    iterations: int = Field(1000, gt=0, description="RANSAC iterations per fit")


class CombineConfig(_Section):
    """Thresholds used by filtering, clustering and extension."""

    minimum_edge_dist: float = Field(
        0.5, alias="minimumEdgeDist", ge=0, description="Max top-corner gap for two planes to be neighbours",
    )
    min_planes_dist: float = Field(
        0.5, alias="minPlanesDist", ge=0, description="Max line distance between coplanar planes",
    )
    min_angle_normal_diff: float = Field(
        10.0, alias="minAngle_normalDiff", ge=0, le=180, description="Max angle (degrees) between normals",
    )


class OutputConfig(_Section):
    path: Path = Field(Path("OutputData/6_AllPlanes.ply"), description="Combined cloud output path")
    view: bool = Field(False, description="Show blocking checkpoint views between stages")
    snapshot_dir: Optional[Path] = Field(None, description="Write checkpoint PNGs here instead of blocking")


class PipelineTuning(_Section):
    merge_inlier_ratio: float = Field(0.8, gt=0, le=1, description="Target inlier ratio for group refit")
    column_width: float = Field(0.1, gt=0, description="Boundary scan column width (meters)")
    color_seed: int = Field(0, description="Seed for group colours and RANSAC sampling")


class ReconstructionConfig(_Section):
    """Top-level configuration loaded from config.yaml."""

    point_pitch: int = Field(20, alias="pointPitch", gt=0, description="Fill density (points per meter)")
    min_plane_height: float = Field(
        0.3, alias="minPlaneHeight", ge=0, le=1, description="Min wall height as a fraction of room height",
    )
    ransac: RansacConfig = Field(default_factory=RansacConfig, alias="RANSAC")
    downsampling: DownsamplingConfig = Field(default_factory=DownsamplingConfig, alias="Downsampling")
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig, alias="Clustering")
    combine: CombineConfig = Field(default_factory=CombineConfig, alias="Combine")
    output: OutputConfig = Field(default_factory=OutputConfig, alias="Output")
    pipeline: PipelineTuning = Field(default_factory=PipelineTuning, alias="Pipeline")

    @property
    def density_step(self) -> float:
        """Distance between neighbouring fill points (meters)."""
        return 1.0 / self.point_pitch


class RoomBounds(BaseModel):
    """Vertical extent of the room, from the floor and ceiling planes."""

    model_config = ConfigDict(frozen=True)

    z_min: float
    z_max: float

    @property
    def height(self) -> float:
        return self.z_max - self.z_min


class PipelineSummary(BaseModel):
    """What a full run produced; printed by the CLI."""

    output_path: Path
    num_candidates: int = 0
    num_walls: int = 0
    num_groups: int = 0
    num_merged_groups: int = 0
    num_boundary_points: int = 0
    num_output_points: int = 0
    stage_seconds: dict[str, float] = Field(default_factory=dict)
