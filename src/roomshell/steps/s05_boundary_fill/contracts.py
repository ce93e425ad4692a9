"""I/O contracts for Stage 05: Boundary fill."""

from pydantic import BaseModel, ConfigDict, Field, InstanceOf

from roomshell.core.plane import Plane
from roomshell.core.pointcloud import PointCloud


class BoundaryInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    representatives: list[Plane] = Field(..., description="One plane per group")
    extended: list[Plane] = Field(default_factory=list, description="Extended members of multi-plane groups")


class BoundaryOutput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    cloud: InstanceOf[PointCloud] = Field(..., description="All wall points plus synthesized boundary lines")
    num_boundary_points: int = Field(0)
    num_columns: int = Field(0, description="Columns scanned")
    num_skipped_columns: int = Field(0, description="Slab columns skipped (too few points or out of range)")
