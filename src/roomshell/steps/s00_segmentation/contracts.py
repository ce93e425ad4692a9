"""I/O contracts for Stage 00: Segmentation (region growing + RANSAC)."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from roomshell.core.plane import Plane


class SegmentationInput(BaseModel):
    cloud_path: Path = Field(..., description="Path to the raw room scan (PLY/PCD)")


class SegmentationOutput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    planes: list[Plane] = Field(default_factory=list, description="Fitted candidate planes")
    num_input_points: int = Field(0)
    num_downsampled_points: int = Field(0)
    num_regions: int = Field(0, description="Regions found by region growing")
