"""I/O contracts for Stage 02: Group clustering."""

from pydantic import BaseModel, ConfigDict, Field

from roomshell.core.plane import Plane
from roomshell.core.pointcloud import Color


class ClusteringInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    walls: list[Plane] = Field(..., description="Filtered vertical planes, group_index unassigned")


class ClusteringOutput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    walls: list[Plane] = Field(default_factory=list, description="Same planes, now grouped and painted")
    groups: list[list[int]] = Field(default_factory=list, description="Member indices into `walls` per group")
    colors: list[Color] = Field(default_factory=list, description="Colour assigned to each group")

    @property
    def group_sizes(self) -> list[int]:
        return [len(g) for g in self.groups]

    @property
    def num_nontrivial(self) -> int:
        return sum(1 for g in self.groups if len(g) > 1)
