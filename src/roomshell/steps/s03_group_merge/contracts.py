"""I/O contracts for Stage 03: Group merge and refit."""

from pydantic import BaseModel, ConfigDict, Field

from roomshell.core.contracts import RoomBounds
from roomshell.core.plane import Plane
from roomshell.core.pointcloud import Color


class MergeInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    walls: list[Plane] = Field(..., description="Grouped walls (pre-merge members)")
    groups: list[list[int]] = Field(..., description="Member indices into `walls` per group")
    colors: list[Color] = Field(..., description="Colour per group")
    room_bounds: RoomBounds


class MergeOutput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    representatives: list[Plane] = Field(default_factory=list, description="One plane per group, same order as `groups`")
    members: list[Plane] = Field(default_factory=list, description="The pre-merge walls, unchanged")
    groups: list[list[int]] = Field(default_factory=list)

    @property
    def group_sizes(self) -> list[int]:
        return [len(g) for g in self.groups]
