"""I/O contracts for Stage 01: Candidate filtering (room bounds, height, isolation)."""

from pydantic import BaseModel, ConfigDict, Field

from roomshell.core.contracts import RoomBounds
from roomshell.core.plane import Plane


class FilterInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    planes: list[Plane] = Field(..., description="Segmented candidate planes, both orientations")


class FilterOutput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    walls: list[Plane] = Field(default_factory=list, description="Filled vertical planes that survived filtering")
    ceiling: Plane = Field(..., description="Upper of the two largest horizontal planes")
    floor: Plane = Field(..., description="Lower of the two largest horizontal planes")
    room_bounds: RoomBounds
    num_vertical: int = Field(0, description="Vertical candidates before filtering")
    num_dropped_short: int = Field(0, description="Removed by the height filter")
    num_dropped_isolated: int = Field(0, description="Removed by the isolation filter")
