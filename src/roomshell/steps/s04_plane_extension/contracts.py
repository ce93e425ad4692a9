"""I/O contracts for Stage 04: Plane extension."""

from pydantic import BaseModel, ConfigDict, Field

from roomshell.core.contracts import RoomBounds
from roomshell.core.plane import Plane


class ExtensionInput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    representatives: list[Plane] = Field(..., description="One plane per group")
    members: list[Plane] = Field(..., description="Pre-merge walls")
    groups: list[list[int]] = Field(..., description="Member indices into `members` per group")
    room_bounds: RoomBounds


class ExtensionOutput(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    representatives: list[Plane] = Field(default_factory=list, description="Representatives with covered regions removed")
    extended: list[Plane] = Field(default_factory=list, description="Members of multi-plane groups, extended")
    num_skipped: int = Field(0, description="Members left unextended due to degenerate geometry")
    num_removed_points: int = Field(0, description="Points removed from representatives")
