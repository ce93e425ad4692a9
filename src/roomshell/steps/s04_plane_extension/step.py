"""Stage 04: Plane extension.

Within every group of more than one plane, each member is extended onto the
group's representative and the region it now covers is removed from the
representative. A member whose geometry is degenerate is logged and skipped;
the rest of its group still proceeds.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from roomshell.core.errors import DegenerateGeometryError
from roomshell.core.pointcloud import FILL_COLOR, INNER_PLANE_COLOR
from roomshell.core.step_base import BaseStep
from ._extension import extend_plane, target_edge_line
from .contracts import ExtensionInput, ExtensionOutput

logger = logging.getLogger(__name__)


class PlaneExtensionStep(BaseStep[ExtensionInput, ExtensionOutput]):
    """Close the gaps between group members and their representative."""

    name: ClassVar[str] = "plane_extension"
    input_type: ClassVar = ExtensionInput
    output_type: ClassVar = ExtensionOutput

    def validate_inputs(self, inputs: ExtensionInput) -> bool:
        if len(inputs.representatives) != len(inputs.groups):
            logger.error(
                f"{len(inputs.groups)} groups but {len(inputs.representatives)} representatives"
            )
            return False
        return True

    def run(self, inputs: ExtensionInput) -> ExtensionOutput:
        bounds = inputs.room_bounds
        extended = []
        skipped = 0
        removed = 0

        for group_id, indices in enumerate(inputs.groups):
            if len(indices) < 2:
                continue
            target = inputs.representatives[group_id]
            try:
                edge = target_edge_line(target)
            except DegenerateGeometryError as e:
                logger.error(f"Group {group_id} ({target!r}) not extended: {e}")
                edge = None
            for i in indices:
                source = inputs.members[i]
                if edge is None:
                    skipped += 1
                    continue
                before = len(target)
                try:
                    extend_plane(
                        source, target, self.config.point_pitch, bounds, FILL_COLOR, target_edge=edge
                    )
                except DegenerateGeometryError as e:
                    logger.error(f"Group {group_id}, member {i} ({source!r}) not extended: {e}")
                    skipped += 1
                    continue
                removed += before - len(target)
            for i in indices:
                inputs.members[i].paint(INNER_PLANE_COLOR)
                extended.append(inputs.members[i])

        logger.info(
            f"Extended {len(extended) - skipped} members, skipped {skipped}, "
            f"removed {removed} covered points"
        )
        return ExtensionOutput(
            representatives=inputs.representatives,
            extended=extended,
            num_skipped=skipped,
            num_removed_points=removed,
        )
