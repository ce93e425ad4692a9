"""Stage 01: Candidate filtering.

Fills every vertical candidate into a uniform rectangular patch, derives the
room's vertical extent from the ceiling and floor, then applies the height
and isolation filters in that order.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from roomshell.core.pointcloud import COMMON_PLANE_COLOR, UP_DOWN_PLANE_COLOR
from roomshell.core.step_base import BaseStep
from ._filters import height_filter, isolation_filter, pick_ceiling_and_floor, split_by_orientation
from .contracts import FilterInput, FilterOutput

logger = logging.getLogger(__name__)


class CandidateFilterStep(BaseStep[FilterInput, FilterOutput]):
    """Select the wall candidates that clustering will consider."""

    name: ClassVar[str] = "candidate_filter"
    input_type: ClassVar = FilterInput
    output_type: ClassVar = FilterOutput

    def validate_inputs(self, inputs: FilterInput) -> bool:
        if not inputs.planes:
            logger.error("No candidate planes to filter")
            return False
        unfit = [p for p in inputs.planes if not p.has_coefficients or len(p) == 0]
        if unfit:
            logger.error(f"{len(unfit)} candidate planes lack points or coefficients")
            return False
        return True

    def run(self, inputs: FilterInput) -> FilterOutput:
        vertical, horizontal = split_by_orientation(inputs.planes)
        logger.info(f"{len(vertical)} vertical, {len(horizontal)} horizontal candidates")

        for plane in vertical:
            plane.color = COMMON_PLANE_COLOR
            plane.fill(self.config.point_pitch)

        ceiling, floor, bounds = pick_ceiling_and_floor(horizontal)
        ceiling.paint(UP_DOWN_PLANE_COLOR)
        floor.paint(UP_DOWN_PLANE_COLOR)

        tall = height_filter(vertical, bounds.height, self.config.min_plane_height)
        walls = isolation_filter(tall, self.config.combine.minimum_edge_dist)
        logger.info(
            f"Kept {len(walls)}/{len(vertical)} walls "
            f"({len(vertical) - len(tall)} too short, {len(tall) - len(walls)} isolated)"
        )

        return FilterOutput(
            walls=walls,
            ceiling=ceiling,
            floor=floor,
            room_bounds=bounds,
            num_vertical=len(vertical),
            num_dropped_short=len(vertical) - len(tall),
            num_dropped_isolated=len(tall) - len(walls),
        )
