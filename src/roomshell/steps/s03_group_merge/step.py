"""Stage 03: Group merge and refit.

Every group becomes one representative plane holding the concatenated member
clouds. A group of several planes is refitted with RANSAC and refilled as a
uniform patch spanning floor to ceiling; a single-plane group keeps its
member's equation and points.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import ClassVar

from roomshell.core.contracts import ReconstructionConfig, RoomBounds
from roomshell.core.plane import Plane
from roomshell.core.pointcloud import Color, PointCloud
from roomshell.core.step_base import BaseStep
from roomshell.utils.ransac import fit_plane
from .contracts import MergeInput, MergeOutput

logger = logging.getLogger(__name__)


def refit(plane: Plane, config: ReconstructionConfig) -> None:
    """Re-estimate the plane equation from its own points, in place.

    The current normal (if any) fixes the sign of the result.
    """
    reference = plane.normal if plane.has_coefficients else None
    coefficients, inliers = fit_plane(
        plane.cloud.points,
        config.ransac.distance_threshold,
        min_inlier_ratio=config.pipeline.merge_inlier_ratio,
        iterations=config.ransac.iterations,
        seed=config.pipeline.color_seed,
        reference_normal=reference,
    )
    plane.coefficients = coefficients
    logger.debug(f"Refit {plane!r}: {inliers.sum()}/{len(plane)} inliers")


def merge_group(
    members: Sequence[Plane],
    group_id: int,
    color: Color,
    config: ReconstructionConfig,
    bounds: RoomBounds,
) -> Plane:
    """Build the representative plane of one group."""
    if len(members) == 1:
        only = members[0]
        return Plane(only.cloud.copy(), only.coefficients.copy(), group_id, color)

    cloud = PointCloud.concatenate(m.cloud for m in members)
    largest = max(members, key=len)
    representative = Plane(cloud, largest.coefficients.copy(), group_id, color)
    refit(representative, config)
    representative.fill(config.point_pitch, z_max=bounds.z_max, z_min=bounds.z_min)
    return representative


class GroupMergeStep(BaseStep[MergeInput, MergeOutput]):
    """Collapse each group into a single representative plane."""

    name: ClassVar[str] = "group_merge"
    input_type: ClassVar = MergeInput
    output_type: ClassVar = MergeOutput

    def validate_inputs(self, inputs: MergeInput) -> bool:
        if len(inputs.colors) != len(inputs.groups):
            logger.error(f"{len(inputs.groups)} groups but {len(inputs.colors)} colours")
            return False
        seen = sorted(i for g in inputs.groups for i in g)
        if seen != list(range(len(inputs.walls))):
            logger.error("Groups do not partition the walls")
            return False
        return True

    def run(self, inputs: MergeInput) -> MergeOutput:
        representatives = []
        for group_id, (indices, color) in enumerate(zip(inputs.groups, inputs.colors)):
            members = [inputs.walls[i] for i in indices]
            rep = merge_group(members, group_id, color, self.config, inputs.room_bounds)
            representatives.append(rep)
            if len(members) > 1:
                logger.debug(f"Group {group_id}: {len(members)} planes -> {rep!r}")

        n_merged = sum(1 for g in inputs.groups if len(g) > 1)
        logger.info(f"Built {len(representatives)} representatives ({n_merged} refitted)")
        return MergeOutput(
            representatives=representatives,
            members=list(inputs.walls),
            groups=inputs.groups,
        )
