"""Stage 02: Group clustering.

Flood fill over the filtered walls with an explicit worklist of indices.
Two planes join the same group when their normals are within the angle
threshold, their top edges are within the distance threshold, and one
projects onto the other. The result is a partition; single-plane groups are
kept.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import ClassVar

import numpy as np

from roomshell.core.contracts import CombineConfig
from roomshell.core.errors import DegenerateGeometryError
from roomshell.core.plane import Plane
from roomshell.core.pointcloud import Color
from roomshell.core.step_base import BaseStep
from ._adjacency import is_connected
from .contracts import ClusteringInput, ClusteringOutput

logger = logging.getLogger(__name__)


def _connectable(a: Plane, b: Plane, config: CombineConfig) -> bool:
    try:
        return is_connected(a, b, config)
    except DegenerateGeometryError as e:
        logger.warning(f"Skipping pair {a!r} / {b!r}: {e}")
        return False


def cluster_planes(planes: Sequence[Plane], config: CombineConfig) -> list[list[int]]:
    """Assign `group_index` to every plane and return the member indices per group."""
    groups: list[list[int]] = []
    for seed, plane in enumerate(planes):
        if plane.is_grouped:
            continue
        group_id = len(groups)
        plane.assign_group(group_id)
        members = [seed]
        worklist = [seed]
        while worklist:
            s = worklist.pop()
            for t, candidate in enumerate(planes):
                if candidate.is_grouped:
                    continue
                if not _connectable(planes[s], candidate, config):
                    continue
                candidate.assign_group(group_id)
                members.append(t)
                worklist.append(t)
        groups.append(sorted(members))
    return groups


def group_colors(num_groups: int, seed: int = 0) -> list[Color]:
    """One random opaque colour per group, reproducible from `seed`."""
    rng = np.random.default_rng(seed)
    rgb = rng.integers(0, 255, size=(num_groups, 3)) / 255.0
    return [tuple(float(c) for c in row) for row in rgb]


class GroupClusteringStep(BaseStep[ClusteringInput, ClusteringOutput]):
    """Partition walls into coplanar, adjacent groups."""

    name: ClassVar[str] = "group_clustering"
    input_type: ClassVar = ClusteringInput
    output_type: ClassVar = ClusteringOutput

    def validate_inputs(self, inputs: ClusteringInput) -> bool:
        grouped = [p for p in inputs.walls if p.is_grouped]
        if grouped:
            logger.error(f"{len(grouped)} walls already carry a group index")
            return False
        return True

    def run(self, inputs: ClusteringInput) -> ClusteringOutput:
        walls = inputs.walls
        groups = cluster_planes(walls, self.config.combine)
        colors = group_colors(len(groups), self.config.pipeline.color_seed)
        for plane in walls:
            plane.paint(colors[plane.group_index])

        sizes = [len(g) for g in groups]
        logger.info(
            f"{len(walls)} walls -> {len(groups)} groups "
            f"({sum(1 for s in sizes if s > 1)} with more than one plane, largest {max(sizes, default=0)})"
        )
        return ClusteringOutput(walls=walls, groups=groups, colors=colors)
