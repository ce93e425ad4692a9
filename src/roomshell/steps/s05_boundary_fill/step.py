"""Stage 05: Boundary fill.

Closes the ceiling and floor outline of the combined wall cloud. Points
within two density steps of the top (and bottom) z form a slab; the slab is
scanned in x columns and each column's y extent becomes a line of points at
that column's extreme z.
"""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np

from roomshell.core.errors import InsufficientDataError
from roomshell.core.pointcloud import BOUNDARY_COLOR, Color, PointCloud
from roomshell.core.step_base import BaseStep
from roomshell.utils.geometry import generate_line
from .contracts import BoundaryInput, BoundaryOutput

logger = logging.getLogger(__name__)

# Coordinates at or beyond this magnitude mean the slab had no real data
SANITY_MAGNITUDE = 10000.0


def _column_segment(
    slab: np.ndarray, x: float, width: float, top: bool
) -> tuple[np.ndarray, np.ndarray]:
    """(start, end) of the y extent of one slab column.

    Raises:
        InsufficientDataError: fewer than two slab points fall in the column.
    """
    in_column = slab[(slab[:, 0] >= x) & (slab[:, 0] <= x + width)]
    if len(in_column) < 2:
        raise InsufficientDataError(f"{len(in_column)} slab points in column x={x:.3f}")
    z = in_column[:, 2].max() if top else in_column[:, 2].min()
    y_min, y_max = in_column[:, 1].min(), in_column[:, 1].max()
    return np.array([x, y_min, z]), np.array([x, y_max, z])


def _sane(*points: np.ndarray) -> bool:
    return all(np.all(np.abs(p) < SANITY_MAGNITUDE) for p in points)


def fill_boundaries(
    cloud: PointCloud,
    point_pitch: int,
    column_width: float = 0.1,
    color: Color = BOUNDARY_COLOR,
) -> tuple[PointCloud, int, int]:
    """Boundary lines along the top and bottom slabs of `cloud`.

    Returns:
        (boundary points, columns scanned, slab columns skipped)
    """
    step = 1.0 / point_pitch
    lo, hi = cloud.min_bound, cloud.max_bound
    z = cloud.points[:, 2]
    top_slab = cloud.points[(z >= hi[2] - 2 * step) & (z <= hi[2])]
    bottom_slab = cloud.points[(z >= lo[2]) & (z <= lo[2] + 2 * step)]

    lines = []
    columns = 0
    skipped = 0
    x_start, x_end = top_slab[:, 0].min(), top_slab[:, 0].max()
    for x in np.arange(x_start, x_end, step):
        columns += 1
        for slab, top in ((top_slab, True), (bottom_slab, False)):
            try:
                start, end = _column_segment(slab, x, column_width, top)
            except InsufficientDataError as e:
                logger.debug(f"Skipping {'top' if top else 'bottom'} column: {e}")
                skipped += 1
                continue
            if not _sane(start, end):
                logger.debug(f"Skipping column x={x:.3f}: coordinates out of range")
                skipped += 1
                continue
            lines.append(generate_line(start, end, point_pitch, color))

    return PointCloud.concatenate(lines), columns, skipped


class BoundaryFillStep(BaseStep[BoundaryInput, BoundaryOutput]):
    """Combine the walls and add ceiling and floor outlines."""

    name: ClassVar[str] = "boundary_fill"
    input_type: ClassVar = BoundaryInput
    output_type: ClassVar = BoundaryOutput

    def validate_inputs(self, inputs: BoundaryInput) -> bool:
        if not any(len(p) for p in inputs.representatives):
            logger.error("No wall points to close")
            return False
        return True

    def run(self, inputs: BoundaryInput) -> BoundaryOutput:
        combined = PointCloud.concatenate(
            p.cloud for p in [*inputs.representatives, *inputs.extended]
        )
        boundary, columns, skipped = fill_boundaries(
            combined,
            self.config.point_pitch,
            self.config.pipeline.column_width,
            BOUNDARY_COLOR,
        )
        combined.append(boundary)
        logger.info(
            f"Added {len(boundary)} boundary points over {columns} columns "
            f"({skipped} slab columns skipped); {len(combined)} points total"
        )
        return BoundaryOutput(
            cloud=combined,
            num_boundary_points=len(boundary),
            num_columns=columns,
            num_skipped_columns=skipped,
        )
