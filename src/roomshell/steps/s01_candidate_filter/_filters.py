"""Candidate filters applied before clustering.

Each filter returns a new list; the input list is left untouched so that
indices held by the caller stay valid.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from roomshell.core.contracts import RoomBounds
from roomshell.core.errors import InsufficientDataError
from roomshell.core.plane import Orientation, Plane
from roomshell.steps.s02_group_clustering._adjacency import find_near_planes

logger = logging.getLogger(__name__)


def split_by_orientation(planes: Sequence[Plane]) -> tuple[list[Plane], list[Plane]]:
    """Returns (vertical, horizontal), each in input order."""
    vertical = [p for p in planes if p.orientation == Orientation.VERTICAL]
    horizontal = [p for p in planes if p.orientation == Orientation.HORIZONTAL]
    return vertical, horizontal


def pick_ceiling_and_floor(horizontal: Sequence[Plane]) -> tuple[Plane, Plane, RoomBounds]:
    """Take the two horizontal planes with the most points as ceiling and floor.

    Raises:
        InsufficientDataError: fewer than two horizontal planes, or both at
            the same height.
    """
    if len(horizontal) < 2:
        raise InsufficientDataError(
            f"Need two horizontal planes for ceiling and floor, found {len(horizontal)}"
        )
    first, second = sorted(horizontal, key=len, reverse=True)[:2]
    z1, z2 = first.height_at_origin(), second.height_at_origin()
    ceiling, floor = (first, second) if z1 >= z2 else (second, first)
    bounds = RoomBounds(z_min=min(z1, z2), z_max=max(z1, z2))
    if bounds.height <= 0:
        raise InsufficientDataError(f"Ceiling and floor coincide at z={bounds.z_max:.3f}")
    logger.info(f"Room spans z=[{bounds.z_min:.3f}, {bounds.z_max:.3f}], height {bounds.height:.3f}")
    return ceiling, floor, bounds


def height_filter(
    planes: Sequence[Plane], room_height: float, min_fraction: float
) -> list[Plane]:
    """Keep planes whose vertical extent is at least `min_fraction` of the room."""
    kept = []
    for plane in planes:
        fraction = (plane.top_z - plane.bottom_z) / room_height
        if fraction < min_fraction:
            logger.debug(f"Height filter: {plane!r} covers {fraction:.2f} of the room, dropped")
            continue
        kept.append(plane)
    return kept


def isolation_filter(planes: Sequence[Plane], threshold: float) -> list[Plane]:
    """Drop planes with no neighbour within `threshold`.

    Neighbourhoods are evaluated once against the full input list; all
    isolated planes are then removed together.
    """
    isolated = {
        i for i in range(len(planes)) if not find_near_planes(i, planes, threshold)
    }
    for i in sorted(isolated):
        logger.debug(f"Isolation filter: {planes[i]!r} has no neighbour, dropped")
    return [p for i, p in enumerate(planes) if i not in isolated]
