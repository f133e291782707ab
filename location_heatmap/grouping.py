"""Greedy grouping of nearby readings into density groups."""

from __future__ import annotations

from typing import Sequence

from location_heatmap.geo import is_inside_box
from location_heatmap.models import DEFAULT_THRESHOLD_DEG, DensityGroup, LocationPoint


def _check_threshold(threshold_deg: float) -> None:
    if not threshold_deg > 0:
        raise ValueError(f"threshold_deg must be positive, got {threshold_deg!r}")


def group_nearby_points(
    points: Sequence[LocationPoint],
    threshold_deg: float = DEFAULT_THRESHOLD_DEG,
) -> list[DensityGroup]:
    """Assign every point to the first group whose anchor is within the threshold.

    Groups are scanned in creation order and a point joins the first match, even
    if a later group's anchor is closer. A point matching no group starts a new
    one anchored at its own coordinates. Anchors never move.

    Args:
        points: Readings in input order.
        threshold_deg: Half-width of the square neighborhood, in degrees.

    Returns:
        Groups in creation order. Empty if points is empty.

    Raises:
        ValueError: If threshold_deg is not positive.
    """

    _check_threshold(threshold_deg)

    # [lat, lon, count]
    groups: list[list] = []
    for p in points:
        for g in groups:
            if is_inside_box(p.latitude, p.longitude, g[0], g[1], threshold_deg):
                g[2] += 1
                break
        else:
            groups.append([p.latitude, p.longitude, 1])

    return [DensityGroup(latitude=lat, longitude=lon, count=count) for lat, lon, count in groups]
