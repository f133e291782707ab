"""Heat intensity, color gradient and render instructions for density groups."""

from __future__ import annotations

from typing import Sequence

from location_heatmap.grouping import group_nearby_points
from location_heatmap.models import (
    DEFAULT_RADIUS_M,
    DEFAULT_THRESHOLD_DEG,
    HeatColor,
    HeatMapParams,
    HeatRenderInstruction,
    LocationPoint,
)


def calculate_intensity(count: int, max_count: int) -> float:
    """Normalize a group count against the largest group in the batch.

    Returns:
        min(count / max_count, 1.0), or 0.0 when max_count is 0.
    """

    if max_count == 0:
        return 0.0
    return min(count / max_count, 1.0)


def heat_color(intensity: float) -> HeatColor:
    """Map intensity in [0, 1] to a blue -> cyan -> green -> yellow -> red gradient.

    Components are truncated, not rounded.
    """

    if intensity < 0.25:
        ratio = intensity / 0.25
        return HeatColor(0, int(255 * ratio), 255)
    if intensity < 0.5:
        ratio = (intensity - 0.25) / 0.25
        return HeatColor(0, 255, int(255 * (1 - ratio)))
    if intensity < 0.75:
        ratio = (intensity - 0.5) / 0.25
        return HeatColor(int(255 * ratio), 255, 0)
    ratio = (intensity - 0.75) / 0.25
    return HeatColor(255, int(255 * (1 - ratio)), 0)


def compute_heat_map(
    points: Sequence[LocationPoint],
    radius_m: float = DEFAULT_RADIUS_M,
    threshold_deg: float = DEFAULT_THRESHOLD_DEG,
) -> list[HeatRenderInstruction]:
    """Group the points and build one circle instruction per group.

    Every circle gets the same radius regardless of its count; only the color
    reflects density.

    Args:
        points: Readings in input order.
        radius_m: Circle radius in meters.
        threshold_deg: Grouping threshold in degrees.

    Returns:
        Instructions in group creation order. Empty if there is nothing to render.

    Raises:
        ValueError: If radius_m is negative or threshold_deg is not positive.
    """

    if not radius_m >= 0:
        raise ValueError(f"radius_m must not be negative, got {radius_m!r}")

    groups = group_nearby_points(points, threshold_deg)
    if not groups:
        return []

    max_count = max(g.count for g in groups)
    out: list[HeatRenderInstruction] = []
    for g in groups:
        intensity = calculate_intensity(g.count, max_count)
        out.append(
            HeatRenderInstruction(
                latitude=g.latitude,
                longitude=g.longitude,
                intensity=intensity,
                color=heat_color(intensity),
                radius_m=radius_m,
            )
        )
    return out


def compute_heat_map_with(points: Sequence[LocationPoint], params: HeatMapParams) -> list[HeatRenderInstruction]:
    """compute_heat_map driven by a HeatMapParams object."""

    return compute_heat_map(points, radius_m=params.radius_m, threshold_deg=params.threshold_deg)
