"""Flat lat/lon utilities (no external dependencies).

Distances here are the equator approximation of 111 km per degree, not corrected
for latitude. Good enough for framing a map and bucketing nearby readings.
"""

from __future__ import annotations

from typing import Final

METERS_PER_DEGREE: Final[float] = 111_000.0


def degrees_to_meters(degrees: float) -> float:
    """Convert a span in degrees to meters using the flat approximation."""

    return degrees * METERS_PER_DEGREE


def meters_to_degrees(meters: float) -> float:
    """Convert a distance in meters to degrees using the flat approximation."""

    return meters / METERS_PER_DEGREE


def is_inside_box(
    lat: float,
    lon: float,
    anchor_lat: float,
    anchor_lon: float,
    half_size_deg: float,
) -> bool:
    """Check whether a point lies strictly inside the square around an anchor.

    Latitude and longitude are tested independently, so this is an axis-aligned
    box of side 2 * half_size_deg, not a circle.
    """

    return abs(anchor_lat - lat) < half_size_deg and abs(anchor_lon - lon) < half_size_deg
