"""Map framing for a set of readings."""

from __future__ import annotations

from typing import Final, Sequence

from location_heatmap.geo import degrees_to_meters
from location_heatmap.models import LocationPoint, Viewport

MIN_DISTANCE_M: Final[float] = 500.0
RADIUS_PADDING: Final[float] = 1.5


def compute_viewport(points: Sequence[LocationPoint]) -> Viewport | None:
    """Center the map on the bounding box of the points.

    The span is the larger of the latitude and longitude extents converted with
    the flat 111 km/degree factor, floored at 500 m, then padded by 1.5x for the
    visible radius.

    Returns:
        Viewport, or None for empty input (leave the current view unchanged).
    """

    if not points:
        return None

    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)

    lat_delta = max_lat - min_lat
    lon_delta = max_lon - min_lon

    distance = degrees_to_meters(max(lat_delta, lon_delta))
    distance = max(distance, MIN_DISTANCE_M)

    return Viewport(
        center_lat=(min_lat + max_lat) / 2,
        center_lon=(min_lon + max_lon) / 2,
        distance_m=distance,
        radius_m=distance * RADIUS_PADDING,
    )
