"""Summary of a stored set of readings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from location_heatmap.models import LocationPoint
from location_heatmap.timeutils import DeltaStats, delta_stats


@dataclass(frozen=True, slots=True)
class PointsSummary:
    """High-level overview of a point set."""

    count: int
    first_time: datetime | None
    last_time: datetime | None
    delta: DeltaStats | None
    min_lat: float | None
    max_lat: float | None
    min_lon: float | None
    max_lon: float | None
    with_accuracy: int


def summarize_points(points: Sequence[LocationPoint]) -> PointsSummary:
    """Summarize already-loaded points."""

    if not points:
        return PointsSummary(
            count=0,
            first_time=None,
            last_time=None,
            delta=None,
            min_lat=None,
            max_lat=None,
            min_lon=None,
            max_lon=None,
            with_accuracy=0,
        )

    ordered = sorted(points, key=lambda p: p.epoch_ms)
    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    return PointsSummary(
        count=len(points),
        first_time=ordered[0].timestamp,
        last_time=ordered[-1].timestamp,
        delta=delta_stats(p.epoch_ms for p in ordered),
        min_lat=min(lats),
        max_lat=max(lats),
        min_lon=min(lons),
        max_lon=max(lons),
        with_accuracy=sum(1 for p in points if p.accuracy_m is not None),
    )
