"""Data models for location readings, density groups and heat map output."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

from location_heatmap.geo import meters_to_degrees
from location_heatmap.timeutils import epoch_ms_from_dt


DEFAULT_TZ: Final[str] = "UTC"

# ~100 m at mid-latitudes
DEFAULT_THRESHOLD_DEG: Final[float] = 0.001
DEFAULT_RADIUS_M: Final[float] = 50.0
# Radius used by the map view when drawing the overlay.
MAP_VIEW_RADIUS_M: Final[float] = 100.0

FILL_OPACITY: Final[float] = 0.3
STROKE_OPACITY: Final[float] = 1.0
STROKE_WIDTH: Final[int] = 2

DEFAULT_TRACKING_INTERVAL_S: Final[float] = 10.0


@dataclass(frozen=True, slots=True)
class LocationPoint:
    """A single location reading.

    Attributes:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        timestamp: Timezone-aware time the reading was taken.
        accuracy_m: Horizontal accuracy in meters, None if the sensor did not report one.
    """

    latitude: float
    longitude: float
    timestamp: datetime
    accuracy_m: float | None = None

    @property
    def epoch_ms(self) -> int:
        """Unix epoch milliseconds. Naive timestamps are treated as UTC."""

        return epoch_ms_from_dt(self.timestamp)


@dataclass(frozen=True, slots=True)
class DensityGroup:
    """Points sharing one anchor coordinate.

    The anchor is the first point that started the group; it never moves.
    """

    latitude: float
    longitude: float
    count: int


@dataclass(frozen=True, slots=True)
class HeatColor:
    """RGB color with components in [0, 255]."""

    red: int
    green: int
    blue: int

    @property
    def hex(self) -> str:
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"


@dataclass(frozen=True, slots=True)
class HeatRenderInstruction:
    """One circle to draw on the map for a density group."""

    latitude: float
    longitude: float
    intensity: float
    color: HeatColor
    radius_m: float
    fill_opacity: float = FILL_OPACITY
    stroke_opacity: float = STROKE_OPACITY
    stroke_width: int = STROKE_WIDTH


@dataclass(frozen=True, slots=True)
class Viewport:
    """Center and zoom radius framing a set of points.

    Note:
        distance_m is the bounding span after the minimum floor; radius_m is the
        padded radius that should be handed to the map widget.
    """

    center_lat: float
    center_lon: float
    distance_m: float
    radius_m: float

    def bounds(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """South-west and north-east corners of the visible radius."""

        d = meters_to_degrees(self.radius_m)
        return (
            (self.center_lat - d, self.center_lon - d),
            (self.center_lat + d, self.center_lon + d),
        )


@dataclass(frozen=True, slots=True)
class HeatMapParams:
    """Caller-supplied heat map configuration."""

    radius_m: float = DEFAULT_RADIUS_M
    threshold_deg: float = DEFAULT_THRESHOLD_DEG
