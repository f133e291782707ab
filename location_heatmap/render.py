"""Draw heat map instructions onto a folium (Leaflet) map."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final, Sequence

import folium

from location_heatmap.heatmap import compute_heat_map_with
from location_heatmap.models import HeatMapParams, HeatRenderInstruction, LocationPoint, Viewport
from location_heatmap.storage import LocationStore
from location_heatmap.viewport import compute_viewport

logger = logging.getLogger(__name__)

WORLD_CENTER: Final[tuple[float, float]] = (0.0, 0.0)
WORLD_ZOOM: Final[int] = 2


def build_heat_map(
    instructions: Sequence[HeatRenderInstruction],
    viewport: Viewport | None,
    tiles: str = "OpenStreetMap",
) -> folium.Map:
    """Build a map with one filled circle per instruction.

    Args:
        instructions: Output of compute_heat_map.
        viewport: Output of compute_viewport. None keeps the default world view.
        tiles: folium tile layer name.

    Returns:
        The folium map, ready to save or embed.
    """

    if viewport is None:
        m = folium.Map(location=list(WORLD_CENTER), zoom_start=WORLD_ZOOM, tiles=tiles)
    else:
        m = folium.Map(location=[viewport.center_lat, viewport.center_lon], tiles=tiles)
        sw, ne = viewport.bounds()
        m.fit_bounds([list(sw), list(ne)])

    for ins in instructions:
        folium.Circle(
            location=[ins.latitude, ins.longitude],
            radius=ins.radius_m,
            color=ins.color.hex,
            weight=ins.stroke_width,
            opacity=ins.stroke_opacity,
            fill=True,
            fill_color=ins.color.hex,
            fill_opacity=ins.fill_opacity,
            tooltip=f"intensity={ins.intensity:.2f}",
        ).add_to(m)

    logger.debug("Rendered %s heat circles", len(instructions))
    return m


def save_heat_map(
    instructions: Sequence[HeatRenderInstruction],
    viewport: Viewport | None,
    out_path: str | Path,
    tiles: str = "OpenStreetMap",
) -> Path:
    """Render and write the map as a standalone HTML file."""

    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    build_heat_map(instructions, viewport, tiles=tiles).save(str(p))
    return p


class HeatMapRefresher:
    """Tracker listener that redraws the heat map HTML after every new reading.

    Each call reloads a fresh snapshot from the store, so the map always reflects
    every stored reading, not only the one that triggered the refresh.
    """

    def __init__(
        self,
        store: LocationStore,
        out_path: str | Path,
        params: HeatMapParams,
        tiles: str = "OpenStreetMap",
    ) -> None:
        self._store = store
        self._out_path = Path(out_path)
        self._params = params
        self._tiles = tiles
        self.refreshes = 0

    def refresh(self) -> list[HeatRenderInstruction]:
        points = self._store.get_all()
        instructions = compute_heat_map_with(points, self._params)
        save_heat_map(instructions, compute_viewport(points), self._out_path, tiles=self._tiles)
        self.refreshes += 1
        logger.debug("Heat map refreshed with %s points (%s groups)", len(points), len(instructions))
        return instructions

    def __call__(self, point: LocationPoint) -> None:
        self.refresh()
