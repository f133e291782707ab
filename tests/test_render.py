"""Tests for the folium map renderer."""

import folium

from location_heatmap.heatmap import compute_heat_map
from location_heatmap.models import HeatMapParams
from location_heatmap.render import HeatMapRefresher, build_heat_map, save_heat_map
from location_heatmap.tracker import LocationTracker, ReplaySensor
from location_heatmap.viewport import compute_viewport


def _circles(m):
    return [c for c in m._children.values() if isinstance(c, folium.Circle)]


def test_one_circle_per_instruction(sample_points):
    instructions = compute_heat_map(sample_points, radius_m=100)

    m = build_heat_map(instructions, compute_viewport(sample_points))

    circles = _circles(m)
    assert len(circles) == 2
    assert circles[0].location == [10.0, 20.0]
    assert circles[0].options["radius"] == 100
    assert circles[0].options["color"] == "#ff0000"
    assert circles[0].options["fillOpacity"] == 0.3
    assert circles[1].options["fillColor"] == "#00ff00"


def test_viewport_centers_map(sample_points):
    vp = compute_viewport(sample_points)

    m = build_heat_map([], vp)

    assert m.location == [vp.center_lat, vp.center_lon]


def test_no_viewport_uses_world_view():
    m = build_heat_map([], None)

    assert m.location == [0.0, 0.0]
    assert _circles(m) == []


def test_save_writes_html(temp_dir, sample_points):
    out = save_heat_map(compute_heat_map(sample_points), compute_viewport(sample_points), temp_dir / "maps" / "heat.html")

    assert out.exists()
    assert "leaflet" in out.read_text(encoding="utf-8").lower()


def test_refresher_redraws_after_every_reading(store, temp_dir, sample_points):
    out = temp_dir / "live.html"
    refresher = HeatMapRefresher(store, out, HeatMapParams(radius_m=100.0))
    tracker = LocationTracker(store, ReplaySensor(sample_points), interval_seconds=0.001)
    circles_per_reading = []
    tracker.add_listener(refresher)
    tracker.add_listener(lambda _p: circles_per_reading.append(out.read_text(encoding="utf-8").count("L.circle(")))

    assert tracker.run(max_readings=3) == 3

    assert refresher.refreshes == 3
    # the second reading falls into the first group
    assert circles_per_reading == [1, 1, 2]


def test_refresher_on_empty_store_writes_world_map(store, temp_dir):
    refresher = HeatMapRefresher(store, temp_dir / "empty.html", HeatMapParams())

    assert refresher.refresh() == []
    assert (temp_dir / "empty.html").exists()
    assert refresher.refreshes == 1
