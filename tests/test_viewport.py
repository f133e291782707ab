"""Tests for map framing."""

import pytest

from location_heatmap.geo import degrees_to_meters, meters_to_degrees
from location_heatmap.viewport import compute_viewport

from conftest import make_point


def test_single_point_uses_minimum_distance():
    vp = compute_viewport([make_point(48.0, 2.0)])

    assert (vp.center_lat, vp.center_lon) == (48.0, 2.0)
    assert vp.distance_m == 500.0
    assert vp.radius_m == 750.0


def test_tight_cluster_never_below_minimum(sample_points):
    vp = compute_viewport(sample_points[:2])

    assert vp.distance_m == 500.0


def test_span_uses_larger_delta():
    vp = compute_viewport([make_point(10.0, 20.0), make_point(10.01, 20.02), make_point(10.005, 20.01)])

    assert vp.center_lat == pytest.approx(10.005)
    assert vp.center_lon == pytest.approx(20.01)
    assert vp.distance_m == pytest.approx(0.02 * 111_000)
    assert vp.radius_m == pytest.approx(0.02 * 111_000 * 1.5)


def test_center_is_bbox_midpoint_not_mean():
    pts = [make_point(0.0, 0.0)] * 10 + [make_point(1.0, 2.0)]

    vp = compute_viewport(pts)

    assert (vp.center_lat, vp.center_lon) == (0.5, 1.0)
    assert vp.distance_m == pytest.approx(222_000)


def test_empty_input_leaves_viewport_unchanged():
    assert compute_viewport([]) is None


def test_bounds_cover_visible_radius():
    vp = compute_viewport([make_point(48.0, 2.0)])

    (s, w), (n, e) = vp.bounds()

    d = meters_to_degrees(750.0)
    assert (s, w) == pytest.approx((48.0 - d, 2.0 - d))
    assert (n, e) == pytest.approx((48.0 + d, 2.0 + d))
    assert degrees_to_meters(n - s) == pytest.approx(1500.0)
