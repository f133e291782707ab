"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import csv
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from location_heatmap.models import LocationPoint
from location_heatmap.storage import LocationStore

T0 = datetime(2025, 6, 1, 8, 0, 0, tzinfo=UTC)


def make_point(lat: float, lon: float, seconds: int = 0, accuracy_m: float | None = None) -> LocationPoint:
    return LocationPoint(latitude=lat, longitude=lon, timestamp=T0 + timedelta(seconds=seconds), accuracy_m=accuracy_m)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    with LocationStore(temp_dir / "locations.db") as s:
        yield s


@pytest.fixture
def sample_points():
    """Two nearby readings and one far away."""
    return [
        make_point(10.0, 20.0, 0, 5.0),
        make_point(10.0005, 20.0005, 10, None),
        make_point(11.0, 21.0, 20, 12.0),
    ]


@pytest.fixture
def sample_csv_file(temp_dir):
    """Create an exported Path.csv with one corrupt row."""
    csv_path = temp_dir / "Path.csv"
    t0_ms = int(T0.timestamp() * 1000)
    rows = [
        ["geoTime", "latitude", "longitude", "altitude", "horizontalAccuracy", "locationType"],
        [str(t0_ms), "10.0", "20.0", "35.2", "5.0", "1"],
        [str(t0_ms + 10_000), "10.0005", "20.0005", "35.0", "-1.0", "1"],
        [str(t0_ms + 20_000), "not-a-number", "20.0", "35.0", "8.0", "0"],
        [str(t0_ms + 30_000), "11.0", "21.0", "36.1", "", "0"],
    ]
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        csv.writer(f).writerows(rows)
    return csv_path
