"""Tests for the polling location tracker."""

import threading
import time

import pytest

from location_heatmap.tracker import (
    LocationTracker,
    PermissionDeniedError,
    ReplaySensor,
    SensorReading,
    SensorUnavailableError,
)

from conftest import make_point


class FixedSensor:
    def __init__(self, reading=SensorReading(52.52, 13.405, 8.0)):
        self.reading = reading
        self.calls = 0

    def read(self):
        self.calls += 1
        return self.reading


class BlockingSensor:
    """Sensor whose read takes a while, recording how many reads overlap."""

    def __init__(self, delay=0.3):
        self.delay = delay
        self.lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0

    def read(self):
        with self.lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delay)
            return SensorReading(52.52, 13.405, 8.0)
        finally:
            with self.lock:
                self.in_flight -= 1


class FailingSensor:
    def __init__(self, exc):
        self.exc = exc

    def read(self):
        raise self.exc


def test_track_once_stores_and_notifies(store):
    tracker = LocationTracker(store, FixedSensor())
    seen = []
    tracker.add_listener(seen.append)

    point = tracker.track_once()

    assert point is not None
    assert (point.latitude, point.longitude, point.accuracy_m) == (52.52, 13.405, 8.0)
    assert point.timestamp.tzinfo is not None
    assert seen == [point]
    assert store.get_all() == [point]


@pytest.mark.parametrize(
    "exc",
    [PermissionDeniedError("denied"), SensorUnavailableError("no gps"), RuntimeError("boom")],
)
def test_sensor_errors_are_swallowed_and_logged(store, exc, caplog):
    tracker = LocationTracker(store, FailingSensor(exc))

    assert tracker.track_once() is None
    assert store.count() == 0
    assert caplog.records


def test_no_fix_stores_nothing(store):
    tracker = LocationTracker(store, FixedSensor(reading=None))

    assert tracker.track_once() is None
    assert store.count() == 0


def test_failing_listener_does_not_stop_others(store):
    tracker = LocationTracker(store, FixedSensor())
    seen = []

    def broken(_point):
        raise RuntimeError("listener failed")

    tracker.add_listener(broken)
    tracker.add_listener(seen.append)

    assert tracker.track_once() is not None
    assert len(seen) == 1


def test_remove_listener(store):
    tracker = LocationTracker(store, FixedSensor())
    seen = []
    tracker.add_listener(seen.append)
    tracker.remove_listener(seen.append)

    tracker.track_once()

    assert seen == []


def test_run_replays_until_max_readings(store):
    replay = [make_point(1.0, 1.0), make_point(2.0, 2.0), make_point(3.0, 3.0), make_point(4.0, 4.0)]
    sensor = ReplaySensor(replay)
    tracker = LocationTracker(store, sensor, interval_seconds=0.001)

    stored = tracker.run(max_readings=3)

    assert stored == 3
    assert [p.latitude for p in store.get_all()] == [1.0, 2.0, 3.0]
    assert sensor.remaining == 1
    assert not tracker.is_tracking


def test_replay_sensor_exhausted():
    sensor = ReplaySensor([make_point(1.0, 1.0)])
    sensor.read()

    with pytest.raises(SensorUnavailableError):
        sensor.read()


def test_start_and_stop_background_thread(store):
    tracker = LocationTracker(store, FixedSensor(), interval_seconds=0.01)

    tracker.start()
    tracker.start()  # already running
    deadline = time.monotonic() + 5.0
    while store.count() < 2 and time.monotonic() < deadline:
        time.sleep(0.01)
    tracker.stop(timeout=5.0)

    assert store.count() >= 2
    assert not tracker.is_tracking
    settled = store.count()
    time.sleep(0.05)
    assert store.count() == settled


@pytest.mark.parametrize("interval", [0, -1])
def test_invalid_interval_rejected(store, interval):
    with pytest.raises(ValueError):
        LocationTracker(store, FixedSensor(), interval_seconds=interval)


def test_restart_while_previous_read_in_progress_runs_one_loop(store):
    sensor = BlockingSensor(delay=0.3)
    tracker = LocationTracker(store, sensor, interval_seconds=0.01)

    tracker.start()
    time.sleep(0.05)
    tracker.stop(timeout=0.01)

    # the first loop is still inside sensor.read()
    assert tracker.is_tracking

    tracker.start()
    time.sleep(0.05)
    tracker.stop(timeout=2.0)

    assert sensor.max_in_flight == 1
    assert not tracker.is_tracking
