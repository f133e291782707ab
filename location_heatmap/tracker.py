"""Periodic location tracking.

A LocationTracker polls a sensor on a fixed interval, stores each reading and
notifies registered listeners. It runs either blocking (run) or on a background
thread (start/stop). The heat map computation never depends on it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol

from location_heatmap.models import DEFAULT_TRACKING_INTERVAL_S, LocationPoint
from location_heatmap.storage import LocationStore
from location_heatmap.timeutils import utc_now

logger = logging.getLogger(__name__)

LocationListener = Callable[[LocationPoint], None]


class SensorError(Exception):
    """Base class for location sensor failures."""


class SensorUnavailableError(SensorError):
    """The device has no usable location source."""


class PermissionDeniedError(SensorError):
    """The user did not grant location access."""


@dataclass(frozen=True, slots=True)
class SensorReading:
    """Raw fix returned by a sensor."""

    latitude: float
    longitude: float
    accuracy_m: float | None = None


class LocationSensor(Protocol):
    def read(self) -> SensorReading | None:
        """Return the current fix, or None if no fix is available right now."""
        ...


class ReplaySensor:
    """Sensor that replays a fixed sequence of coordinates.

    Raises SensorUnavailableError once the sequence is exhausted.
    """

    def __init__(self, points: Iterable[LocationPoint]) -> None:
        self._readings = [SensorReading(p.latitude, p.longitude, p.accuracy_m) for p in points]
        self._pos = 0
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._readings) - self._pos

    def read(self) -> SensorReading | None:
        with self._lock:
            if self._pos >= len(self._readings):
                raise SensorUnavailableError("replay exhausted")
            reading = self._readings[self._pos]
            self._pos += 1
            return reading


class LocationTracker:
    """Poll a sensor, persist readings and notify listeners."""

    def __init__(
        self,
        store: LocationStore,
        sensor: LocationSensor,
        interval_seconds: float = DEFAULT_TRACKING_INTERVAL_S,
    ) -> None:
        if not interval_seconds > 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds!r}")
        self._store = store
        self._sensor = sensor
        self._interval_s = interval_seconds
        self._listeners: list[LocationListener] = []
        self._listeners_lock = threading.Lock()
        # One Event per run, so stopping an old loop never leaks into a new one.
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._state_lock = threading.Lock()
        self._active = 0

    @property
    def is_tracking(self) -> bool:
        """True while any polling loop is still running, including one finishing after stop()."""

        with self._state_lock:
            return self._active > 0

    @property
    def interval_seconds(self) -> float:
        return self._interval_s

    def add_listener(self, listener: LocationListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: LocationListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, point: LocationPoint) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(point)
            except Exception:
                logger.exception("Location listener %r failed", listener)

    def track_once(self) -> LocationPoint | None:
        """Take one reading, store it and notify listeners.

        Sensor failures are logged and reported as None; tracking goes on.
        """

        try:
            reading = self._sensor.read()
        except PermissionDeniedError:
            logger.warning("Location permission denied, skipping reading")
            return None
        except SensorUnavailableError as exc:
            logger.warning("Location sensor unavailable: %s", exc)
            return None
        except Exception:
            logger.exception("Error reading location")
            return None

        if reading is None:
            logger.debug("No location fix available")
            return None

        point = LocationPoint(
            latitude=reading.latitude,
            longitude=reading.longitude,
            timestamp=utc_now(),
            accuracy_m=reading.accuracy_m,
        )
        self._store.save(point)
        logger.debug("Stored location %.6f, %.6f", point.latitude, point.longitude)
        self._notify(point)
        return point

    def run(self, max_readings: int | None = None) -> int:
        """Poll until stopped, or until max_readings stored readings.

        Returns:
            Number of readings stored.
        """

        stop = threading.Event()
        self._stop = stop
        with self._state_lock:
            self._active += 1
        return self._loop(stop, max_readings)

    def _loop(self, stop: threading.Event, max_readings: int | None) -> int:
        # Caller has already counted this loop in _active.
        stored = 0
        logger.info("Tracking started (interval=%ss)", self._interval_s)
        try:
            while not stop.is_set():
                if self.track_once() is not None:
                    stored += 1
                    if max_readings is not None and stored >= max_readings:
                        break
                # Event.wait returns early when stop() is called.
                if stop.wait(self._interval_s):
                    break
        finally:
            with self._state_lock:
                self._active -= 1
            logger.info("Tracking stopped after %s readings", stored)
        return stored

    def start(self) -> None:
        """Run the polling loop on a background thread. No-op if already tracking.

        If a previous loop was stopped but is still finishing a sensor read, this
        waits for it to exit first so only one loop ever polls the sensor.
        """

        thread = self._thread
        if thread is not None and thread.is_alive():
            if not self._stop.is_set():
                return
            thread.join()
        stop = threading.Event()
        self._stop = stop
        with self._state_lock:
            self._active += 1
        self._thread = threading.Thread(target=self._loop, args=(stop, None), name="location-tracker", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the polling loop to exit and wait up to timeout for the background thread."""

        self._stop.set()
        thread = self._thread
        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout)
        if not thread.is_alive():
            self._thread = None
