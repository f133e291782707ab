"""SQLite persistence for location readings."""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Iterable

from location_heatmap.models import LocationPoint
from location_heatmap.timeutils import dt_from_epoch_ms, epoch_ms_from_dt

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS locations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    latitude REAL NOT NULL,
    longitude REAL NOT NULL,
    timestamp_ms INTEGER NOT NULL,
    accuracy_m REAL
)
"""

_COLUMNS = "latitude, longitude, timestamp_ms, accuracy_m"


def _row_to_point(row: tuple) -> LocationPoint:
    lat, lon, ts_ms, acc = row
    return LocationPoint(
        latitude=float(lat),
        longitude=float(lon),
        timestamp=dt_from_epoch_ms(int(ts_ms)),
        accuracy_m=None if acc is None else float(acc),
    )


class LocationStore:
    """Table of readings in a SQLite file.

    The connection is shared between the caller and a tracker thread, so every
    statement runs under one lock. Reads always return a fresh list.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._path = str(db_path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        with self._lock, self._conn:
            self._conn.execute(_SCHEMA)
        logger.debug("Opened location store at %s", self._path)

    def __enter__(self) -> LocationStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def save(self, point: LocationPoint) -> int:
        """Insert one reading and return its row id."""

        with self._lock, self._conn:
            cur = self._conn.execute(
                f"INSERT INTO locations ({_COLUMNS}) VALUES (?, ?, ?, ?)",
                (point.latitude, point.longitude, point.epoch_ms, point.accuracy_m),
            )
            return int(cur.lastrowid)

    def save_many(self, points: Iterable[LocationPoint]) -> int:
        """Insert readings in order. Returns the number of rows inserted."""

        rows = [(p.latitude, p.longitude, p.epoch_ms, p.accuracy_m) for p in points]
        with self._lock, self._conn:
            self._conn.executemany(f"INSERT INTO locations ({_COLUMNS}) VALUES (?, ?, ?, ?)", rows)
        return len(rows)

    def get_all(self) -> list[LocationPoint]:
        """All readings in insertion order."""

        with self._lock:
            rows = self._conn.execute(f"SELECT {_COLUMNS} FROM locations ORDER BY id").fetchall()
        return [_row_to_point(r) for r in rows]

    def get_by_date_range(self, start: datetime, end: datetime) -> list[LocationPoint]:
        """Readings with start <= timestamp <= end, in insertion order."""

        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_COLUMNS} FROM locations WHERE timestamp_ms >= ? AND timestamp_ms <= ? ORDER BY id",
                (epoch_ms_from_dt(start), epoch_ms_from_dt(end)),
            ).fetchall()
        return [_row_to_point(r) for r in rows]

    def count(self) -> int:
        with self._lock:
            (n,) = self._conn.execute("SELECT COUNT(*) FROM locations").fetchone()
        return int(n)

    def clear(self) -> int:
        """Delete all readings. Returns the number of rows deleted."""

        with self._lock, self._conn:
            cur = self._conn.execute("DELETE FROM locations")
            deleted = cur.rowcount
        logger.info("Cleared %s readings from %s", deleted, self._path)
        return int(deleted)
