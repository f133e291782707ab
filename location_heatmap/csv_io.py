"""Import of exported track CSV files (Path.csv)."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from location_heatmap.models import LocationPoint
from location_heatmap.timeutils import dt_from_epoch_ms

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("geoTime", "latitude", "longitude")


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_accuracy(value: str | None) -> float | None:
    # Exporters write -1 when the fix had no accuracy estimate.
    if value is None or not value.strip():
        return None
    acc = float(value.strip())
    return acc if acc >= 0 else None


def _row_to_point(row: dict[str, str]) -> LocationPoint:
    return LocationPoint(
        latitude=float(row["latitude"].strip()),
        longitude=float(row["longitude"].strip()),
        timestamp=dt_from_epoch_ms(int(row["geoTime"].strip())),
        accuracy_m=_parse_accuracy(row.get("horizontalAccuracy")),
    )


def _check_columns(fieldnames: Sequence[str] | None) -> None:
    have = set(fieldnames or ())
    missing = [c for c in REQUIRED_COLUMNS if c not in have]
    if missing:
        raise KeyError(f"CSV is missing required columns {missing}. Found: {list(fieldnames or ())}")


def iter_location_points(csv_path: str | Path) -> Iterator[LocationPoint]:
    """Yield LocationPoint objects from an exported track CSV.

    Columns used:
      - geoTime: epoch milliseconds
      - latitude/longitude: decimal degrees
      - horizontalAccuracy (optional): meters, negative means unknown

    Rows that fail to parse are skipped.

    Raises:
        KeyError: If a required column is missing from the header.
    """

    p = Path(csv_path)
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return
        _check_columns(reader.fieldnames)

        for row in reader:
            try:
                yield _row_to_point(row)
            except (ValueError, TypeError, AttributeError):
                continue


def load_location_points(csv_path: str | Path) -> tuple[list[LocationPoint], CsvSummary]:
    """Load all points into memory, in file order.

    Returns:
        (points, summary)
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[LocationPoint] = []
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        if fieldnames:
            _check_columns(fieldnames)
        for row in reader:
            rows_total += 1
            try:
                parsed.append(_row_to_point(row))
            except (ValueError, TypeError, AttributeError):
                continue

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("Skipped %s unparseable rows in %s", summary.rows_skipped, p)
    logger.debug("Loaded %s points from %s", summary.rows_parsed, p)
    return parsed, summary
