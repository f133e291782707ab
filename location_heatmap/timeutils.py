"""Time parsing and conversion utilities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Iterable

from zoneinfo import ZoneInfo


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name.

    Raises:
        ValueError: If the timezone name is unknown on this system.
    """

    if tz_name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"Invalid timezone: {tz_name!r}. Example: Europe/Berlin") from exc


def dt_from_epoch_ms(epoch_ms: int, tz_name: str = "UTC") -> datetime:
    """Convert epoch milliseconds to a timezone-aware datetime."""

    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=tzinfo_from_name(tz_name))


def epoch_ms_from_dt(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds. Naive datetimes are treated as UTC."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return round(dt.timestamp() * 1000)


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds, the resolution readings are stored at."""

    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def parse_dt(text: str, tz_name: str) -> datetime:
    """Parse user-provided datetime text to a timezone-aware datetime.

    Supported formats:
      - "YYYY-MM-DD"
      - "YYYY-MM-DD HH:MM:SS" or "YYYY-MM-DDTHH:MM:SS"
      - with optional timezone offset, e.g. "+02:00"

    Naive strings are interpreted in tz_name.

    Raises:
        ValueError: If the text cannot be parsed.
    """

    s = text.strip().replace("T", " ")
    tz = tzinfo_from_name(tz_name)
    try:
        dt = datetime.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"Cannot parse datetime: {text!r}. Expected e.g. 2025-06-01 09:30:00") from exc

    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


@dataclass(frozen=True, slots=True)
class DeltaStats:
    """Sampling interval stats (seconds)."""

    count: int
    min_s: float
    median_s: float
    p95_s: float
    max_s: float


def delta_stats(epoch_ms_sorted: Iterable[int]) -> DeltaStats | None:
    """Compute sampling-interval statistics.

    Args:
        epoch_ms_sorted: Epoch ms sorted ascending.

    Returns:
        DeltaStats or None if less than 2 points.
    """

    ms = list(epoch_ms_sorted)
    if len(ms) < 2:
        return None
    deltas = sorted((b - a) / 1000.0 for a, b in zip(ms, ms[1:]) if b >= a)
    if not deltas:
        return None
    n = len(deltas)
    median = deltas[n // 2] if n % 2 == 1 else 0.5 * (deltas[n // 2 - 1] + deltas[n // 2])
    return DeltaStats(
        count=n,
        min_s=deltas[0],
        median_s=median,
        p95_s=deltas[int(0.95 * (n - 1))],
        max_s=deltas[-1],
    )
