from __future__ import annotations

import argparse
import csv
import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Hotspot:
    name: str
    lat: float
    lon: float
    weight: float


def generate_points(
    *,
    rows: int,
    seed: int,
    start_utc: datetime,
    hotspots: list[Hotspot],
    interval_seconds: float,
) -> list[dict[str, str]]:
    """Generate fake Path.csv rows: a device polled on a timer, lingering at a few places."""

    rng = random.Random(seed)
    cur = start_utc.replace(tzinfo=UTC)
    weights = [h.weight for h in hotspots]

    out: list[dict[str, str]] = []
    spot = rng.choices(hotspots, weights=weights)[0]
    for _ in range(rows):
        # Occasionally move to another place
        if rng.random() < 0.05:
            spot = rng.choices(hotspots, weights=weights)[0]

        # ~0.0005 deg jitter keeps most readings inside one 0.001 deg group
        lat = spot.lat + rng.gauss(0.0, 0.0005)
        lon = spot.lon + rng.gauss(0.0, 0.0005)
        cur = cur + timedelta(seconds=interval_seconds + rng.uniform(-1.0, 1.0))
        hacc = rng.choice([3.0, 5.0, 8.0, 12.0, 20.0, -1.0])

        out.append(
            {
                "geoTime": str(int(cur.timestamp() * 1000)),
                "latitude": f"{lat:.7f}",
                "longitude": f"{lon:.7f}",
                "horizontalAccuracy": f"{hacc:.1f}",
            }
        )
    return out


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake Path.csv for demo/testing (privacy-safe).")
    p.add_argument("--out", type=str, default="sample_data/Path.csv", help="Output CSV path")
    p.add_argument("--rows", type=int, default=500, help="Number of rows")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument("--interval-seconds", type=float, default=10.0, help="Polling interval of the fake device")
    p.add_argument("--start", type=str, default="2025-06-01 08:00:00", help="Start time (UTC)")
    args = p.parse_args()

    hotspots = [
        Hotspot("office", 52.5200000, 13.4050000, 5.0),
        Hotspot("home", 52.5070000, 13.3900000, 4.0),
        Hotspot("gym", 52.5300000, 13.4200000, 1.0),
        Hotspot("cafe", 52.5150000, 13.4010000, 1.5),
    ]

    rows = generate_points(
        rows=args.rows,
        seed=args.seed,
        start_utc=datetime.fromisoformat(args.start),
        hotspots=hotspots,
        interval_seconds=args.interval_seconds,
    )
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=["geoTime", "latitude", "longitude", "horizontalAccuracy"])
        w.writeheader()
        w.writerows(rows)

    print(f"Generated: {out_path} (rows={len(rows)}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
