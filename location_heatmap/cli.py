"""Command-line interface for location_heatmap.

Run:
    python -m location_heatmap import-csv --csv Path.csv --db locations.db
    python -m location_heatmap heatmap --db locations.db --out heatmap.html
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import UTC, datetime

from location_heatmap.csv_io import load_location_points
from location_heatmap.heatmap import compute_heat_map_with
from location_heatmap.inspect import summarize_points
from location_heatmap.models import (
    DEFAULT_THRESHOLD_DEG,
    DEFAULT_TRACKING_INTERVAL_S,
    DEFAULT_TZ,
    MAP_VIEW_RADIUS_M,
    HeatMapParams,
    LocationPoint,
)
from location_heatmap.storage import LocationStore
from location_heatmap.timeutils import dt_from_epoch_ms, parse_dt, tzinfo_from_name
from location_heatmap.viewport import compute_viewport

_FAR_FUTURE = datetime(9999, 12, 31, tzinfo=UTC)


def _load_points(args: argparse.Namespace) -> list[LocationPoint]:
    start_text = getattr(args, "range_start", None)
    end_text = getattr(args, "range_end", None)
    with LocationStore(args.db) as store:
        if start_text is None and end_text is None:
            return store.get_all()
        start = parse_dt(start_text, args.tz) if start_text else dt_from_epoch_ms(0)
        end = parse_dt(end_text, args.tz) if end_text else _FAR_FUTURE
        return store.get_by_date_range(start, end)


def _heat_map_params(args: argparse.Namespace) -> HeatMapParams:
    return HeatMapParams(radius_m=args.radius_m, threshold_deg=args.threshold_deg)


def _cmd_import_csv(args: argparse.Namespace) -> int:
    points, summary = load_location_points(args.csv)
    with LocationStore(args.db) as store:
        inserted = store.save_many(points)
        total = store.count()
    print(f"rows={summary.rows_total}, parsed={summary.rows_parsed}, skipped={summary.rows_skipped}")
    print(f"Imported {inserted} points into {args.db} (total stored={total})")
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    points = _load_points(args)
    res = summarize_points(points)

    print(f"### Stored points\n{res.count} ({res.with_accuracy} with accuracy)\n")
    if res.first_time is not None and res.last_time is not None:
        tz = tzinfo_from_name(args.tz)
        first = res.first_time.astimezone(tz)
        last = res.last_time.astimezone(tz)
        print("### Time range")
        print(f"start={first.isoformat(sep=' ')}, end={last.isoformat(sep=' ')}\n")
    if res.delta is not None:
        print("### Sampling interval (seconds)")
        print(
            f"count={res.delta.count}, min={res.delta.min_s:.3f}, median={res.delta.median_s:.3f}, "
            f"p95={res.delta.p95_s:.3f}, max={res.delta.max_s:.3f}\n"
        )
    if res.count:
        print("### Bounding box")
        print(f"lat=[{res.min_lat}, {res.max_lat}], lon=[{res.min_lon}, {res.max_lon}]\n")

    if args.json:
        print(json.dumps(asdict(res), ensure_ascii=False, indent=2, default=str))
    return 0


def _cmd_heatmap(args: argparse.Namespace) -> int:
    points = _load_points(args)
    instructions = compute_heat_map_with(points, _heat_map_params(args))
    viewport = compute_viewport(points)
    if not instructions:
        print("No stored points, nothing to render.")
    else:
        print(f"points={len(points)}, groups={len(instructions)}")

    if args.out:
        from location_heatmap.render import save_heat_map

        out = save_heat_map(instructions, viewport, args.out, tiles=args.tiles)
        print(f"Wrote: {out}")

    if args.json:
        payload = {
            "instructions": [asdict(i) for i in instructions],
            "viewport": asdict(viewport) if viewport is not None else None,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_viewport(args: argparse.Namespace) -> int:
    viewport = compute_viewport(_load_points(args))
    if viewport is None:
        print("No stored points, viewport unchanged.")
        return 0
    print(
        f"center=({viewport.center_lat:.6f}, {viewport.center_lon:.6f}), "
        f"distance={viewport.distance_m:.1f}m, radius={viewport.radius_m:.1f}m"
    )
    return 0


def _cmd_track(args: argparse.Namespace) -> int:
    from location_heatmap.tracker import LocationTracker, ReplaySensor

    replay, _ = load_location_points(args.replay)
    sensor = ReplaySensor(replay)
    max_readings = args.max_readings if args.max_readings is not None else len(replay)
    if max_readings <= 0:
        print("Nothing to replay.")
        return 0

    with LocationStore(args.db) as store:
        tracker = LocationTracker(store, sensor, interval_seconds=args.interval_seconds)
        tracker.add_listener(
            lambda p: print(f"Location updated: {p.latitude:.6f}, {p.longitude:.6f}", flush=True)
        )
        refresher = None
        if args.out:
            from location_heatmap.render import HeatMapRefresher

            params = _heat_map_params(args)
            refresher = HeatMapRefresher(store, args.out, params, tiles=args.tiles)
            # Draw what is already stored before the first reading arrives.
            refresher.refresh()
            tracker.add_listener(refresher)
        try:
            stored = tracker.run(max_readings=max_readings)
        except KeyboardInterrupt:
            tracker.stop()
            print("\nTracking stopped", file=sys.stderr)
            stored = None
        total = store.count()
    if stored is not None:
        print(f"Tracking finished: stored={stored}, total={total}")
    if refresher is not None:
        print(f"Heat map refreshed {refresher.refreshes} times: {args.out}")
    return 0


def _cmd_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        answer = input("Are you sure you want to delete all location data? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return 1
    with LocationStore(args.db) as store:
        deleted = store.clear()
    print(f"All data cleared ({deleted} points)")
    return 0


def _add_db(p: argparse.ArgumentParser) -> None:
    p.add_argument("--db", type=str, default="locations.db", help="SQLite database path")


def _add_range(p: argparse.ArgumentParser) -> None:
    p.add_argument("--tz", type=str, default=DEFAULT_TZ, help="Timezone (IANA) for range bounds and output")
    p.add_argument("--range-start", type=str, default=None, help="Only use points at or after, e.g. 2025-06-01 00:00:00")
    p.add_argument("--range-end", type=str, default=None, help="Only use points at or before, e.g. 2025-06-30 23:59:59")


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="location-heatmap")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_imp = sub.add_parser("import-csv", help="Import an exported Path.csv track into the database")
    p_imp.add_argument("--csv", type=str, default="Path.csv", help="Input CSV path")
    _add_db(p_imp)
    p_imp.set_defaults(func=_cmd_import_csv)

    p_st = sub.add_parser("stats", help="Summarize stored points (time range, sampling interval, bbox)")
    _add_db(p_st)
    _add_range(p_st)
    p_st.add_argument("--json", action="store_true", help="Also print JSON")
    p_st.set_defaults(func=_cmd_stats)

    p_hm = sub.add_parser("heatmap", help="Compute the density heat map and write an HTML map")
    _add_db(p_hm)
    _add_range(p_hm)
    p_hm.add_argument("--out", type=str, default="heatmap.html", help="Output HTML path (empty to skip)")
    p_hm.add_argument("--radius-m", type=float, default=MAP_VIEW_RADIUS_M, help="Circle radius in meters")
    p_hm.add_argument(
        "--threshold-deg",
        type=float,
        default=DEFAULT_THRESHOLD_DEG,
        help="Grouping threshold in degrees (0.001 is roughly 100 m)",
    )
    p_hm.add_argument("--tiles", type=str, default="OpenStreetMap", help="folium tile layer")
    p_hm.add_argument("--json", action="store_true", help="Also print render instructions as JSON")
    p_hm.set_defaults(func=_cmd_heatmap)

    p_vp = sub.add_parser("viewport", help="Print the map center and visible radius")
    _add_db(p_vp)
    _add_range(p_vp)
    p_vp.set_defaults(func=_cmd_viewport)

    p_tr = sub.add_parser("track", help="Run the tracker, replaying coordinates from a CSV as the sensor")
    _add_db(p_tr)
    p_tr.add_argument("--replay", type=str, required=True, help="Path.csv whose coordinates are replayed")
    p_tr.add_argument(
        "--interval-seconds",
        type=float,
        default=DEFAULT_TRACKING_INTERVAL_S,
        help="Seconds between readings",
    )
    p_tr.add_argument("--max-readings", type=int, default=None, help="Stop after N readings (default: all)")
    p_tr.add_argument("--out", type=str, default="", help="Rewrite this heat map HTML after every reading")
    p_tr.add_argument("--radius-m", type=float, default=MAP_VIEW_RADIUS_M, help="Circle radius in meters")
    p_tr.add_argument(
        "--threshold-deg",
        type=float,
        default=DEFAULT_THRESHOLD_DEG,
        help="Grouping threshold in degrees (0.001 is roughly 100 m)",
    )
    p_tr.add_argument("--tiles", type=str, default="OpenStreetMap", help="folium tile layer")
    p_tr.set_defaults(func=_cmd_track)

    p_cl = sub.add_parser("clear", help="Delete all stored points")
    _add_db(p_cl)
    p_cl.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p_cl.set_defaults(func=_cmd_clear)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args))
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
