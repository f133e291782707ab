from __future__ import annotations

from datetime import date, datetime, time, timedelta
from pathlib import Path

import streamlit as st
import streamlit.components.v1 as components

from location_heatmap.csv_io import load_location_points
from location_heatmap.heatmap import compute_heat_map_with
from location_heatmap.models import (
    DEFAULT_THRESHOLD_DEG,
    DEFAULT_TRACKING_INTERVAL_S,
    DEFAULT_TZ,
    MAP_VIEW_RADIUS_M,
    HeatMapParams,
    LocationPoint,
)
from location_heatmap.render import build_heat_map
from location_heatmap.storage import LocationStore
from location_heatmap.timeutils import tzinfo_from_name
from location_heatmap.tracker import LocationTracker, ReplaySensor
from location_heatmap.viewport import compute_viewport


def _day_bounds(start_d: date, end_d: date, tz_name: str) -> tuple[datetime, datetime]:
    """Inclusive [start 00:00, end 23:59:59.999] in tz."""

    tz = tzinfo_from_name(tz_name)
    start_dt = datetime.combine(start_d, time.min).replace(tzinfo=tz)
    end_dt = datetime.combine(end_d + timedelta(days=1), time.min).replace(tzinfo=tz) - timedelta(milliseconds=1)
    return start_dt, end_dt


def _load_points(db_path: str, start_d: date | None, end_d: date | None, tz_name: str) -> list[LocationPoint]:
    with LocationStore(db_path) as store:
        if start_d is None or end_d is None:
            return store.get_all()
        start_dt, end_dt = _day_bounds(start_d, end_d, tz_name)
        return store.get_by_date_range(start_dt, end_dt)


def _tracking_controls(db_path: str) -> None:
    """Start or stop a tracker that replays a Path.csv into the database."""

    tracker: LocationTracker | None = st.session_state.get("tracker")
    replay_csv = st.text_input("Replay CSV", value="Path.csv")
    interval_s = st.number_input("Interval (s)", value=DEFAULT_TRACKING_INTERVAL_S, min_value=0.1, step=1.0)

    if tracker is not None and tracker.is_tracking:
        st.caption(f"Tracking: {len(st.session_state['readings'])} readings stored")
        if st.button("Stop tracking", use_container_width=True):
            tracker.stop()
            st.session_state["tracker_store"].close()
            st.rerun()
        st.button("Refresh map", use_container_width=True)
        return

    if st.button("Start tracking", type="primary", use_container_width=True):
        if not Path(replay_csv).exists():
            st.error(f"File not found: {replay_csv!r}")
            return
        replay, _ = load_location_points(replay_csv)
        old_store = st.session_state.get("tracker_store")
        if old_store is not None:
            old_store.close()
        store = LocationStore(db_path)
        tracker = LocationTracker(store, ReplaySensor(replay), interval_seconds=float(interval_s))
        # Listeners run on the tracker thread, so collect into a plain list.
        readings: list[LocationPoint] = []
        tracker.add_listener(readings.append)
        st.session_state["readings"] = readings
        tracker.start()
        st.session_state["tracker"] = tracker
        st.session_state["tracker_store"] = store
        st.rerun()


def main() -> None:
    st.set_page_config(page_title="Location heat map", layout="wide")
    st.title("Location heat map")

    with st.sidebar:
        st.subheader("Data")
        db_path = st.text_input("SQLite database", value="locations.db")
        tz_name = st.text_input("Timezone (IANA)", value=DEFAULT_TZ)

        st.subheader("Heat map")
        radius_m = st.number_input("Circle radius (m)", value=MAP_VIEW_RADIUS_M, min_value=0.0, step=10.0)
        threshold_deg = st.number_input(
            "Grouping threshold (degrees)",
            value=DEFAULT_THRESHOLD_DEG,
            min_value=0.00001,
            step=0.0005,
            format="%.5f",
        )

        st.subheader("Time range")
        use_range = st.checkbox("Filter by date", value=False)
        start_d: date | None = None
        end_d: date | None = None
        if use_range:
            try:
                today = datetime.now(tzinfo_from_name(tz_name)).date()
            except ValueError as exc:
                st.error(str(exc))
                return
            start_d = st.date_input("Start date", value=today.replace(day=1))
            end_d = st.date_input("End date", value=today)

        st.subheader("Tracking")
        _tracking_controls(db_path)

        st.subheader("Maintenance")
        confirm = st.checkbox("I want to delete all location data")
        if st.button("Clear data", disabled=not confirm, use_container_width=True):
            if not Path(db_path).exists():
                st.error(f"Database not found: {db_path!r}")
            else:
                with LocationStore(db_path) as store:
                    deleted = store.clear()
                st.success(f"All data cleared ({deleted} points)")

    if not Path(db_path).exists():
        st.error(f"Database not found: {db_path!r}. Import a track first: python -m location_heatmap import-csv")
        return

    if start_d is not None and end_d is not None and start_d > end_d:
        st.error("Start date must not be after end date.")
        return

    try:
        points = _load_points(db_path, start_d, end_d, tz_name)
        params = HeatMapParams(radius_m=float(radius_m), threshold_deg=float(threshold_deg))
        instructions = compute_heat_map_with(points, params)
    except ValueError as exc:
        st.error(str(exc))
        return
    viewport = compute_viewport(points)

    c1, c2, c3 = st.columns(3)
    c1.metric("Points", str(len(points)))
    c2.metric("Density groups", str(len(instructions)))
    c3.metric("Visible radius", f"{viewport.radius_m:,.0f} m" if viewport is not None else "-")

    if not instructions:
        st.info("No points in range, nothing to render.")

    m = build_heat_map(instructions, viewport)
    components.html(m.get_root().render(), height=640)

    with st.expander("Groups", expanded=False):
        rows = [
            {
                "latitude": ins.latitude,
                "longitude": ins.longitude,
                "intensity": round(ins.intensity, 3),
                "color": ins.color.hex,
            }
            for ins in sorted(instructions, key=lambda i: i.intensity, reverse=True)
        ]
        st.dataframe(rows, use_container_width=True, height=360)


if __name__ == "__main__":
    main()
