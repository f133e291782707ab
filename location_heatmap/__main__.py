"""Module entry point: python -m location_heatmap ..."""

from __future__ import annotations

from location_heatmap.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
