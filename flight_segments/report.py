"""Rendering of classified flight summaries to the flight summary report."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

REPORT_COLUMNS: List[str] = [
    "flight_date",
    "flight_num",
    "takeoff_timestamp",
    "takeoff_lat",
    "takeoff_lng",
    "takeoff_altitude_ft",
    "takeoff_location",
    "landing_timestamp",
    "landing_lat",
    "landing_lng",
    "landing_altitude_ft",
    "landing_location",
    "flight_duration_minutes",
]

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _format_epoch_seconds(seconds: pd.Series) -> pd.Series:
    """Render epoch seconds as second-precision ISO-8601 UTC strings (truncated)."""

    return pd.to_datetime(seconds.astype(float), unit="s", utc=True).dt.strftime(TIMESTAMP_FORMAT)


def assemble_report(classified: pd.DataFrame) -> pd.DataFrame:
    """
    Sort classified summaries by (flight_date, flight_num) and render the output schema.

    Coordinates are rounded to 6 decimals, durations to 1 decimal, and missing
    altitudes become 0.
    """

    if classified.empty:
        return pd.DataFrame(columns=REPORT_COLUMNS)

    ordered = classified.sort_values(["flight_date", "flight_num"]).reset_index(drop=True)
    report = pd.DataFrame({"flight_date": pd.to_datetime(ordered["flight_date"]).dt.strftime("%Y-%m-%d")})
    report["flight_num"] = ordered["flight_num"].astype(int)
    for role in ("takeoff", "landing"):
        report[f"{role}_timestamp"] = _format_epoch_seconds(
            ordered["base_timestamp"].astype(float) + ordered[f"{role}_time_offset"].astype(float)
        )
        report[f"{role}_lat"] = ordered[f"{role}_lat"].astype(float).round(6)
        report[f"{role}_lng"] = ordered[f"{role}_lng"].astype(float).round(6)
        report[f"{role}_altitude_ft"] = pd.to_numeric(ordered[f"{role}_altitude_ft"]).fillna(0).astype(int)
        report[f"{role}_location"] = ordered[f"{role}_location"]
    report["flight_duration_minutes"] = ordered["duration_minutes"].astype(float).round(1)
    return report[REPORT_COLUMNS]


def write_report(report: pd.DataFrame, path: str | Path) -> Path:
    """Write the report as CSV with a fixed column order; identical input gives identical bytes."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    report.reindex(columns=REPORT_COLUMNS).to_csv(path, index=False, lineterminator="\n")
    logging.info("Saved %d flights to %s", len(report), path)
    return path
