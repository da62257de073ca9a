"""Per-flight endpoint summaries and noise filtering.

Endpoints are the raw first and last airborne samples of each segment in
trace order; nothing is smoothed or interpolated.
"""

from __future__ import annotations

import logging
from typing import List

import pandas as pd

from flight_segments.config import MIN_DURATION_SEC, MIN_POINTS

SEGMENT_KEYS: List[str] = ["flight_date", "flight_num"]

SUMMARY_COLUMNS: List[str] = [
    "flight_date",
    "flight_num",
    "base_timestamp",
    "takeoff_time_offset",
    "takeoff_lat",
    "takeoff_lng",
    "takeoff_altitude_ft",
    "landing_time_offset",
    "landing_lat",
    "landing_lng",
    "landing_altitude_ft",
    "num_points",
    "duration_minutes",
]


def empty_summaries() -> pd.DataFrame:
    return pd.DataFrame(columns=SUMMARY_COLUMNS)


def summarize_segments(segments: pd.DataFrame) -> pd.DataFrame:
    """
    Reduce each (flight_date, flight_num) segment to one summary row.

    The takeoff endpoint is the segment's lowest-'idx' sample and the landing
    endpoint its highest; 'duration_minutes' is the difference of their time
    offsets.
    """

    if segments.empty:
        return empty_summaries()

    ordered = segments.sort_values([*SEGMENT_KEYS, "idx"])
    takeoff = ordered.drop_duplicates(SEGMENT_KEYS, keep="first").set_index(SEGMENT_KEYS)
    landing = ordered.drop_duplicates(SEGMENT_KEYS, keep="last").set_index(SEGMENT_KEYS)
    counts = ordered.groupby(SEGMENT_KEYS, sort=True).size()

    summary = pd.DataFrame(
        {
            "base_timestamp": takeoff["base_timestamp"],
            "takeoff_time_offset": takeoff["time_offset"],
            "takeoff_lat": takeoff["lat"],
            "takeoff_lng": takeoff["lng"],
            "takeoff_altitude_ft": takeoff["altitude_ft"],
            "landing_time_offset": landing["time_offset"],
            "landing_lat": landing["lat"],
            "landing_lng": landing["lng"],
            "landing_altitude_ft": landing["altitude_ft"],
            "num_points": counts,
        }
    )
    summary["duration_minutes"] = (summary["landing_time_offset"] - summary["takeoff_time_offset"]) / 60.0
    summary = summary.reset_index()
    return summary[SUMMARY_COLUMNS].sort_values(SEGMENT_KEYS).reset_index(drop=True)


def filter_summaries(
    summaries: pd.DataFrame,
    min_duration_sec: float = MIN_DURATION_SEC,
    min_points: int = MIN_POINTS,
) -> pd.DataFrame:
    """Keep flights airborne longer than min_duration_sec with more than min_points samples."""

    if summaries.empty:
        return summaries.copy()

    duration_sec = summaries["landing_time_offset"] - summaries["takeoff_time_offset"]
    mask = (duration_sec > min_duration_sec) & (summaries["num_points"] > min_points)
    kept = summaries[mask].reset_index(drop=True)
    dropped = len(summaries) - len(kept)
    if dropped:
        logging.info(
            "Dropped %d segments with <= %.0f s airborne or <= %d points",
            dropped,
            min_duration_sec,
            min_points,
        )
    return kept
