"""Ground/air labelling and takeoff-based flight segmentation.

Each day is scanned in trace order; a flight starts on every ground-to-air
transition and owns the airborne samples up to the next takeoff or the end of
the day. Ground samples only drive transition detection.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from flight_segments.config import GROUND_THRESHOLD_FT


def is_ground_altitude(altitude_ft, ground_threshold_ft: float = GROUND_THRESHOLD_FT):
    """Return True where a sample (scalar or Series) counts as on the ground."""

    return altitude_ft < ground_threshold_ft


def label_ground_air(tracks: pd.DataFrame, ground_threshold_ft: float = GROUND_THRESHOLD_FT) -> pd.DataFrame:
    """Add a boolean 'is_ground' column from the altitude threshold."""

    if "altitude_ft" not in tracks.columns:
        raise ValueError("Column 'altitude_ft' is required for ground/air labelling.")
    labeled = tracks.copy()
    labeled["is_ground"] = is_ground_altitude(labeled["altitude_ft"], ground_threshold_ft).astype(bool)
    return labeled


def assign_flight_numbers(is_ground: Sequence[bool]) -> np.ndarray:
    """
    Number the flights of one day's ordered ground/air sequence.

    The day starts on the ground, so an airborne first sample is a takeoff.
    Airborne samples get the number of the latest takeoff (1, 2, ...); ground
    samples get -1.
    """

    flags = np.asarray(is_ground, dtype=bool)
    flight_nums = np.full(len(flags), -1, dtype=int)

    prev_ground = True
    flight_num = 0
    for pos, ground in enumerate(flags):
        if prev_ground and not ground:
            flight_num += 1
        if not ground:
            flight_nums[pos] = flight_num
        prev_ground = ground
    return flight_nums


def segment_flights(labeled: pd.DataFrame) -> pd.DataFrame:
    """
    Return the airborne samples with a per-day 'flight_num' column.

    Days are scanned independently in 'idx' order; ground samples are excluded
    from the result.
    """

    missing = [col for col in ("flight_date", "idx", "is_ground") if col not in labeled.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    df_sorted = labeled.sort_values(["flight_date", "idx"]).reset_index(drop=True)
    flight_nums = np.full(len(df_sorted), -1, dtype=int)

    for flight_date, group_idx in df_sorted.groupby("flight_date", sort=True).groups.items():
        positions = np.asarray(group_idx)
        day_nums = assign_flight_numbers(df_sorted.loc[positions, "is_ground"].to_numpy())
        flight_nums[positions] = day_nums
        logging.debug("%s: detected %d takeoffs", flight_date, int(day_nums.max(initial=0)))

    df_sorted["flight_num"] = flight_nums
    segments = df_sorted[df_sorted["flight_num"] >= 1].reset_index(drop=True)
    return segments
