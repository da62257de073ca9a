"""Input/output helpers for the flight summary pipeline.

Covers discovery of the per-day trace files, tolerant parsing of a day's
trace JSON into a track-point frame, and CSV saving.
"""

from __future__ import annotations

import glob
import json
import logging
import math
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import pandas as pd

TRACK_DTYPES: Dict[str, str] = {
    "flight_date": "object",
    "base_timestamp": "int64",
    "idx": "int64",
    "time_offset": "float64",
    "lat": "float64",
    "lng": "float64",
    "altitude_ft": "int64",
    "timestamp": "float64",
}
TRACK_COLUMNS: List[str] = list(TRACK_DTYPES)

FILENAME_DATE_PATTERN = re.compile(r"flight-track-(\d{4}-\d{2}-\d{2})\.json$")

# Epoch seconds representable as pandas timestamps (roughly years 1684-2255).
EPOCH_LIMIT_SECONDS = 9_000_000_000
INT64_LIMIT = float(np.iinfo(np.int64).max)


class MalformedTraceError(ValueError):
    """Raised when a day's payload is not a usable trace record."""


def empty_tracks() -> pd.DataFrame:
    """Return an empty track-point frame with the expected columns and dtypes."""

    return pd.DataFrame({col: pd.Series(dtype=dtype) for col, dtype in TRACK_DTYPES.items()})


def _as_number(value: Any) -> float | None:
    """Coerce a JSON scalar to a finite float, or None if it is not numeric."""

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""

    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def flight_date_from_path(path: str | Path) -> date | None:
    """Extract the calendar day from a ``flight-track-YYYY-MM-DD.json`` file name."""

    match = FILENAME_DATE_PATTERN.search(Path(path).name)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def parse_trace(raw: str, flight_date: date | None = None) -> pd.DataFrame:
    """
    Parse one day's raw trace payload into track points.

    The payload is a JSON object with a base ``timestamp`` (epoch seconds) and a
    ``trace`` array of ``[time_offset, lat, lon, altitude, ...]`` samples. ``idx``
    is the 1-based position in that array and is assigned before any sample is
    dropped. Samples without a usable time offset, latitude or longitude are
    dropped, as are samples whose timestamp is out of range; a missing,
    non-numeric or out-of-range altitude (``null``, ``"ground"``) becomes 0 and
    fractional altitudes round half away from zero.
    If ``flight_date`` is not given, the UTC date of the base timestamp is used.

    Raises:
        MalformedTraceError: If the payload is not JSON or lacks the
            ``timestamp``/``trace`` structure, or the base timestamp is out of range.
    """

    try:
        record = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedTraceError(f"Payload is not valid JSON: {exc.msg}") from exc

    if not isinstance(record, dict):
        raise MalformedTraceError(f"Expected a JSON object, got {type(record).__name__}")
    base_ts = _as_number(record.get("timestamp"))
    if base_ts is None:
        raise MalformedTraceError("Missing or non-numeric base 'timestamp'")
    trace = record.get("trace")
    if not isinstance(trace, list):
        raise MalformedTraceError("Missing 'trace' array")

    if abs(base_ts) >= EPOCH_LIMIT_SECONDS:
        raise MalformedTraceError(f"Base 'timestamp' out of range: {base_ts!r}")
    base_timestamp = int(base_ts)
    if flight_date is None:
        try:
            flight_date = datetime.fromtimestamp(base_timestamp, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedTraceError(f"Base 'timestamp' has no calendar date: {base_ts!r}") from exc

    rows = []
    for idx, sample in enumerate(trace, start=1):
        if not isinstance(sample, (list, tuple)) or len(sample) < 3:
            continue
        time_offset = _as_number(sample[0])
        lat = _as_number(sample[1])
        lng = _as_number(sample[2])
        if time_offset is None or lat is None or lng is None:
            continue
        if abs(base_timestamp + time_offset) >= EPOCH_LIMIT_SECONDS:
            continue
        altitude = _as_number(sample[3]) if len(sample) > 3 else None
        if altitude is None or abs(altitude) >= INT64_LIMIT:
            altitude_ft = 0
        else:
            altitude_ft = _round_half_away(altitude)
        rows.append(
            (flight_date, base_timestamp, idx, time_offset, lat, lng, altitude_ft, base_timestamp + time_offset)
        )

    dropped = len(trace) - len(rows)
    if dropped:
        logging.info("Dropped %d of %d samples without usable time/position on %s", dropped, len(trace), flight_date)
    if not rows:
        return empty_tracks()
    return pd.DataFrame.from_records(rows, columns=TRACK_COLUMNS).astype(TRACK_DTYPES)


def load_day_trace(path: str | Path) -> pd.DataFrame:
    """
    Load one day's trace file, treating a malformed payload as a day without data.

    Undecodable bytes are replaced so that binary or HTML error pages surface as
    a :class:`MalformedTraceError` and yield an empty frame instead of failing
    the run. I/O errors propagate.
    """

    path = Path(path)
    raw = path.read_text(encoding="utf-8", errors="replace")
    try:
        tracks = parse_trace(raw, flight_date=flight_date_from_path(path))
    except MalformedTraceError as exc:
        logging.warning("Skipping %s: %s", path, exc)
        return empty_tracks()
    logging.info("Read %d track points from %s", len(tracks), path)
    return tracks


def discover_trace_files(trace_glob: str) -> List[Path]:
    """Return the sorted trace files matching the glob."""

    paths = [Path(p) for p in sorted(glob.glob(trace_glob))]
    if not paths:
        raise FileNotFoundError(f"No trace files matched glob: {trace_glob}")
    logging.info("Found %d trace files matching %s", len(paths), trace_glob)
    return paths


def save_dataframe(df: pd.DataFrame, path: str | Path) -> None:
    """Persist a DataFrame to CSV."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logging.info("Saved %d rows to %s", len(df), path)
