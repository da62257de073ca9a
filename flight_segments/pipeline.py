"""High-level orchestration of the flight summary pipeline.

Each trace file is taken from raw samples to candidate segment summaries on
its own, so days can be spread across joblib workers. Classification,
filtering and report assembly run once over the combined summaries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

import pandas as pd
from joblib import Parallel, delayed

from flight_segments.config import PipelineParams
from flight_segments.io import empty_tracks, load_day_trace
from flight_segments.locations import classify_summaries
from flight_segments.report import assemble_report
from flight_segments.segmentation import label_ground_air, segment_flights
from flight_segments.summary import empty_summaries, filter_summaries, summarize_segments


@dataclass(frozen=True)
class DayResult:
    """Outcome of processing one trace file."""

    path: Path
    num_points: int
    summaries: pd.DataFrame
    tracks: pd.DataFrame | None = None


def process_day(path: str | Path, ground_threshold_ft: float, keep_tracks: bool = False) -> DayResult:
    """Ingest, label, segment and summarise a single day's trace file."""

    path = Path(path)
    tracks = load_day_trace(path)
    if tracks.empty:
        return DayResult(path, 0, empty_summaries(), tracks if keep_tracks else None)

    segments = segment_flights(label_ground_air(tracks, ground_threshold_ft))
    summaries = summarize_segments(segments)
    logging.info("%s: %d points, %d candidate flights", path.name, len(tracks), len(summaries))
    return DayResult(path, len(tracks), summaries, tracks if keep_tracks else None)


def process_days(paths: Sequence[Path], params: PipelineParams, keep_tracks: bool = False) -> List[DayResult]:
    """Process every trace file, in parallel when params.n_jobs != 1."""

    return Parallel(n_jobs=params.n_jobs)(
        delayed(process_day)(path, params.ground_threshold_ft, keep_tracks) for path in paths
    )


def build_flight_summary(
    paths: Sequence[Path],
    params: PipelineParams,
    keep_tracks: bool = False,
) -> Tuple[pd.DataFrame, pd.DataFrame | None]:
    """
    Run the full pipeline over the trace files.

    Returns the assembled report and, if keep_tracks is set, the combined
    track points of all days.
    """

    results = process_days(paths, params, keep_tracks=keep_tracks)

    frames = [result.summaries for result in results if not result.summaries.empty]
    summaries = pd.concat(frames, ignore_index=True) if frames else empty_summaries()
    classified = classify_summaries(summaries, params.geofences)
    retained = filter_summaries(classified, params.min_duration_sec, params.min_points)
    report = assemble_report(retained)

    tracks = None
    if keep_tracks:
        track_frames = [result.tracks for result in results if result.tracks is not None and not result.tracks.empty]
        tracks = (
            pd.concat(track_frames, ignore_index=True).sort_values(["flight_date", "idx"]).reset_index(drop=True)
            if track_frames
            else empty_tracks()
        )

    total_points = sum(result.num_points for result in results)
    logging.info(
        "Processed %d days: %d track points, %d candidate flights, %d flights retained",
        len(results),
        total_points,
        len(summaries),
        len(report),
    )
    return report, tracks
