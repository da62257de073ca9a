"""CLI entry point for the flight summary pipeline.

Orchestrates trace discovery, per-day segmentation, site classification,
noise filtering and report writing from a YAML config.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict

from flight_segments.config import PipelineParams, load_config
from flight_segments.io import discover_trace_files, save_dataframe
from flight_segments.pipeline import build_flight_summary
from flight_segments.report import write_report


def configure_logging(log_cfg: Dict[str, object]) -> None:
    """Configure root logger with both file and console handlers."""

    log_dir = Path(log_cfg.get("dir", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    filename = log_cfg.get("filename", "flight_summary.log")
    log_path = log_dir / filename
    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s - %(levelname)s - %(message)s"
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(fmt))
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(file_handler)
    root.addHandler(stream_handler)
    root.info("Logging to %s (level=%s)", log_path, level_name)


def main(config_path: str = "config/flight_summary.yaml") -> Path:
    cfg = load_config(config_path)

    configure_logging(cfg.get("logging", {}) or {})
    params = PipelineParams.from_config(cfg)
    logging.info(
        "Ground threshold %d ft; keeping flights > %.0f s with > %d points; %d geofence rules; n_jobs=%d",
        params.ground_threshold_ft,
        params.min_duration_sec,
        params.min_points,
        len(params.geofences),
        params.n_jobs,
    )

    input_cfg = cfg.get("input", {}) or {}
    trace_glob = input_cfg.get("trace_glob", "data/flight-track-*.json")
    paths = discover_trace_files(trace_glob)

    output_cfg = cfg.get("output", {}) or {}
    output_dir = Path(output_cfg.get("dir", "output"))
    save_tracks = bool(output_cfg.get("save_tracks", False))

    report, tracks = build_flight_summary(paths, params, keep_tracks=save_tracks)

    report_path = write_report(report, output_dir / output_cfg.get("report_filename", "flight_summary.csv"))
    if save_tracks and tracks is not None:
        save_dataframe(tracks, output_dir / output_cfg.get("tracks_filename", "flight_tracks.csv"))
    return report_path


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Flight segment summary pipeline.")
    parser.add_argument(
        "-c",
        "--config",
        default="config/flight_summary.yaml",
        help="Path to YAML config file.",
    )
    args = parser.parse_args()
    main(args.config)
