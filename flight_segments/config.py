"""Configuration helpers for the flight summary pipeline.

Provides YAML loading, small utilities for accessing nested configuration
values with defaults, and the typed parameter bundle shared by the day
workers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from flight_segments.locations import DEFAULT_GEOFENCES, GeofenceRule, load_geofences

GROUND_THRESHOLD_FT = 2000
MIN_DURATION_SEC = 900.0
MIN_POINTS = 50


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load a YAML configuration file."""

    with Path(path).open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def get_nested(config: Dict[str, Any], keys: list[str], default: Any) -> Any:
    """Retrieve a nested value from a config dict with a default."""

    current: Any = config
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


@dataclass(frozen=True)
class PipelineParams:
    """Thresholds and rules applied to every day of the run."""

    ground_threshold_ft: int = GROUND_THRESHOLD_FT
    min_duration_sec: float = MIN_DURATION_SEC
    min_points: int = MIN_POINTS
    geofences: Tuple[GeofenceRule, ...] = field(default=DEFAULT_GEOFENCES)
    n_jobs: int = 1

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "PipelineParams":
        """Build parameters from a loaded YAML config, falling back to defaults."""

        geofence_cfg = cfg.get("geofences") or None
        return cls(
            ground_threshold_ft=int(get_nested(cfg, ["segmentation", "ground_threshold_ft"], GROUND_THRESHOLD_FT)),
            min_duration_sec=float(get_nested(cfg, ["filter", "min_duration_sec"], MIN_DURATION_SEC)),
            min_points=int(get_nested(cfg, ["filter", "min_points"], MIN_POINTS)),
            geofences=load_geofences(geofence_cfg) if geofence_cfg else DEFAULT_GEOFENCES,
            n_jobs=int(get_nested(cfg, ["runtime", "n_jobs"], 1)),
        )
