"""Geofence rules naming the takeoff and landing site of each flight.

Rules are evaluated in order and the first match wins. ADS-B coverage is lost
on final approach to Afungi, so a landing there is usually recorded while the
aircraft is still high and some distance out; the landing-only Afungi rules
accept a last known position that is high and in the general vicinity.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Sequence, Tuple

import pandas as pd

TAKEOFF = "takeoff"
LANDING = "landing"
ROLES: Tuple[str, ...] = (TAKEOFF, LANDING)
UNKNOWN = "Unknown"

# Substituted for a missing altitude so that altitude-gated rules still pass.
MISSING_ALTITUDE_FT = 10000.0


@dataclass(frozen=True)
class GeofenceRule:
    """A rectangular lat/lng region, optionally altitude-gated, naming a site.

    The region is either a box of +/- tolerance_deg around a centre or explicit
    open lat/lng ranges (or both). Bounds are exclusive.
    """

    name: str
    roles: Tuple[str, ...] = ROLES
    center_lat: float | None = None
    center_lng: float | None = None
    tolerance_deg: float | None = None
    lat_range: Tuple[float, float] | None = None
    lng_range: Tuple[float, float] | None = None
    min_altitude_ft: float | None = None

    def __post_init__(self) -> None:
        unknown_roles = [role for role in self.roles if role not in ROLES]
        if unknown_roles:
            raise ValueError(f"Geofence {self.name!r} has unsupported roles: {unknown_roles}")
        has_box = self.tolerance_deg is not None
        if has_box and (self.center_lat is None or self.center_lng is None):
            raise ValueError(f"Geofence {self.name!r} needs center_lat/center_lng with tolerance_deg")
        if not has_box and self.lat_range is None and self.lng_range is None:
            raise ValueError(f"Geofence {self.name!r} defines no region")

    def matches(self, lat: float, lng: float, altitude_ft: float, role: str) -> bool:
        if role not in self.roles:
            return False
        if self.tolerance_deg is not None:
            if not (abs(lat - self.center_lat) < self.tolerance_deg and abs(lng - self.center_lng) < self.tolerance_deg):
                return False
        if self.lat_range is not None and not (self.lat_range[0] < lat < self.lat_range[1]):
            return False
        if self.lng_range is not None and not (self.lng_range[0] < lng < self.lng_range[1]):
            return False
        if self.min_altitude_ft is not None and not altitude_ft > self.min_altitude_ft:
            return False
        return True


DEFAULT_GEOFENCES: Tuple[GeofenceRule, ...] = (
    GeofenceRule("Maputo", center_lat=-25.9, center_lng=32.57, tolerance_deg=0.5),
    GeofenceRule("Pemba", center_lat=-12.99, center_lng=40.52, tolerance_deg=0.5),
    GeofenceRule("Afungi", roles=(TAKEOFF,), center_lat=-10.82, center_lng=40.53, tolerance_deg=1.0),
    GeofenceRule(
        "Afungi", roles=(LANDING,), center_lat=-10.82, center_lng=40.53, tolerance_deg=1.0, min_altitude_ft=3000
    ),
    GeofenceRule(
        "Afungi", roles=(LANDING,), lat_range=(-12.0, -10.0), lng_range=(39.5, 41.5), min_altitude_ft=5000
    ),
)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value)) or value is pd.NA


def classify_location(
    lat: float,
    lng: float,
    altitude_ft: float | None,
    role: str,
    rules: Sequence[GeofenceRule] = DEFAULT_GEOFENCES,
) -> str:
    """Return the name of the first rule matching the endpoint, or "Unknown"."""

    if role not in ROLES:
        raise ValueError(f"Unsupported endpoint role: {role}")
    if _is_missing(lat) or _is_missing(lng):
        return UNKNOWN
    altitude = MISSING_ALTITUDE_FT if _is_missing(altitude_ft) else float(altitude_ft)
    for rule in rules:
        if rule.matches(float(lat), float(lng), altitude, role):
            return rule.name
    return UNKNOWN


def classify_summaries(summaries: pd.DataFrame, rules: Sequence[GeofenceRule] = DEFAULT_GEOFENCES) -> pd.DataFrame:
    """Add 'takeoff_location' and 'landing_location' columns to flight summaries."""

    classified = summaries.copy()
    for role in ROLES:
        classified[f"{role}_location"] = [
            classify_location(lat, lng, alt, role, rules)
            for lat, lng, alt in zip(
                classified[f"{role}_lat"], classified[f"{role}_lng"], classified[f"{role}_altitude_ft"]
            )
        ]
    return classified


def _as_range(value: Any, key: str, name: str) -> Tuple[float, float] | None:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"Geofence {name!r}: {key} must be a two-element list")
    low, high = (float(v) for v in value)
    return low, high


def _as_roles(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(str(role) for role in value)


def load_geofences(entries: Iterable[Dict[str, Any]]) -> Tuple[GeofenceRule, ...]:
    """
    Build ordered geofence rules from config entries.

    Each entry has a 'name' and any of 'roles', 'center' ([lat, lng]),
    'tolerance_deg', 'lat_range', 'lng_range' and 'min_altitude_ft'.
    """

    rules = []
    for entry in entries:
        if not isinstance(entry, dict) or "name" not in entry:
            raise ValueError(f"Geofence entry needs a 'name': {entry!r}")
        name = str(entry["name"])
        center = _as_range(entry.get("center"), "center", name)
        tolerance = entry.get("tolerance_deg")
        min_altitude = entry.get("min_altitude_ft")
        rules.append(
            GeofenceRule(
                name=name,
                roles=_as_roles(entry.get("roles", ROLES)),
                center_lat=center[0] if center else None,
                center_lng=center[1] if center else None,
                tolerance_deg=float(tolerance) if tolerance is not None else None,
                lat_range=_as_range(entry.get("lat_range"), "lat_range", name),
                lng_range=_as_range(entry.get("lng_range"), "lng_range", name),
                min_altitude_ft=float(min_altitude) if min_altitude is not None else None,
            )
        )
    return tuple(rules)
