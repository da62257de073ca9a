import json
from pathlib import Path

import pytest

# 2025-05-02T00:00:00Z
BASE_TIMESTAMP = 1746144000


class TraceBuilder:
    """Build a day's trace payload from ground and flight legs sampled every `step` seconds."""

    def __init__(self, base_timestamp: int = BASE_TIMESTAMP, step: float = 30.0) -> None:
        self.base_timestamp = base_timestamp
        self.step = step
        self.samples: list[list] = []
        self._offset = 0.0

    def ground(self, count, lat, lng):
        for _ in range(count):
            self.samples.append([self._offset, lat, lng, "ground", 0.0, 0.0, 0])
            self._offset += self.step
        return self

    def flight(self, count, start, end, takeoff_ft=2500, cruise_ft=8000, landing_ft=2500):
        for i in range(count):
            frac = i / (count - 1) if count > 1 else 0.0
            lat = start[0] + (end[0] - start[0]) * frac
            lng = start[1] + (end[1] - start[1]) * frac
            if i == 0:
                alt = takeoff_ft
            elif i == count - 1:
                alt = landing_ft
            else:
                alt = cruise_ft
            self.samples.append([self._offset, lat, lng, alt, 150.0, 90.0, 0])
            self._offset += self.step
        return self

    def payload(self) -> dict:
        return {"icao": "20104f", "timestamp": self.base_timestamp, "trace": self.samples}

    def write(self, directory: Path, day: str) -> Path:
        path = Path(directory) / f"flight-track-{day}.json"
        path.write_text(json.dumps(self.payload()), encoding="utf-8")
        return path


PEMBA = (-12.99, 40.52)
AFUNGI = (-10.82, 40.53)


def two_flight_day() -> TraceBuilder:
    """Pemba -> Afungi (signal lost at altitude) and Afungi -> Pemba, 60 airborne samples each."""

    return (
        TraceBuilder()
        .ground(5, *PEMBA)
        .flight(60, PEMBA, (-10.9, 40.4), landing_ft=6000)
        .ground(5, *AFUNGI)
        .flight(60, AFUNGI, (-12.95, 40.5))
        .ground(3, -12.95, 40.5)
    )


@pytest.fixture
def trace_builder():
    return TraceBuilder


@pytest.fixture
def scenario_day():
    return two_flight_day()
