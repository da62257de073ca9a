import json
from datetime import date

import pytest

from flight_segments.io import (
    TRACK_COLUMNS,
    MalformedTraceError,
    discover_trace_files,
    flight_date_from_path,
    load_day_trace,
    parse_trace,
)


def test_parse_trace_keeps_raw_positions_as_idx():
    raw = json.dumps(
        {
            "timestamp": 1746144000,
            "trace": [
                [0, -12.9, 40.5, 0],
                [10, None, 40.5, 3000],
                [20, -12.9, 40.5, "ground"],
                [30, -12.8, 40.6, None, 120.0, 45.0, 0],
                [40, -12.9],
                [50, -12.7, 40.7],
            ],
        }
    )
    df = parse_trace(raw, flight_date=date(2025, 5, 2))

    assert list(df.columns) == TRACK_COLUMNS
    assert df["idx"].tolist() == [1, 3, 4, 6]
    assert df["altitude_ft"].tolist() == [0, 0, 0, 0]
    assert df["timestamp"].tolist() == [1746144000.0, 1746144020.0, 1746144030.0, 1746144050.0]
    assert set(df["flight_date"]) == {date(2025, 5, 2)}


def test_parse_trace_rounds_altitude_and_ignores_extra_fields():
    raw = json.dumps({"timestamp": 100, "trace": [[5.5, -10.0, 40.0, 2500.6, 1, 2, 3, {"x": 1}]]})
    df = parse_trace(raw, flight_date=date(2025, 5, 2))
    assert df.loc[0, "altitude_ft"] == 2501
    assert df.loc[0, "time_offset"] == 5.5


def test_parse_trace_defaults_date_to_utc_day_of_base_timestamp():
    raw = json.dumps({"timestamp": 1746144000 + 3600, "trace": [[0, -10.0, 40.0, 0]]})
    df = parse_trace(raw)
    assert df.loc[0, "flight_date"] == date(2025, 5, 2)


@pytest.mark.parametrize(
    "raw",
    [
        "<html><head><title>404 Not Found</title></head></html>",
        "[1, 2, 3]",
        json.dumps({"trace": [[0, -10.0, 40.0, 0]]}),
        json.dumps({"timestamp": 1746144000, "trace": "nope"}),
        json.dumps({"timestamp": "soon", "trace": []}),
        json.dumps({"timestamp": 1e20, "trace": [[0, -10.0, 40.0, 0]]}),
        json.dumps({"timestamp": -1e12, "trace": []}),
    ],
)
def test_parse_trace_rejects_malformed_payloads(raw):
    with pytest.raises(MalformedTraceError):
        parse_trace(raw)


def test_load_day_trace_returns_empty_frame_for_html_page(tmp_path):
    path = tmp_path / "flight-track-2025-05-03.json"
    path.write_text("<!DOCTYPE html><html><body>404</body></html>", encoding="utf-8")

    df = load_day_trace(path)

    assert df.empty
    assert list(df.columns) == TRACK_COLUMNS


def test_load_day_trace_uses_date_from_file_name(tmp_path, trace_builder):
    path = trace_builder().ground(3, -12.99, 40.52).write(tmp_path, "2025-06-15")
    df = load_day_trace(path)
    assert len(df) == 3
    assert set(df["flight_date"]) == {date(2025, 6, 15)}


def test_flight_date_from_path():
    assert flight_date_from_path("data/flight-track-2025-08-29.json") == date(2025, 8, 29)
    assert flight_date_from_path("data/trace_full_20104f.json") is None
    assert flight_date_from_path("flight-track-2025-02-30.json") is None


def test_discover_trace_files_sorted(tmp_path):
    for day in ("2025-05-03", "2025-05-01", "2025-05-02"):
        (tmp_path / f"flight-track-{day}.json").write_text("{}", encoding="utf-8")
    paths = discover_trace_files(str(tmp_path / "flight-track-*.json"))
    assert [p.name for p in paths] == [
        "flight-track-2025-05-01.json",
        "flight-track-2025-05-02.json",
        "flight-track-2025-05-03.json",
    ]


def test_discover_trace_files_raises_when_nothing_matches(tmp_path):
    with pytest.raises(FileNotFoundError):
        discover_trace_files(str(tmp_path / "flight-track-*.json"))


def test_parse_trace_contains_out_of_range_values():
    raw = json.dumps(
        {
            "timestamp": 1746144000,
            "trace": [
                [0, -10.0, 40.0, 1e20],
                [1e20, -10.0, 40.0, 3000],
                [2, -10.0, 40.0, 2500.5],
                [3, -10.0, 40.0, -0.5],
                [4, -10.0, 40.0, -1e300],
            ],
        }
    )
    df = parse_trace(raw, flight_date=date(2025, 5, 2))

    assert df["idx"].tolist() == [1, 3, 4, 5]
    assert df["altitude_ft"].tolist() == [0, 2501, -1, 0]


def test_load_day_trace_out_of_range_timestamp_without_date_in_name(tmp_path):
    path = tmp_path / "trace_full_20104f.json"
    path.write_text(json.dumps({"timestamp": 1e20, "trace": [[0, -10.0, 40.0, 0]]}), encoding="utf-8")
    assert load_day_trace(path).empty
