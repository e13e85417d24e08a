import json
from datetime import datetime
from pathlib import Path

import pandas as pd

from monotrack.excel_writer import build_segment_rows, write_routes_workbook
from monotrack.models import Marker, Route
from monotrack.modes import MarkerType
from monotrack.store import export_json

from conftest import START_MS, make_route_payload


def _routes():
    first = Route.from_dict(make_route_payload("r1", distance=1500.0))
    second = Route.from_dict(make_route_payload("r2", distance=250.0))
    return [first, second]


def test_workbook_contains_all_sheets(tmp_path: Path) -> None:
    path = tmp_path / "export.xlsx"
    marker = Marker(
        id="m1", lat=1.0, lng=2.0, label="Work", type=MarkerType.WORK, created_at_ms=START_MS
    )
    write_routes_workbook(path, _routes(), [marker], now=datetime(2020, 1, 1))

    sheets = pd.read_excel(path, sheet_name=None)
    assert set(sheets) == {"Summary", "Routes", "Segments", "Markers"}
    routes_df = sheets["Routes"]
    assert list(routes_df["Route ID"]) == ["r1", "r2"]
    assert list(routes_df["Distance (km)"]) == [1.5, 0.25]
    assert list(sheets["Segments"]["Mode"]) == ["walking", "walking"]
    assert sheets["Markers"].loc[0, "Label"] == "Work"
    summary = sheets["Summary"].set_index("Period")
    assert summary.loc["All Time", "Routes"] == 2
    assert summary.loc["All Time", "Distance (km)"] == 1.75


def test_workbook_with_no_data_writes_messages(tmp_path: Path) -> None:
    path = tmp_path / "empty.xlsx"
    write_routes_workbook(path, [], [])
    sheets = pd.read_excel(path, sheet_name=None)
    assert list(sheets["Routes"].columns) == ["Message"]
    assert list(sheets["Markers"].columns) == ["Message"]


def test_segment_rows_are_numbered_per_route() -> None:
    rows = build_segment_rows(_routes())
    assert [(r["Route ID"], r["Segment"]) for r in rows] == [("r1", 1), ("r2", 1)]
    assert rows[0]["Points"] == 1


def test_export_json(tmp_path: Path) -> None:
    routes = [r.to_dict() for r in _routes()]
    target = export_json(tmp_path / "out" / "export.json", routes, [])
    payload = json.loads(target.read_text(encoding="utf-8"))
    assert [r["id"] for r in payload["routes"]] == ["r1", "r2"]
    assert payload["markers"] == []
