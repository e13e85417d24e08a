"""Excel export of saved routes, segments and markers."""

from __future__ import annotations

from datetime import datetime
import logging
from os import PathLike
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .analytics import calculate_analytics
from .errors import ExportError
from .models import Marker, Route
from .utils import format_duration

__all__ = ["write_routes_workbook", "build_route_rows", "build_segment_rows"]

ROUTES_SHEET = "Routes"
SEGMENTS_SHEET = "Segments"
MARKERS_SHEET = "Markers"
SUMMARY_SHEET = "Summary"
EXCEL_DATETIME_FORMAT = "yyyy-mm-dd hh:mm:ss"

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(patternType="solid", fgColor="FFDDEBF7")
HEADER_BORDER = Border(
    left=Side(style="thin", color="000000"),
    right=Side(style="thin", color="000000"),
    top=Side(style="thin", color="000000"),
    bottom=Side(style="thin", color="000000"),
)

LOGGER = logging.getLogger(__name__)

PathInput = str | Path | PathLike[str]


def _as_datetime(epoch_ms: Optional[int]) -> Optional[datetime]:
    if epoch_ms is None:
        return None
    return datetime.fromtimestamp(epoch_ms / 1000.0)


def build_route_rows(routes: Sequence[Route]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for route in routes:
        rows.append(
            {
                "Route ID": route.id,
                "Start": _as_datetime(route.start_time_ms),
                "End": _as_datetime(route.end_time_ms),
                "Duration": format_duration(route.duration_ms),
                "Segments": len(route.segments),
                "Distance (km)": round(route.total_distance_m / 1000.0, 3),
                "Steps": route.total_steps,
                "Calories (kcal)": round(route.total_calories, 1),
            }
        )
    return rows


def build_segment_rows(routes: Sequence[Route]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for route in routes:
        for index, segment in enumerate(route.segments, start=1):
            rows.append(
                {
                    "Route ID": route.id,
                    "Segment": index,
                    "Mode": segment.mode.value,
                    "Start": _as_datetime(segment.start_time_ms),
                    "End": _as_datetime(segment.end_time_ms),
                    "Points": len(segment.points),
                    "Distance (m)": round(segment.distance_m, 1),
                    "Steps": segment.steps,
                    "Calories (kcal)": round(segment.calories, 1),
                }
            )
    return rows


def _marker_rows(markers: Sequence[Marker]) -> List[Dict[str, Any]]:
    return [
        {
            "Marker ID": m.id,
            "Label": m.label,
            "Type": m.type.value,
            "Latitude": m.lat,
            "Longitude": m.lng,
            "Created": _as_datetime(m.created_at_ms),
        }
        for m in markers
    ]


def _summary_rows(routes: Sequence[Route], now: datetime | None) -> List[Dict[str, Any]]:
    stats = calculate_analytics(routes, now=now)
    rows = []
    for period, agg in (
        ("Today", stats.daily),
        ("This Week", stats.weekly),
        ("This Month", stats.monthly),
    ):
        rows.append(
            {
                "Period": period,
                "Routes": agg.count,
                "Distance (km)": round(agg.distance_m / 1000.0, 2),
                "Calories (kcal)": round(agg.calories, 1),
                "Duration": format_duration(agg.duration_ms),
            }
        )
    rows.append(
        {
            "Period": "All Time",
            "Routes": len(routes),
            "Distance (km)": round(sum(r.total_distance_m for r in routes) / 1000.0, 2),
            "Calories (kcal)": round(sum(r.total_calories for r in routes), 1),
            "Duration": format_duration(sum(r.duration_ms for r in routes)),
        }
    )
    return rows


def _autosize(ws: Worksheet) -> None:
    from .config import (
        EXCEL_AUTOSIZE_COLUMNS,
        EXCEL_AUTOSIZE_MAX_ROWS,
        EXCEL_AUTOSIZE_MAX_WIDTH,
        EXCEL_AUTOSIZE_MIN_WIDTH,
        EXCEL_AUTOSIZE_PADDING,
    )

    if not EXCEL_AUTOSIZE_COLUMNS or ws.max_row > EXCEL_AUTOSIZE_MAX_ROWS:
        return
    for col_cells in ws.columns:
        max_len = 0
        col_letter = getattr(col_cells[0], "column_letter", None)
        for cell in col_cells:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        width = min(
            EXCEL_AUTOSIZE_MAX_WIDTH,
            max(EXCEL_AUTOSIZE_MIN_WIDTH, max_len + EXCEL_AUTOSIZE_PADDING),
        )
        if col_letter:
            ws.column_dimensions[col_letter].width = width


def _style_header_row(ws: Worksheet, max_col: int) -> None:
    for col_idx in range(1, max_col + 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER


def _write_sheet(
    writer: pd.ExcelWriter, sheet_name: str, rows: List[Dict[str, Any]], empty_message: str
) -> None:
    df = pd.DataFrame(rows) if rows else pd.DataFrame({"Message": [empty_message]})
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    ws = writer.sheets[sheet_name]
    _style_header_row(ws, len(df.columns))
    _autosize(ws)
    LOGGER.info("Wrote sheet %s rows=%s", sheet_name, len(rows))


def write_routes_workbook(
    filepath: PathInput,
    routes: Sequence[Route],
    markers: Sequence[Marker] = (),
    now: datetime | None = None,
) -> Path:
    """Write routes, segments, markers and a summary sheet to ``filepath``."""

    path = Path(filepath)
    try:
        with pd.ExcelWriter(
            path, engine="openpyxl", datetime_format=EXCEL_DATETIME_FORMAT
        ) as writer:
            _write_sheet(writer, SUMMARY_SHEET, _summary_rows(routes, now), "No routes recorded.")
            _write_sheet(writer, ROUTES_SHEET, build_route_rows(routes), "No routes recorded.")
            _write_sheet(
                writer, SEGMENTS_SHEET, build_segment_rows(routes), "No segments recorded."
            )
            _write_sheet(writer, MARKERS_SHEET, _marker_rows(markers), "No markers saved.")
    except OSError as exc:
        raise ExportError(f"Failed writing workbook {path}: {exc}") from exc
    return path
