"""Command line access to the saved route history.

Every command loads through ``HistoryService`` so stored data is sanitized
(and cleaned files written back) on each run.
"""

from __future__ import annotations

import argparse
from datetime import datetime
import logging
from pathlib import Path
from typing import List, Sequence

from .analytics import AggregatedStats, calculate_analytics, top_routes
from .config import EXPORT_FILE, EXPORT_FILE_TIMESTAMP_ENABLED, TOP_ROUTES_LIMIT
from .errors import ExportError
from .excel_writer import write_routes_workbook
from .models import Route
from .modes import MarkerType
from .services import HistoryService
from .store import JsonFileStore, export_json
from .utils import format_distance, format_duration

LOGGER = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _resolve_export_path(fmt: str, output: str | None) -> Path:
    if output:
        return Path(output)
    suffix = "xlsx" if fmt == "xlsx" else "json"
    if EXPORT_FILE_TIMESTAMP_ENABLED:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return Path(f"{EXPORT_FILE}_{timestamp}.{suffix}")
    return Path(f"{EXPORT_FILE}.{suffix}")


def _stats_line(label: str, stats: AggregatedStats) -> str:
    return (
        f"{label:<11} routes={stats.count:<3} distance={format_distance(stats.distance_m):<10} "
        f"calories={stats.calories:.0f} kcal  duration={format_duration(stats.duration_ms)}"
    )


def _route_line(route: Route) -> str:
    started = datetime.fromtimestamp(route.start_time_ms / 1000.0)
    modes = ",".join(dict.fromkeys(s.mode.value for s in route.segments))
    return (
        f"{route.id}  {started:%Y-%m-%d %H:%M}  {format_distance(route.total_distance_m):>10}  "
        f"{format_duration(route.duration_ms):>8}  steps={route.total_steps}  modes={modes}"
    )


def _cmd_stats(history: HistoryService, args: argparse.Namespace) -> int:
    stats = calculate_analytics(history.routes)
    print(_stats_line("Today", stats.daily))
    print(_stats_line("This Week", stats.weekly))
    print(_stats_line("This Month", stats.monthly))
    print(f"Total routes: {len(history.routes)}")
    return 0


def _cmd_top(history: HistoryService, args: argparse.Namespace) -> int:
    routes = top_routes(history.routes, limit=args.limit)
    if not routes:
        print("No activity recorded yet")
        return 0
    for route in routes:
        print(_route_line(route))
    return 0


def _cmd_export(history: HistoryService, args: argparse.Namespace) -> int:
    path = _resolve_export_path(args.format, args.output)
    try:
        if args.format == "xlsx":
            write_routes_workbook(path, history.routes, history.markers)
        else:
            export_json(
                path,
                [r.to_dict() for r in history.routes],
                [m.to_dict() for m in history.markers],
            )
    except ExportError as exc:
        LOGGER.error("%s", exc)
        return 1
    LOGGER.info(
        "Exported %d routes and %d markers to %s",
        len(history.routes),
        len(history.markers),
        path,
    )
    return 0


def _cmd_sanitize(history: HistoryService, args: argparse.Namespace) -> int:
    # Loading already sanitized and wrote back; just report what is left.
    print(f"{len(history.routes)} routes, {len(history.markers)} markers")
    return 0


def _cmd_clear(history: HistoryService, args: argparse.Namespace) -> int:
    if not args.yes:
        LOGGER.error("Refusing to delete recorded history without --yes")
        return 2
    count = len(history.routes)
    history.clear_routes()
    LOGGER.info("Deleted %d recorded routes", count)
    return 0


def _cmd_markers(history: HistoryService, args: argparse.Namespace) -> int:
    if args.marker_command == "add":
        try:
            marker = history.add_marker(args.lat, args.lng, args.label, args.type)
        except ValueError as exc:
            LOGGER.error("%s", exc)
            return 2
        print(marker.id)
        return 0
    if args.marker_command == "delete":
        marker = history.find_marker(args.id)
        if marker is None or not history.delete_marker(args.id):
            LOGGER.error("No marker with id %s", args.id)
            return 1
        LOGGER.info("Deleted marker %s (%s)", marker.id, marker.label)
        return 0
    for marker in history.markers:
        print(
            f"{marker.id}  {marker.type.value:<8} {marker.lat:.6f},{marker.lng:.6f}  {marker.label}"
        )
    return 0


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="monotrack", description="Inspect and export recorded routes"
    )
    parser.add_argument("--store", help="Store directory (defaults to MONOTRACK_STORE_DIR)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("stats", help="Daily, weekly and monthly totals").set_defaults(
        handler=_cmd_stats
    )

    top = sub.add_parser("top", help="Longest recorded routes")
    top.add_argument("--limit", type=int, default=TOP_ROUTES_LIMIT)
    top.set_defaults(handler=_cmd_top)

    export = sub.add_parser("export", help="Export routes and markers")
    export.add_argument("--format", choices=("xlsx", "json"), default="xlsx")
    export.add_argument("--output", help="Output path (defaults to EXPORT_FILE)")
    export.set_defaults(handler=_cmd_export)

    sub.add_parser("sanitize", help="Drop corrupted entries from the store").set_defaults(
        handler=_cmd_sanitize
    )

    clear = sub.add_parser("clear", help="Delete all recorded routes")
    clear.add_argument("--yes", action="store_true", help="Confirm deletion")
    clear.set_defaults(handler=_cmd_clear)

    markers = sub.add_parser("markers", help="List, add or delete saved places")
    marker_sub = markers.add_subparsers(dest="marker_command")
    marker_sub.add_parser("list")
    add = marker_sub.add_parser("add")
    add.add_argument("lat", type=float)
    add.add_argument("lng", type=float)
    add.add_argument("label")
    add.add_argument(
        "--type", choices=[t.value for t in MarkerType], default=MarkerType.GENERAL.value
    )
    delete = marker_sub.add_parser("delete")
    delete.add_argument("id")
    markers.set_defaults(handler=_cmd_markers)

    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    _setup_logging(args.verbose)
    history = HistoryService(JsonFileStore(args.store))
    history.load()
    return args.handler(history, args)
