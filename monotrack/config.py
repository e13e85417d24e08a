"""Central configuration for the monotrack tracking engine.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Values can be overridden through environment variables
(optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Geometry and metric estimates
# ---------------------------------------------------------------------------
# Spherical-Earth radius used by the haversine distance.
EARTH_RADIUS_M = 6_371_000.0

# Average stride length used to turn walked metres into steps.
METERS_PER_STEP = 0.762


# ---------------------------------------------------------------------------
# Fix filtering
# ---------------------------------------------------------------------------
# Fixes less precise than this still move the live position but never enter
# segment geometry.
MAX_TRACK_ACCURACY_M = _env_float("MONOTRACK_MAX_TRACK_ACCURACY_M", 30.0)

# A fix whose accuracy jumps above ACCURACY_COLLAPSE_NEW_M right after one
# better than ACCURACY_COLLAPSE_PREVIOUS_M is dropped entirely.
ACCURACY_COLLAPSE_PREVIOUS_M = _env_float("MONOTRACK_ACCURACY_COLLAPSE_PREVIOUS_M", 50.0)
ACCURACY_COLLAPSE_NEW_M = _env_float("MONOTRACK_ACCURACY_COLLAPSE_NEW_M", 500.0)

# Moves shorter than this (metres) from the last segment point are jitter.
MIN_MOVEMENT_M = _env_float("MONOTRACK_MIN_MOVEMENT_M", 1.0)


# ---------------------------------------------------------------------------
# Session clock
# ---------------------------------------------------------------------------
# Cadence (seconds) of the elapsed-time tick pushed to listeners.
CLOCK_TICK_SECONDS = _env_float("MONOTRACK_CLOCK_TICK_SECONDS", 1.0)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
# Directory (absolute or relative) holding the route and marker files.
MONOTRACK_STORE_DIR = os.getenv("MONOTRACK_STORE_DIR", "monotrack_data")
ROUTES_FILE = "monotrack_routes_v2.json"
MARKERS_FILE = "monotrack_markers.json"


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
# Number of routes listed by the "top routes" view.
TOP_ROUTES_LIMIT = _env_int("MONOTRACK_TOP_ROUTES_LIMIT", 5)


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
# Base name for exported files; the extension depends on the format.
EXPORT_FILE = os.getenv("MONOTRACK_EXPORT_FILE", "monotrack_export")

# Append _YYYYMMDD_HHMMSS to the export name when True.
EXPORT_FILE_TIMESTAMP_ENABLED = _env_bool("MONOTRACK_EXPORT_FILE_TIMESTAMP_ENABLED", True)

# Automatically size columns after writing each sheet (openpyxl only).
EXCEL_AUTOSIZE_COLUMNS = True
EXCEL_AUTOSIZE_MAX_WIDTH = 50  # characters
EXCEL_AUTOSIZE_MIN_WIDTH = 6  # characters
EXCEL_AUTOSIZE_PADDING = 2  # extra characters added to the detected max
EXCEL_AUTOSIZE_MAX_ROWS = 5000  # skip autosize for very large sheets
