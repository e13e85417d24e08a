"""Pure distance and per-mode estimate calculations."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any

from .config import EARTH_RADIUS_M, METERS_PER_STEP
from .modes import MODE_METRICS, normalize_mode

__all__ = ["SegmentMetrics", "distance", "haversine_m", "segment_metrics"]


@dataclass(frozen=True, slots=True)
class SegmentMetrics:
    steps: int
    calories: float


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres between two lat/lng points (degrees)."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2.0) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    )
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def distance(a: Any, b: Any) -> float:
    """Return the haversine distance in metres between two fixes.

    Anything exposing ``lat``/``lng`` attributes works, so saved markers can be
    measured the same way as live fixes.
    """

    return haversine_m(a.lat, a.lng, b.lat, b.lng)


def segment_metrics(distance_m: float, mode: Any) -> SegmentMetrics:
    """Derive steps and calories from a segment's cumulative distance.

    Always pass the running total rather than a delta: steps are floored, so
    summing per-fix estimates would drift below the true count.
    """

    config = MODE_METRICS[normalize_mode(mode)]
    steps = 0
    calories = 0.0
    if config.tracks_steps:
        steps = math.floor(distance_m / METERS_PER_STEP)
    if config.tracks_calories:
        calories = (distance_m / 1000.0) * config.calories_per_km
    return SegmentMetrics(steps=steps, calories=calories)
