"""Movement modes and the per-mode metric table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

__all__ = [
    "MovementMode",
    "ModeMetrics",
    "MODE_METRICS",
    "MarkerType",
    "normalize_mode",
    "normalize_marker_type",
]


class MovementMode(str, Enum):
    WALKING = "walking"
    BIKE = "bike"
    BUS = "bus"
    VEHICLE = "vehicle"


@dataclass(frozen=True, slots=True)
class ModeMetrics:
    """Static estimate parameters for one movement mode."""

    tracks_steps: bool
    tracks_calories: bool
    calories_per_km: float


MODE_METRICS: Mapping[MovementMode, ModeMetrics] = {
    MovementMode.WALKING: ModeMetrics(
        tracks_steps=True, tracks_calories=True, calories_per_km=50.0
    ),
    MovementMode.BIKE: ModeMetrics(
        tracks_steps=False, tracks_calories=True, calories_per_km=25.0
    ),
    MovementMode.BUS: ModeMetrics(
        tracks_steps=False, tracks_calories=False, calories_per_km=0.0
    ),
    MovementMode.VEHICLE: ModeMetrics(
        tracks_steps=False, tracks_calories=False, calories_per_km=0.0
    ),
}


class MarkerType(str, Enum):
    GENERAL = "general"
    SHOP = "shop"
    PARK = "park"
    HOME = "home"
    WORK = "work"


def normalize_mode(value: Any) -> MovementMode:
    """Return the ``MovementMode`` named by ``value``.

    Accepts enum members or case-insensitive strings. Raises ``ValueError``
    for anything else so callers cannot silently record an unknown mode.
    """

    if isinstance(value, MovementMode):
        return value
    if value is None:
        raise ValueError("Movement mode is required")
    try:
        return MovementMode(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown movement mode: {value!r}") from exc


def normalize_marker_type(value: Any) -> MarkerType:
    """Return a ``MarkerType``; unknown or missing values map to ``general``."""

    if isinstance(value, MarkerType):
        return value
    if value is None:
        return MarkerType.GENERAL
    try:
        return MarkerType(str(value).strip().lower())
    except ValueError:
        return MarkerType.GENERAL
