"""Dataclasses describing fixes, segments, routes and saved markers.

Persisted payloads use the snake_case field names below; ``from_dict`` is
tolerant of missing numeric fields because stored data is sanitized for
coordinates only (see ``sanitizer``).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from .modes import MarkerType, MovementMode, normalize_marker_type, normalize_mode
from .utils import is_finite_number


def _as_float(value: Any, default: float = 0.0) -> float:
    return float(value) if is_finite_number(value) else default


def _as_int(value: Any, default: int = 0) -> int:
    return int(value) if is_finite_number(value) else default


def _as_optional_int(value: Any) -> Optional[int]:
    return int(value) if is_finite_number(value) else None


@dataclass(frozen=True, slots=True)
class Fix:
    """One timestamped position report.

    Attributes:
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.
        timestamp_ms: Unix epoch milliseconds reported by the fix source.
        accuracy_m: Accuracy radius in metres, ``None`` when unknown.
    """

    lat: float
    lng: float
    timestamp_ms: int
    accuracy_m: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "lat": self.lat,
            "lng": self.lng,
            "timestamp_ms": self.timestamp_ms,
        }
        if self.accuracy_m is not None:
            payload["accuracy_m"] = self.accuracy_m
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Fix":
        accuracy = data.get("accuracy_m")
        return cls(
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            timestamp_ms=_as_int(data.get("timestamp_ms")),
            accuracy_m=float(accuracy) if is_finite_number(accuracy) else None,
        )


@dataclass(slots=True)
class Segment:
    """Contiguous sub-track recorded in a single movement mode."""

    id: str
    mode: MovementMode
    start_time_ms: int
    points: List[Fix] = field(default_factory=list)
    end_time_ms: Optional[int] = None
    distance_m: float = 0.0
    steps: int = 0
    calories: float = 0.0

    @property
    def finalized(self) -> bool:
        return self.end_time_ms is not None

    def copy(self) -> "Segment":
        return replace(self, points=list(self.points))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.mode.value,
            "points": [p.to_dict() for p in self.points],
            "start_time_ms": self.start_time_ms,
            "end_time_ms": self.end_time_ms,
            "distance_m": self.distance_m,
            "steps": self.steps,
            "calories": self.calories,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Segment":
        try:
            mode = normalize_mode(data.get("mode"))
        except ValueError:
            mode = MovementMode.WALKING
        return cls(
            id=str(data.get("id", "")),
            mode=mode,
            start_time_ms=_as_int(data.get("start_time_ms")),
            points=[Fix.from_dict(p) for p in data.get("points") or []],
            end_time_ms=_as_optional_int(data.get("end_time_ms")),
            distance_m=_as_float(data.get("distance_m")),
            steps=_as_int(data.get("steps")),
            calories=_as_float(data.get("calories")),
        )


@dataclass(slots=True)
class Route:
    """Full recording for one tracking session."""

    id: str
    start_time_ms: int
    segments: List[Segment] = field(default_factory=list)
    end_time_ms: Optional[int] = None
    total_distance_m: float = 0.0
    total_steps: int = 0
    total_calories: float = 0.0

    @property
    def duration_ms(self) -> int:
        """Wall-clock span of the route, 0 when unfinished or inverted."""

        if self.end_time_ms is None or self.end_time_ms <= self.start_time_ms:
            return 0
        return self.end_time_ms - self.start_time_ms

    def copy(self) -> "Route":
        return replace(self, segments=[s.copy() for s in self.segments])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "segments": [s.to_dict() for s in self.segments],
            "start_time_ms": self.start_time_ms,
            "end_time_ms": self.end_time_ms,
            "total_distance_m": self.total_distance_m,
            "total_steps": self.total_steps,
            "total_calories": self.total_calories,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Route":
        return cls(
            id=str(data.get("id", "")),
            start_time_ms=_as_int(data.get("start_time_ms")),
            segments=[Segment.from_dict(s) for s in data.get("segments") or []],
            end_time_ms=_as_optional_int(data.get("end_time_ms")),
            total_distance_m=_as_float(data.get("total_distance_m")),
            total_steps=_as_int(data.get("total_steps")),
            total_calories=_as_float(data.get("total_calories")),
        )


@dataclass(slots=True)
class Marker:
    """User-saved point of interest."""

    id: str
    lat: float
    lng: float
    label: str
    type: MarkerType
    created_at_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lat": self.lat,
            "lng": self.lng,
            "label": self.label,
            "type": self.type.value,
            "created_at_ms": self.created_at_ms,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Marker":
        return cls(
            id=str(data.get("id", "")),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            label=str(data.get("label") or ""),
            type=normalize_marker_type(data.get("type")),
            created_at_ms=_as_int(data.get("created_at_ms")),
        )


__all__ = ["Fix", "Segment", "Route", "Marker"]
