"""Load-time cleanup of persisted routes and markers.

Works on the raw JSON payloads (lists of dicts) before they are parsed into
models. Only entries with unusable coordinates are removed; every other field
is passed through untouched, which keeps the cleanup idempotent.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from .utils import is_finite_number

__all__ = ["has_valid_coordinates", "sanitize_routes", "sanitize_markers"]

LOGGER = logging.getLogger(__name__)

RawRecord = Dict[str, Any]


def has_valid_coordinates(item: Any) -> bool:
    return (
        isinstance(item, Mapping)
        and is_finite_number(item.get("lat"))
        and is_finite_number(item.get("lng"))
    )


def _sanitize_segment(segment: Mapping[str, Any]) -> RawRecord:
    points = segment.get("points")
    if not isinstance(points, list):
        points = []
    cleaned = dict(segment)
    cleaned["points"] = [dict(p) for p in points if has_valid_coordinates(p)]
    return cleaned


def _sanitize_route(route: Mapping[str, Any]) -> RawRecord:
    segments = route.get("segments")
    if not isinstance(segments, list):
        segments = []
    cleaned_segments = [
        _sanitize_segment(seg) for seg in segments if isinstance(seg, Mapping)
    ]
    cleaned = dict(route)
    cleaned["segments"] = [seg for seg in cleaned_segments if seg["points"]]
    return cleaned


def sanitize_routes(raw: Any) -> List[RawRecord]:
    """Drop invalid points, then empty segments, then empty routes."""

    if not isinstance(raw, list):
        return []
    routes = [_sanitize_route(r) for r in raw if isinstance(r, Mapping)]
    cleaned = [r for r in routes if r["segments"]]
    dropped = len(raw) - len(cleaned)
    if dropped:
        LOGGER.warning("Dropped %s stored routes without usable points", dropped)
    return cleaned


def sanitize_markers(raw: Any) -> List[RawRecord]:
    """Drop markers whose coordinates are missing or non-finite."""

    if not isinstance(raw, list):
        return []
    cleaned = [dict(m) for m in raw if has_valid_coordinates(m)]
    dropped = len(raw) - len(cleaned)
    if dropped:
        LOGGER.warning("Dropped %s stored markers with invalid coordinates", dropped)
    return cleaned
