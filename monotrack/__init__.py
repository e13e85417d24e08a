"""Continuous GPS tracking engine producing segmented, multi-mode routes."""

from .engine import EngineConfig, TrackingEngine, TrackingSnapshot
from .errors import FixSourceError, MonotrackError, StoreError
from .models import Fix, Marker, Route, Segment
from .modes import MarkerType, MovementMode

__all__ = [
    "EngineConfig",
    "TrackingEngine",
    "TrackingSnapshot",
    "Fix",
    "Marker",
    "Route",
    "Segment",
    "MarkerType",
    "MovementMode",
    "MonotrackError",
    "FixSourceError",
    "StoreError",
]
