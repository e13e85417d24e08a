"""Lifecycle of the single in-progress segment (NONE -> ACTIVE -> FINALIZED)."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .metrics import segment_metrics
from .models import Fix, Segment
from .modes import MovementMode, normalize_mode
from .utils import new_id

__all__ = ["SegmentAccumulator"]

LOGGER = logging.getLogger(__name__)


class SegmentAccumulator:
    """Owns the active segment and folds accepted fixes into it."""

    def __init__(self, id_factory: Callable[[], str] = new_id) -> None:
        self._id_factory = id_factory
        self._active: Optional[Segment] = None

    @property
    def active(self) -> Optional[Segment]:
        return self._active

    @property
    def last_point(self) -> Optional[Fix]:
        if self._active is None or not self._active.points:
            return None
        return self._active.points[-1]

    def open(self, mode: MovementMode | str, now_ms: int) -> Segment:
        """Start a new empty segment. Any segment still open must be finalized first."""

        if self._active is not None:
            raise RuntimeError("A segment is already active; finalize it first")
        self._active = Segment(
            id=self._id_factory(),
            mode=normalize_mode(mode),
            start_time_ms=now_ms,
        )
        LOGGER.debug("Opened %s segment %s", self._active.mode.value, self._active.id)
        return self._active

    def add(self, fix: Fix, distance_m: float) -> Segment:
        """Append an accepted fix and recompute metrics from the new total."""

        segment = self._active
        if segment is None:
            raise RuntimeError("No active segment to add a fix to")
        segment.points.append(fix)
        segment.distance_m += max(0.0, distance_m)
        metrics = segment_metrics(segment.distance_m, segment.mode)
        segment.steps = metrics.steps
        segment.calories = metrics.calories
        return segment

    def finalize(self, now_ms: int) -> Optional[Segment]:
        """Close the active segment.

        Returns the finalized segment, or ``None`` when there was no segment or
        it never received a point (empty segments are dropped).
        """

        segment = self._active
        self._active = None
        if segment is None:
            return None
        segment.end_time_ms = now_ms
        if not segment.points:
            LOGGER.debug("Discarding empty %s segment %s", segment.mode.value, segment.id)
            return None
        return segment
