"""Multi-segment route ownership and roll-up of finalized segment totals."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Optional

from .models import Route, Segment
from .modes import MovementMode, normalize_mode
from .segment import SegmentAccumulator
from .utils import new_id

__all__ = ["LiveTotals", "RouteAggregator"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LiveTotals:
    distance_m: float
    steps: int
    calories: float


class RouteAggregator:
    """Owns the current route and drives segment rollover.

    Finalized segments are appended exactly once; the active segment's metrics
    only ever appear in ``live_totals`` so nothing is counted twice.
    """

    def __init__(
        self,
        segments: SegmentAccumulator | None = None,
        mode: MovementMode | str = MovementMode.WALKING,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._segments = segments or SegmentAccumulator(id_factory=id_factory)
        self._id_factory = id_factory
        self._mode = normalize_mode(mode)
        self._route: Optional[Route] = None

    @property
    def route(self) -> Optional[Route]:
        return self._route

    @property
    def segments(self) -> SegmentAccumulator:
        return self._segments

    @property
    def mode(self) -> MovementMode:
        return self._mode

    def start(self, now_ms: int) -> Route:
        """Make sure a route and an active segment exist for recording."""

        if self._route is None:
            self._route = Route(id=self._id_factory(), start_time_ms=now_ms)
            LOGGER.info("Started route %s", self._route.id)
        active = self._segments.active
        if active is not None and active.mode is not self._mode:
            # Mode preference changed while paused.
            self._roll_segment(now_ms)
        elif active is None:
            self._segments.open(self._mode, now_ms)
        return self._route

    def on_segment_finalized(self, segment: Segment) -> None:
        route = self._route
        if route is None:
            raise RuntimeError("No current route to append a segment to")
        route.segments.append(segment)
        route.total_distance_m += segment.distance_m
        route.total_steps += segment.steps
        route.total_calories += segment.calories
        LOGGER.debug(
            "Appended %s segment %s distance=%.1fm points=%d",
            segment.mode.value,
            segment.id,
            segment.distance_m,
            len(segment.points),
        )

    def _roll_segment(self, now_ms: int) -> None:
        finalized = self._segments.finalize(now_ms)
        if finalized is not None:
            self.on_segment_finalized(finalized)
        self._segments.open(self._mode, now_ms)

    def on_mode_change(
        self, new_mode: MovementMode | str, now_ms: int, tracking: bool
    ) -> bool:
        """Switch the movement mode, splitting the segment when recording.

        Returns ``False`` when ``new_mode`` is already the current mode.
        """

        mode = normalize_mode(new_mode)
        if mode is self._mode:
            return False
        previous = self._mode
        self._mode = mode
        if tracking and self._route is not None:
            self._roll_segment(now_ms)
            LOGGER.info("Switched mode %s -> %s", previous.value, mode.value)
        else:
            LOGGER.info(
                "Mode preference %s -> %s (not recording)", previous.value, mode.value
            )
        return True

    def live_totals(self) -> LiveTotals:
        distance_m = 0.0
        steps = 0
        calories = 0.0
        if self._route is not None:
            distance_m += self._route.total_distance_m
            steps += self._route.total_steps
            calories += self._route.total_calories
        active = self._segments.active
        if active is not None:
            distance_m += active.distance_m
            steps += active.steps
            calories += active.calories
        return LiveTotals(distance_m=distance_m, steps=steps, calories=calories)

    def stop(self, now_ms: int) -> Optional[Route]:
        """Finish the route and reset.

        Returns the finished route when it carries any distance, otherwise
        ``None`` (the route is discarded).
        """

        route = self._route
        finalized = self._segments.finalize(now_ms)
        if route is None:
            return None
        if finalized is not None:
            self.on_segment_finalized(finalized)
        self._route = None
        route.end_time_ms = now_ms
        if route.start_time_ms <= 0:
            route.start_time_ms = now_ms
        if route.total_distance_m > 0:
            LOGGER.info(
                "Finished route %s segments=%d distance=%.1fm",
                route.id,
                len(route.segments),
                route.total_distance_m,
            )
            return route
        LOGGER.info("Discarding route %s with no recorded distance", route.id)
        return None
