"""Continuous-tracking engine.

Wires the fix filter, segment accumulator, route aggregator and session clock
together. Two event inputs drive it (fix arrival and the periodic clock tick)
plus the explicit operations ``start``/``pause``/``toggle``/``on_mode_change``/
``stop``. After every transition listeners receive an immutable
``TrackingSnapshot``; they never get a reference to live state.

All public methods run under one re-entrant lock, so a fix source or ticker
calling in from another thread is serialized with the control operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import threading
from typing import Any, Callable, List, Optional

from .clock import SessionClock
from .errors import MonotrackError
from .fix_filter import FixFilter
from .models import Fix, Route, Segment
from .modes import MovementMode
from .route import RouteAggregator
from .segment import SegmentAccumulator
from .sources import (
    FixSource,
    KeepAwake,
    NullKeepAwake,
    PeriodicTicker,
    Subscription,
    Ticker,
)
from .utils import new_id, now_ms as _wall_clock_ms

__all__ = ["EngineConfig", "TrackingEngine", "TrackingSnapshot", "SnapshotListener"]


@dataclass(frozen=True, slots=True)
class TrackingSnapshot:
    """Read-only view of the engine state for rendering."""

    user_location: Optional[Fix]
    current_route: Optional[Route]
    active_segment: Optional[Segment]
    live_distance_m: float
    live_steps: int
    live_calories: float
    elapsed_ms: int
    is_tracking: bool
    is_paused: bool
    mode: MovementMode


SnapshotListener = Callable[[TrackingSnapshot], None]
RoutePersister = Callable[[Route], Any]


@dataclass(slots=True)
class EngineConfig:
    now_ms: Callable[[], int] = _wall_clock_ms
    id_factory: Callable[[], str] = new_id
    mode: MovementMode | str = MovementMode.WALKING
    fix_filter: FixFilter | None = None
    ticker: Ticker | None = None
    keep_awake: KeepAwake = field(default_factory=NullKeepAwake)
    logger: logging.Logger | None = None


class TrackingEngine:
    def __init__(
        self,
        fix_source: FixSource,
        persist: RoutePersister | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._now_ms = self.config.now_ms
        self._fix_source = fix_source
        self._persist = persist
        self._filter = self.config.fix_filter or FixFilter()
        self._ticker: Ticker = self.config.ticker or PeriodicTicker()
        self._keep_awake = self.config.keep_awake
        self._segments = SegmentAccumulator(id_factory=self.config.id_factory)
        self._routes = RouteAggregator(
            self._segments, mode=self.config.mode, id_factory=self.config.id_factory
        )
        self._clock = SessionClock(now_ms=self._now_ms)
        self._lock = threading.RLock()
        self._listeners: List[SnapshotListener] = []
        self._subscription: Optional[Subscription] = None
        self._user_location: Optional[Fix] = None
        self._tracking = False
        self.fix_errors = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    @property
    def is_tracking(self) -> bool:
        return self._tracking

    @property
    def is_paused(self) -> bool:
        return not self._tracking and self._routes.route is not None

    @property
    def mode(self) -> MovementMode:
        return self._routes.mode

    def elapsed(self) -> int:
        return self._clock.elapsed()

    def snapshot(self) -> TrackingSnapshot:
        with self._lock:
            route = self._routes.route
            active = self._segments.active
            totals = self._routes.live_totals()
            return TrackingSnapshot(
                user_location=self._user_location,
                current_route=route.copy() if route is not None else None,
                active_segment=active.copy() if active is not None else None,
                live_distance_m=totals.distance_m,
                live_steps=totals.steps,
                live_calories=totals.calories,
                elapsed_ms=self._clock.elapsed(),
                is_tracking=self._tracking,
                is_paused=self.is_paused,
                mode=self._routes.mode,
            )

    def add_listener(self, listener: SnapshotListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self) -> TrackingSnapshot:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                self._log.exception("Snapshot listener %r failed", listener)
        return snap

    # ------------------------------------------------------------------
    # Control operations
    # ------------------------------------------------------------------
    def start(self) -> TrackingSnapshot:
        """Start recording, or resume a paused route."""

        with self._lock:
            if self._tracking:
                return self.snapshot()
            resuming = self._routes.route is not None
            self._routes.start(self._now_ms())
            if not self._clock.running:
                self._clock.toggle()
            self._tracking = True
            self._subscription = self._fix_source.subscribe(
                self.on_fix, self.on_fix_error
            )
            self._ticker.start(self.on_tick)
            self._keep_awake.acquire()
            self._log.info(
                "%s tracking in %s mode",
                "Resumed" if resuming else "Started",
                self._routes.mode.value,
            )
            return self._notify()

    def _release_sources(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self._ticker.cancel()
        self._keep_awake.release()

    def pause(self) -> TrackingSnapshot:
        """Stop listening for fixes and freeze the clock; the segment stays open."""

        with self._lock:
            if not self._tracking:
                return self.snapshot()
            self._release_sources()
            if self._clock.running:
                self._clock.toggle()
            self._tracking = False
            self._log.info("Paused tracking after %d ms", self._clock.elapsed())
            return self._notify()

    def toggle(self) -> TrackingSnapshot:
        with self._lock:
            if self._tracking:
                return self.pause()
            return self.start()

    def on_mode_change(self, mode: MovementMode | str) -> TrackingSnapshot:
        with self._lock:
            changed = self._routes.on_mode_change(
                mode, self._now_ms(), tracking=self._tracking
            )
            if not changed:
                return self.snapshot()
            return self._notify()

    def stop(self) -> Optional[Route]:
        """Finish the session.

        Returns the finished route when it was handed to the persistence
        collaborator, ``None`` when it was discarded for lack of distance.
        """

        with self._lock:
            if self._tracking:
                self._release_sources()
            self._tracking = False
            finished = self._routes.stop(self._now_ms())
            self._clock.reset()
            self._filter.reset()
            if finished is not None and self._persist is not None:
                try:
                    self._persist(finished.copy())
                except MonotrackError as exc:
                    self._log.warning("Failed to persist route %s: %s", finished.id, exc)
            self._notify()
            return finished

    # ------------------------------------------------------------------
    # Event inputs
    # ------------------------------------------------------------------
    def on_fix(self, fix: Fix) -> None:
        with self._lock:
            if not self._tracking or self._segments.active is None:
                verdict = self._filter.check_location(fix)
            else:
                verdict = self._filter.evaluate(fix, self._segments.last_point)
            if not verdict.updates_location:
                return
            self._user_location = fix
            if verdict.accepted:
                self._segments.add(fix, verdict.distance_m)
            elif verdict.reason:
                self._log.debug("Fix kept out of track: %s", verdict.reason)
            self._notify()

    def on_fix_error(self, exc: Exception) -> None:
        with self._lock:
            self.fix_errors += 1
            self._log.warning("Fix source error (tracking=%s): %s", self._tracking, exc)

    def on_tick(self) -> None:
        with self._lock:
            # A tick queued on the lock before pause/stop arrives here late.
            if not self._tracking:
                return
            self._notify()

    def locate(self) -> None:
        """Ask the fix source for a one-shot position to seed the live location."""

        self._fix_source.current_fix(self.on_fix, self.on_fix_error)
