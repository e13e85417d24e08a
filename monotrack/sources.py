"""Interfaces to the engine's external collaborators.

The engine never polls: fixes are pushed by a ``FixSource`` and elapsed-time
refreshes by a ``Ticker``. ``KeepAwake`` is a hint to the host device to stay
awake while recording.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Protocol

from .config import CLOCK_TICK_SECONDS
from .models import Fix

__all__ = [
    "FixCallback",
    "ErrorCallback",
    "Subscription",
    "FixSource",
    "ManualFixSource",
    "Ticker",
    "PeriodicTicker",
    "KeepAwake",
    "NullKeepAwake",
]

LOGGER = logging.getLogger(__name__)

FixCallback = Callable[[Fix], None]
ErrorCallback = Callable[[Exception], None]


class Subscription(Protocol):
    def cancel(self) -> None: ...


class FixSource(Protocol):
    def subscribe(
        self, on_fix: FixCallback, on_error: ErrorCallback
    ) -> Subscription: ...

    def current_fix(self, on_fix: FixCallback, on_error: ErrorCallback) -> None: ...


class Ticker(Protocol):
    def start(self, callback: Callable[[], None]) -> None: ...

    def cancel(self) -> None: ...


class KeepAwake(Protocol):
    def acquire(self) -> None: ...

    def release(self) -> None: ...


class NullKeepAwake:
    """Keep-awake hint for hosts without one."""

    def acquire(self) -> None:
        return None

    def release(self) -> None:
        return None


class _ManualSubscription:
    def __init__(
        self, source: "ManualFixSource", on_fix: FixCallback, on_error: ErrorCallback
    ) -> None:
        self._source = source
        self.on_fix = on_fix
        self.on_error = on_error

    def cancel(self) -> None:
        self._source._remove(self)


class ManualFixSource:
    """Fix source driven by host code calling ``push`` / ``fail``.

    ``current_fix`` answers with the most recently pushed fix and stays silent
    until one has been pushed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: List[_ManualSubscription] = []
        self._latest: Optional[Fix] = None

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, on_fix: FixCallback, on_error: ErrorCallback) -> Subscription:
        subscription = _ManualSubscription(self, on_fix, on_error)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: _ManualSubscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def current_fix(self, on_fix: FixCallback, on_error: ErrorCallback) -> None:
        with self._lock:
            latest = self._latest
        if latest is not None:
            on_fix(latest)

    def push(self, fix: Fix) -> None:
        with self._lock:
            self._latest = fix
            targets = list(self._subscriptions)
        for subscription in targets:
            subscription.on_fix(fix)

    def fail(self, exc: Exception) -> None:
        with self._lock:
            targets = list(self._subscriptions)
        for subscription in targets:
            subscription.on_error(exc)


class PeriodicTicker:
    """Calls ``callback`` every ``interval_s`` seconds on a daemon thread."""

    def __init__(self, interval_s: float = CLOCK_TICK_SECONDS) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be greater than zero")
        self._interval_s = interval_s
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, callback: Callable[[], None]) -> None:
        if self.running:
            return
        self._stop = threading.Event()
        stop = self._stop

        def _run() -> None:
            while not stop.wait(self._interval_s):
                try:
                    callback()
                except Exception:  # pragma: no cover - keep ticking
                    LOGGER.exception("Clock tick callback failed")

        self._thread = threading.Thread(target=_run, name="monotrack-tick", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        # No join: the caller may hold a lock that a pending tick is waiting on.
        self._stop.set()
        self._thread = None
