"""Elapsed tracking time that excludes paused intervals.

Elapsed time is always derived from absolute timestamps rather than a tick
counter, so it stays correct when the host suspends or tick callbacks are late.
"""

from __future__ import annotations

from typing import Callable, Optional

from .utils import now_ms as _wall_clock_ms

__all__ = ["SessionClock"]


class SessionClock:
    def __init__(self, now_ms: Callable[[], int] = _wall_clock_ms) -> None:
        self._now_ms = now_ms
        self._accumulated_ms = 0
        self._session_start_ms: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._session_start_ms is not None

    @property
    def accumulated_ms(self) -> int:
        return self._accumulated_ms

    def toggle(self) -> bool:
        """Pause when running, otherwise (re)start. Returns the new running state."""

        now = self._now_ms()
        if self._session_start_ms is not None:
            self._accumulated_ms += max(0, now - self._session_start_ms)
            self._session_start_ms = None
            return False
        self._session_start_ms = now
        return True

    def elapsed(self) -> int:
        if self._session_start_ms is None:
            return self._accumulated_ms
        return self._accumulated_ms + max(0, self._now_ms() - self._session_start_ms)

    def reset(self) -> None:
        self._accumulated_ms = 0
        self._session_start_ms = None
