"""Gatekeeping for raw position fixes.

Each incoming fix gets one of three verdicts:

* ``REJECT``: malformed or spurious; the fix is ignored entirely.
* ``LOCATION_ONLY``: trustworthy enough to move the live position marker but
  too imprecise, or too close to the last recorded point, to enter the track.
* ``ACCEPT``: folded into the active segment with ``distance_m`` added.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Optional

from .config import (
    ACCURACY_COLLAPSE_NEW_M,
    ACCURACY_COLLAPSE_PREVIOUS_M,
    MAX_TRACK_ACCURACY_M,
    MIN_MOVEMENT_M,
)
from .metrics import distance
from .models import Fix
from .utils import is_finite_number

__all__ = ["FixDecision", "FixVerdict", "FixFilter"]

LOGGER = logging.getLogger(__name__)


class FixDecision(str, Enum):
    REJECT = "reject"
    LOCATION_ONLY = "location_only"
    ACCEPT = "accept"


@dataclass(frozen=True, slots=True)
class FixVerdict:
    decision: FixDecision
    distance_m: float = 0.0
    reason: Optional[str] = None

    @property
    def updates_location(self) -> bool:
        return self.decision is not FixDecision.REJECT

    @property
    def accepted(self) -> bool:
        return self.decision is FixDecision.ACCEPT


def _accuracy(fix: Optional[Fix]) -> Optional[float]:
    if fix is None or not is_finite_number(fix.accuracy_m):
        return None
    return float(fix.accuracy_m)


class FixFilter:
    """Stateful fix gate remembering the last fix that passed validation."""

    def __init__(
        self,
        max_track_accuracy_m: float = MAX_TRACK_ACCURACY_M,
        collapse_previous_m: float = ACCURACY_COLLAPSE_PREVIOUS_M,
        collapse_new_m: float = ACCURACY_COLLAPSE_NEW_M,
        min_movement_m: float = MIN_MOVEMENT_M,
    ) -> None:
        self._max_track_accuracy_m = max_track_accuracy_m
        self._collapse_previous_m = collapse_previous_m
        self._collapse_new_m = collapse_new_m
        self._min_movement_m = min_movement_m
        self._last_fix: Optional[Fix] = None

    @property
    def last_fix(self) -> Optional[Fix]:
        return self._last_fix

    def reset(self) -> None:
        """Forget the previous fix so a new session starts without history."""

        self._last_fix = None

    def _is_accuracy_collapse(self, fix: Fix) -> bool:
        previous = _accuracy(self._last_fix)
        current = _accuracy(fix)
        if previous is None or current is None:
            return False
        return previous < self._collapse_previous_m and current > self._collapse_new_m

    def check_location(self, fix: Fix) -> FixVerdict:
        """Apply only the validity gates (coordinates and accuracy collapse).

        Used for fixes that arrive while no segment is recording, such as the
        one-shot current position query.
        """

        if not (is_finite_number(fix.lat) and is_finite_number(fix.lng)):
            LOGGER.debug("Dropping fix with non-finite coordinates: %s", fix)
            return FixVerdict(FixDecision.REJECT, reason="invalid_coordinates")
        if self._is_accuracy_collapse(fix):
            LOGGER.debug(
                "Dropping fix after accuracy collapse %s -> %s",
                _accuracy(self._last_fix),
                fix.accuracy_m,
            )
            return FixVerdict(FixDecision.REJECT, reason="accuracy_collapse")
        self._last_fix = fix
        return FixVerdict(FixDecision.LOCATION_ONLY)

    def evaluate(self, fix: Fix, last_point: Optional[Fix]) -> FixVerdict:
        """Classify ``fix`` against the previous fix and the last segment point.

        Args:
            fix: Newly arrived fix.
            last_point: Last point of the active segment, ``None`` when the
                segment is still empty.
        """

        verdict = self.check_location(fix)
        if not verdict.updates_location:
            return verdict

        accuracy = _accuracy(fix)
        if accuracy is not None and accuracy > self._max_track_accuracy_m:
            return FixVerdict(FixDecision.LOCATION_ONLY, reason="low_accuracy")

        if last_point is None:
            return FixVerdict(FixDecision.ACCEPT, distance_m=0.0)

        step = distance(last_point, fix)
        if step < self._min_movement_m:
            return FixVerdict(FixDecision.LOCATION_ONLY, reason="jitter")
        if not math.isfinite(step):
            step = 0.0
        return FixVerdict(FixDecision.ACCEPT, distance_m=step)
