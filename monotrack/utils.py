"""General utility helpers shared across modules."""

from __future__ import annotations

import math
import time
import uuid
from typing import Any


def is_finite_number(value: Any) -> bool:
    """Return ``True`` for real, finite ints/floats (booleans excluded)."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def now_ms() -> int:
    """Current wall-clock time in Unix epoch milliseconds."""

    return int(time.time() * 1000)


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def format_distance(meters: float) -> str:
    """Format metres as ``"N m"`` below one kilometre, else ``"X.XX km"``."""

    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{math.floor(meters + 0.5)} m"


def format_duration(ms: float) -> str:
    """Format milliseconds as ``MM:SS`` or ``HH:MM:SS`` once past an hour."""

    total_seconds = int(max(0, ms) // 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"
