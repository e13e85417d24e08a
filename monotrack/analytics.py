"""Daily / weekly / monthly roll-ups over saved routes.

Pure transformation: routes in, aggregated numbers out. Period membership is
decided by the route's start time in the requested timezone; weeks start on
Sunday.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, List, Optional, Sequence

from .config import TOP_ROUTES_LIMIT
from .models import Route

__all__ = ["AggregatedStats", "AnalyticsData", "calculate_analytics", "top_routes"]


@dataclass(slots=True)
class AggregatedStats:
    distance_m: float = 0.0
    calories: float = 0.0
    duration_ms: int = 0
    count: int = 0

    def add(self, route: Route) -> None:
        self.distance_m += route.total_distance_m
        self.calories += route.total_calories
        self.duration_ms += route.duration_ms
        self.count += 1


@dataclass(slots=True)
class AnalyticsData:
    daily: AggregatedStats = field(default_factory=AggregatedStats)
    weekly: AggregatedStats = field(default_factory=AggregatedStats)
    monthly: AggregatedStats = field(default_factory=AggregatedStats)


def _week_start(day: date) -> date:
    # Python weekdays run Monday=0 .. Sunday=6.
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _local_datetime(epoch_ms: int, tz: Optional[tzinfo]) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=tz)


def calculate_analytics(
    routes: Iterable[Route],
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> AnalyticsData:
    """Aggregate distance, calories, duration and count per period.

    Args:
        routes: Saved routes.
        now: Reference instant; defaults to the current time in ``tz``.
        tz: Timezone used for calendar boundaries; ``None`` means local time.
    """

    reference = now if now is not None else datetime.now(tz)
    if tz is not None and reference.tzinfo is not None:
        reference = reference.astimezone(tz)
    today = reference.date()
    this_week = _week_start(today)

    stats = AnalyticsData()
    for route in routes:
        started = _local_datetime(route.start_time_ms, tz).date()
        if started == today:
            stats.daily.add(route)
        if _week_start(started) == this_week:
            stats.weekly.add(route)
        if (started.year, started.month) == (today.year, today.month):
            stats.monthly.add(route)
    return stats


def top_routes(routes: Sequence[Route], limit: int = TOP_ROUTES_LIMIT) -> List[Route]:
    """Longest routes first."""

    return sorted(routes, key=lambda r: r.total_distance_m, reverse=True)[: max(0, limit)]
