from datetime import datetime, timezone

from monotrack.analytics import calculate_analytics, top_routes
from monotrack.models import Route


def _route(route_id, start: datetime, minutes=30, distance=1000.0, calories=50.0):
    start_ms = int(start.timestamp() * 1000)
    return Route(
        id=route_id,
        start_time_ms=start_ms,
        end_time_ms=start_ms + minutes * 60_000,
        total_distance_m=distance,
        total_calories=calories,
    )


# Wednesday 2025-01-15
NOW = datetime(2025, 1, 15, 18, 0, tzinfo=timezone.utc)


def test_routes_roll_up_into_periods() -> None:
    routes = [
        _route("today", datetime(2025, 1, 15, 7, 0, tzinfo=timezone.utc)),
        _route("sunday", datetime(2025, 1, 12, 9, 0, tzinfo=timezone.utc), distance=2000.0),
        _route("saturday", datetime(2025, 1, 11, 9, 0, tzinfo=timezone.utc)),
        _route("last_month", datetime(2024, 12, 31, 9, 0, tzinfo=timezone.utc)),
    ]
    stats = calculate_analytics(routes, now=NOW, tz=timezone.utc)

    assert stats.daily.count == 1
    assert stats.daily.duration_ms == 30 * 60_000
    assert stats.weekly.count == 2
    assert stats.weekly.distance_m == 3000.0
    assert stats.monthly.count == 3
    assert stats.monthly.calories == 150.0


def test_unfinished_route_contributes_no_duration() -> None:
    route = _route("open", datetime(2025, 1, 15, 7, 0, tzinfo=timezone.utc))
    route.end_time_ms = None
    stats = calculate_analytics([route], now=NOW, tz=timezone.utc)
    assert stats.daily.count == 1
    assert stats.daily.duration_ms == 0


def test_top_routes_sorted_by_distance() -> None:
    routes = [
        _route(str(i), NOW, distance=d) for i, d in enumerate([5.0, 50.0, 500.0, 1.0, 20.0, 7.0])
    ]
    top = top_routes(routes, limit=3)
    assert [r.total_distance_m for r in top] == [500.0, 50.0, 20.0]
    assert len(top_routes(routes)) == 5
