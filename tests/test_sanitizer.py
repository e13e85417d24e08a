import copy
import math

from monotrack.sanitizer import sanitize_markers, sanitize_routes

from conftest import make_route_payload


def _dirty_routes():
    good = make_route_payload("good")
    mixed = make_route_payload(
        "mixed",
        points=[
            {"lat": 1.0, "lng": 2.0, "timestamp_ms": 1},
            {"lat": math.nan, "lng": 2.0, "timestamp_ms": 2},
            {"lat": 1.0},
            None,
            {"lat": "1.0", "lng": 2.0},
        ],
    )
    empty = make_route_payload("empty", points=[{"lat": None, "lng": None}])
    no_segments = {"id": "bare", "start_time_ms": 0}
    return [good, mixed, empty, no_segments, "garbage"]


def test_sanitize_routes_drops_points_segments_and_routes() -> None:
    cleaned = sanitize_routes(_dirty_routes())
    assert [r["id"] for r in cleaned] == ["good", "mixed"]
    mixed_points = cleaned[1]["segments"][0]["points"]
    assert mixed_points == [{"lat": 1.0, "lng": 2.0, "timestamp_ms": 1}]


def test_sanitize_is_idempotent() -> None:
    once = sanitize_routes(_dirty_routes())
    twice = sanitize_routes(copy.deepcopy(once))
    assert twice == once


def test_sanitize_keeps_clean_payload_equal() -> None:
    clean = [make_route_payload("a"), make_route_payload("b")]
    assert sanitize_routes(copy.deepcopy(clean)) == clean


def test_sanitize_markers() -> None:
    raw = [
        {"id": "m1", "lat": 10.0, "lng": 20.0, "label": "Cafe"},
        {"id": "m2", "lat": math.inf, "lng": 20.0},
        {"id": "m3", "lng": 20.0},
        42,
    ]
    cleaned = sanitize_markers(raw)
    assert [m["id"] for m in cleaned] == ["m1"]
    assert sanitize_markers(cleaned) == cleaned


def test_non_list_payload_sanitizes_to_empty() -> None:
    assert sanitize_routes({"routes": []}) == []
    assert sanitize_markers(None) == []
