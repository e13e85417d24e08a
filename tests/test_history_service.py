import json
import math
from pathlib import Path

import pytest

from monotrack.errors import StoreError
from monotrack.models import Route
from monotrack.modes import MarkerType
from monotrack.sanitizer import sanitize_routes
from monotrack.services import HistoryService, HistoryServiceConfig
from monotrack.store import JsonFileStore, MemoryStore

from conftest import START_MS, make_route_payload


class _FailingStore(MemoryStore):
    def save_routes(self, routes):
        raise StoreError("read-only")

    def save_markers(self, markers):
        raise StoreError("read-only")


def test_load_writes_back_only_when_sanitizing_changed_data() -> None:
    clean = MemoryStore(routes=[make_route_payload("a")])
    HistoryService(clean).load()
    assert clean.save_count == 0

    dirty = MemoryStore(
        routes=[make_route_payload("a"), make_route_payload("b", points=[{"lat": math.nan, "lng": 1.0}])],
        markers=[{"id": "m", "lat": None, "lng": 1.0}],
    )
    service = HistoryService(dirty)
    service.load()
    assert [r.id for r in service.routes] == ["a"]
    assert service.markers == []
    assert [r["id"] for r in dirty.load_routes()] == ["a"]
    assert dirty.load_markers() == []


def test_loaded_routes_parse_into_models() -> None:
    store = MemoryStore(routes=[make_route_payload("a", distance=250.0)])
    service = HistoryService(store)
    service.load()
    route = service.routes[0]
    assert isinstance(route, Route)
    assert route.total_distance_m == 250.0
    assert route.segments[0].points[0].timestamp_ms == START_MS


def test_save_route_stores_a_copy(store, history) -> None:
    route = Route.from_dict(make_route_payload("r"))
    assert history.save_route(route)
    route.total_distance_m = 0.0
    assert history.routes[0].total_distance_m == 100.0
    assert store.load_routes()[0]["id"] == "r"


def test_store_failure_is_logged_not_raised(caplog) -> None:
    service = HistoryService(_FailingStore())
    service.load()
    assert service.save_route(Route.from_dict(make_route_payload("r"))) is False
    assert len(service.routes) == 1
    assert "Failed to persist routes" in caplog.text


def test_marker_add_and_delete(store, history, clock) -> None:
    marker = history.add_marker(40.4168, -3.7038, "  Plaza  ", "park")
    assert marker.label == "Plaza"
    assert marker.type is MarkerType.PARK
    assert marker.created_at_ms == clock.now
    assert store.load_markers()[0]["id"] == marker.id

    assert history.find_marker(marker.id) is marker
    assert history.delete_marker(marker.id)
    assert not history.delete_marker(marker.id)
    assert store.load_markers() == []


def test_marker_unknown_type_falls_back_to_general(history) -> None:
    assert history.add_marker(1.0, 2.0, "x", "castle").type is MarkerType.GENERAL


def test_marker_with_invalid_coordinates_is_rejected(history) -> None:
    with pytest.raises(ValueError):
        history.add_marker(math.nan, 2.0, "bad")


def test_clear_routes(store, history) -> None:
    history.save_route(Route.from_dict(make_route_payload("r")))
    history.clear_routes()
    assert history.routes == []
    assert store.load_routes() == []


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    service = HistoryService(store, HistoryServiceConfig(now_ms=lambda: START_MS))
    service.load()
    service.save_route(Route.from_dict(make_route_payload("r")))
    service.add_marker(1.0, 2.0, "Home", MarkerType.HOME)

    reloaded = HistoryService(JsonFileStore(tmp_path))
    reloaded.load()
    assert [r.id for r in reloaded.routes] == ["r"]
    assert reloaded.markers[0].type is MarkerType.HOME
    assert not list(tmp_path.glob("*.tmp"))


def test_json_file_store_tolerates_corrupt_files(tmp_path: Path, caplog) -> None:
    store = JsonFileStore(tmp_path)
    store.routes_path.write_text("{not json", encoding="utf-8")
    store.markers_path.write_text(json.dumps({"markers": []}), encoding="utf-8")
    assert store.load_routes() == []
    assert store.load_markers() == []
    assert "Failed reading store file" in caplog.text


def test_json_file_store_clear_without_file(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    store.clear_routes()
    store.save_routes([make_route_payload("r")])
    store.clear_routes()
    assert not store.routes_path.exists()


def _route_with_extra_fields() -> dict:
    payload = make_route_payload(
        "r",
        points=[
            {"lat": 0.0, "lng": 0.0, "timestamp_ms": START_MS, "speed": 1.4},
            {"lat": "bad", "lng": 0.0, "timestamp_ms": START_MS + 1_000},
        ],
    )
    payload["name"] = "Morning loop"
    payload["segments"][0]["mode"] = "running"
    return payload


def test_write_back_keeps_sanitized_payload_verbatim() -> None:
    raw = _route_with_extra_fields()
    store = MemoryStore(routes=[raw])
    service = HistoryService(store)
    service.load()

    written = store.load_routes()
    assert written == sanitize_routes([raw])
    assert written[0]["name"] == "Morning loop"
    assert written[0]["segments"][0]["mode"] == "running"
    assert written[0]["segments"][0]["points"] == [
        {"lat": 0.0, "lng": 0.0, "timestamp_ms": START_MS, "speed": 1.4}
    ]


def test_unknown_fields_survive_later_saves() -> None:
    store = MemoryStore(
        routes=[_route_with_extra_fields()],
        markers=[{"id": "m1", "lat": 1.0, "lng": 2.0, "label": "Gate", "note": "north side"}],
    )
    service = HistoryService(store, HistoryServiceConfig(id_factory=lambda: "m2"))
    service.load()
    service.save_route(Route.from_dict(make_route_payload("next")))
    service.add_marker(3.0, 4.0, "Cafe")

    routes = store.load_routes()
    assert [r["id"] for r in routes] == ["r", "next"]
    assert routes[0]["name"] == "Morning loop"
    markers = store.load_markers()
    assert [m["id"] for m in markers] == ["m1", "m2"]
    assert markers[0]["note"] == "north side"

    assert service.delete_marker("m2")
    assert store.load_markers() == [
        {"id": "m1", "lat": 1.0, "lng": 2.0, "label": "Gate", "note": "north side"}
    ]
