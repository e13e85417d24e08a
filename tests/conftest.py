"""Global pytest fixtures & helpers.

Adds project root to path and provides a controllable clock, a fake ticker,
fix factories and a wired engine so scenario tests stay short.
"""
from __future__ import annotations

import math
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from monotrack.config import EARTH_RADIUS_M
from monotrack.engine import EngineConfig, TrackingEngine
from monotrack.models import Fix
from monotrack.services import HistoryService, HistoryServiceConfig
from monotrack.sources import ManualFixSource
from monotrack.store import MemoryStore

START_MS = 1_700_000_000_000
METERS_PER_DEGREE = EARTH_RADIUS_M * math.pi / 180.0


# --- Factory helpers -------------------------------------------------
def make_fix(east_m=0.0, accuracy=10.0, ts=START_MS, lat=0.0):
    """Fix ``east_m`` metres east of (lat, 0) along the equator."""
    return Fix(lat=lat, lng=east_m / METERS_PER_DEGREE, timestamp_ms=ts, accuracy_m=accuracy)


def make_route_payload(route_id="r1", points=None, start_ms=START_MS, distance=100.0):
    if points is None:
        points = [{"lat": 0.0, "lng": 0.0, "timestamp_ms": start_ms}]
    return {
        "id": route_id,
        "segments": [
            {
                "id": f"{route_id}-s1",
                "mode": "walking",
                "points": points,
                "start_time_ms": start_ms,
                "end_time_ms": start_ms + 60_000,
                "distance_m": distance,
                "steps": 131,
                "calories": 5.0,
            }
        ],
        "start_time_ms": start_ms,
        "end_time_ms": start_ms + 60_000,
        "total_distance_m": distance,
        "total_steps": 131,
        "total_calories": 5.0,
    }


class FakeClock:
    def __init__(self, start=START_MS):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class FakeTicker:
    def __init__(self):
        self.callback = None
        self.starts = 0
        self.cancels = 0

    @property
    def running(self):
        return self.callback is not None

    def start(self, callback):
        self.callback = callback
        self.starts += 1

    def cancel(self):
        self.callback = None
        self.cancels += 1

    def fire(self):
        if self.callback is not None:
            self.callback()


class RecordingKeepAwake:
    def __init__(self):
        self.held = False

    def acquire(self):
        self.held = True

    def release(self):
        self.held = False


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ticker():
    return FakeTicker()


@pytest.fixture
def source():
    return ManualFixSource()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def history(store, clock):
    service = HistoryService(store, HistoryServiceConfig(now_ms=clock))
    service.load()
    return service


@pytest.fixture
def keep_awake():
    return RecordingKeepAwake()


@pytest.fixture
def engine(source, history, clock, ticker, keep_awake):
    counter = iter(range(1, 10_000))
    config = EngineConfig(
        now_ms=clock,
        id_factory=lambda: f"id{next(counter)}",
        ticker=ticker,
        keep_awake=keep_awake,
    )
    return TrackingEngine(source, persist=history.save_route, config=config)
