import threading
import time

import pytest

from monotrack.sources import ManualFixSource, PeriodicTicker

from conftest import make_fix


def test_periodic_ticker_fires_until_cancelled() -> None:
    calls = []
    third = threading.Event()

    def _tick():
        calls.append(time.monotonic())
        if len(calls) >= 3:
            third.set()

    ticker = PeriodicTicker(0.02)
    ticker.start(_tick)
    assert ticker.running
    assert third.wait(timeout=2.0)

    ticker.cancel()
    assert not ticker.running
    settled = len(calls)
    time.sleep(0.1)
    # At most one callback can already be in flight when cancel lands.
    assert len(calls) <= settled + 1


def test_periodic_ticker_restarts_after_cancel() -> None:
    fired = threading.Event()
    ticker = PeriodicTicker(0.02)
    ticker.start(lambda: None)
    ticker.cancel()
    ticker.start(fired.set)
    assert fired.wait(timeout=2.0)
    ticker.cancel()


def test_periodic_ticker_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        PeriodicTicker(0)


def test_manual_source_cancelled_subscription_stops_delivery() -> None:
    source = ManualFixSource()
    received = []
    subscription = source.subscribe(received.append, lambda exc: None)
    source.push(make_fix(1.0))
    subscription.cancel()
    source.push(make_fix(2.0))
    assert received == [make_fix(1.0)]
    assert source.subscriber_count == 0
