from __future__ import annotations

import threading

import pytest

from src.community_events.community_events.qrcodes.sweeper import ExpiredTokenSweeper


class CountingService:
    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail
        self.called = threading.Event()

    def sweep_expired(self, now=None):
        self.calls += 1
        self.called.set()
        if self.fail:
            raise RuntimeError("database unavailable")
        return 3


def test_run_once_returns_count():
    assert ExpiredTokenSweeper(CountingService(), 60).run_once() == 3


def test_run_once_survives_failures(caplog):
    sweeper = ExpiredTokenSweeper(CountingService(fail=True), 60)
    assert sweeper.run_once() == 0
    assert "sweep failed" in caplog.text


def test_background_thread_runs_and_stops():
    service = CountingService()
    sweeper = ExpiredTokenSweeper(service, 0.01)
    sweeper.start()
    try:
        assert service.called.wait(2.0)
        assert sweeper.running
    finally:
        sweeper.stop(timeout=2.0)
    assert not sweeper.running


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        ExpiredTokenSweeper(CountingService(), 0)
