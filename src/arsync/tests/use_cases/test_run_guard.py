from __future__ import annotations

import threading

import pytest

from src.arsync.models import SyncOutcome
from src.arsync.use_cases.run_guard import SyncAlreadyRunningError, SyncRunGuard


def test_second_trigger_is_rejected_while_a_run_is_active() -> None:
    started = threading.Event()
    release = threading.Event()

    def slow_run() -> SyncOutcome:
        started.set()
        assert release.wait(timeout=5)
        return SyncOutcome(updated=3)

    guard = SyncRunGuard(slow_run)
    results: list[SyncOutcome] = []
    worker = threading.Thread(target=lambda: results.append(guard.run()))
    worker.start()
    assert started.wait(timeout=5)

    assert guard.is_running is True
    with pytest.raises(SyncAlreadyRunningError):
        guard.run()

    release.set()
    worker.join(timeout=5)

    assert results == [SyncOutcome(updated=3)]
    assert guard.is_running is False
    assert guard.last_outcome == SyncOutcome(updated=3)
    assert guard.last_finished_at is not None


def test_lock_is_released_after_a_failed_run() -> None:
    calls = {"n": 0}

    def flaky_run() -> SyncOutcome:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("NetSuite down")
        return SyncOutcome(created=1)

    guard = SyncRunGuard(flaky_run)
    with pytest.raises(RuntimeError):
        guard.run()
    assert guard.is_running is False
    assert guard.run() == SyncOutcome(created=1)


def test_run_in_background_records_outcome() -> None:
    guard = SyncRunGuard(lambda: SyncOutcome(updated=1))
    thread = guard.run_in_background()
    thread.join(timeout=5)
    assert guard.last_outcome == SyncOutcome(updated=1)
