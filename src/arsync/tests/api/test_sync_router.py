from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from src.arsync.app import create_app
from src.arsync.errors import AuthConfigError, TransportError
from src.arsync.models import SyncOutcome
from src.arsync.use_cases.run_guard import SyncAlreadyRunningError, SyncRunGuard


class _BusyGuard:
    is_running = True

    def run(self) -> SyncOutcome:
        raise SyncAlreadyRunningError("An AR sync run is already in progress")


def test_sync_returns_outcome_counts() -> None:
    guard = SyncRunGuard(lambda: SyncOutcome(updated=2, created=1, not_found=0, errors=1))
    client = TestClient(create_app(sync_guard=guard))

    resp = client.post("/sync")
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "updated": 2,
        "created": 1,
        "not_found": 0,
        "errors": 1,
    }


def test_sync_rejects_concurrent_trigger() -> None:
    client = TestClient(create_app(sync_guard=_BusyGuard()))

    resp = client.post("/sync")
    assert resp.status_code == 409
    assert resp.json() == {
        "success": False,
        "error": "An AR sync run is already in progress",
    }


def test_fatal_run_error_is_a_500() -> None:
    def failing_run() -> SyncOutcome:
        raise TransportError("NetSuite request failed: connection refused")

    client = TestClient(create_app(sync_guard=SyncRunGuard(failing_run)))

    resp = client.post("/sync")
    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert "connection refused" in body["error"]


def test_health_reports_running_state() -> None:
    client = TestClient(create_app(sync_guard=_BusyGuard()))

    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["sync_running"] is True
    assert body["timestamp"].endswith("+00:00")


def test_index_page_lists_endpoints() -> None:
    client = TestClient(create_app(sync_guard=_BusyGuard()))

    resp = client.get("/")
    assert resp.status_code == 200
    assert "POST /sync" in resp.text


def test_startup_without_config_fails(monkeypatch) -> None:
    for name in (
        "NETSUITE_ACCOUNT_ID",
        "NETSUITE_CONSUMER_KEY",
        "NETSUITE_CONSUMER_SECRET",
        "NETSUITE_TOKEN_ID",
        "NETSUITE_TOKEN_SECRET",
        "HUBSPOT_ACCESS_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("src.arsync.config.settings.load_dotenv", lambda **kwargs: False)

    app = create_app()

    async def _start() -> None:
        async with app.router.lifespan_context(app):
            pass

    with pytest.raises(AuthConfigError):
        asyncio.run(_start())
    assert app.state.sync_guard is None


def test_startup_builds_guard_and_honours_sync_on_start(monkeypatch, sync_env) -> None:
    for name, value in sync_env.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("SYNC_ON_START", "true")
    monkeypatch.setattr("src.arsync.config.settings.load_dotenv", lambda **kwargs: False)

    ran = []

    class _FakeService:
        def run_sync(self) -> SyncOutcome:
            ran.append(True)
            return SyncOutcome(updated=1)

    monkeypatch.setattr("src.arsync.app.build_ar_sync_service", lambda settings: _FakeService())
    started_threads = []
    original = SyncRunGuard.run_in_background

    def _tracking(self):
        thread = original(self)
        started_threads.append(thread)
        return thread

    monkeypatch.setattr(SyncRunGuard, "run_in_background", _tracking)

    app = create_app()

    async def _start() -> None:
        async with app.router.lifespan_context(app):
            pass

    asyncio.run(_start())
    for thread in started_threads:
        thread.join(timeout=5)

    assert isinstance(app.state.sync_guard, SyncRunGuard)
    assert ran == [True]
    assert app.state.sync_guard.last_outcome == SyncOutcome(updated=1)
