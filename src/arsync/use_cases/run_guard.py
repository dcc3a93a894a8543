"""At most one AR sync run per process.

Two interleaved runs would write different snapshots of NetSuite data to the same
companies. A trigger that arrives while a run is active is rejected, not queued.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable

from src.arsync.errors import ArSyncError
from src.arsync.models import SyncOutcome

logger = logging.getLogger(__name__)


class SyncAlreadyRunningError(ArSyncError):
    """A run was triggered while another one is still in progress."""


class SyncRunGuard:
    def __init__(self, run: Callable[[], SyncOutcome]) -> None:
        self._run = run
        self._lock = threading.Lock()
        self.last_outcome: SyncOutcome | None = None
        self.last_finished_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run(self) -> SyncOutcome:
        if not self._lock.acquire(blocking=False):
            raise SyncAlreadyRunningError("An AR sync run is already in progress")
        try:
            outcome = self._run()
            self.last_outcome = outcome
            return outcome
        finally:
            self.last_finished_at = datetime.now(timezone.utc)
            self._lock.release()

    def run_in_background(self) -> threading.Thread:
        """Start one run on a daemon thread (used for SYNC_ON_START)."""

        def _target() -> None:
            try:
                self.run()
            except SyncAlreadyRunningError:
                logger.warning("Startup sync skipped: a run is already in progress")
            except Exception:
                logger.exception("Startup sync failed")

        thread = threading.Thread(target=_target, name="ar-sync-startup", daemon=True)
        thread.start()
        return thread
