from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock
from typing import Callable

from app.application.dto.sessions import SweepResult
from app.application.ports.session_port import SessionPort

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class ExpiryReaper:
    def __init__(self, *, session_port: SessionPort, clock: Callable[[], datetime] = utcnow):
        self._session_port = session_port
        self._clock = clock
        self._running = Lock()

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    def sweep(self) -> SweepResult:
        """Delete every session whose expires_at is strictly before now."""
        now = self._clock()
        deleted_count = self._session_port.delete_expired_sessions(now=now)
        if deleted_count:
            logger.info(
                "expiry_reaper: swept deleted=%s at=%s",
                deleted_count,
                now.isoformat(),
            )
        else:
            logger.info("expiry_reaper: nothing_to_sweep at=%s", now.isoformat())
        return SweepResult(deleted_count=deleted_count, timestamp=now)

    def sweep_exclusive(self) -> SweepResult | None:
        """Run a sweep unless one is already in progress; returns None when skipped."""
        if not self._running.acquire(blocking=False):
            logger.warning("expiry_reaper: sweep_in_progress, skipping")
            return None
        try:
            return self.sweep()
        finally:
            self._running.release()
