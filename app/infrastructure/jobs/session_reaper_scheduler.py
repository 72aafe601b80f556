from __future__ import annotations

import logging
import math
from datetime import datetime
from threading import Event, Lock, Thread
from typing import Callable

from app.application.dto.sessions import SweepResult
from app.application.use_cases.auth_common import utcnow
from app.application.use_cases.sweep_expired_sessions import ExpiryReaper


logger = logging.getLogger(__name__)


def seconds_until_next_boundary(now: datetime, interval_seconds: int) -> float:
    """Seconds from ``now`` to the next wall-clock multiple of the interval."""
    ts = now.timestamp()
    next_boundary = math.floor(ts / interval_seconds) * interval_seconds + interval_seconds
    return max(next_boundary - ts, 0.0)


class SessionReaperScheduler:
    """Runs ``ExpiryReaper.sweep_exclusive`` on wall-clock aligned ticks.

    Sweeps run inline on the scheduler thread, so boundaries that pass while a
    sweep is still running are dropped instead of queued. A tick that finds the
    reaper busy (for example a manual sweep) is skipped. Sweep failures are
    logged and the loop keeps going.
    """

    def __init__(
        self,
        *,
        reaper: ExpiryReaper,
        interval_seconds: int = 3600,
        clock: Callable[[], datetime] = utcnow,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive.")
        self._reaper = reaper
        self._interval_seconds = interval_seconds
        self._clock = clock
        self._stop = Event()
        self._lock = Lock()
        self._thread: Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._stop.clear()
            self._thread = Thread(target=self._run, name="session-reaper", daemon=True)
            self._thread.start()
        logger.info("session_reaper_scheduler: started interval_seconds=%s", self._interval_seconds)

    def stop(self, timeout_seconds: float = 5.0) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop.set()
        if thread is not None:
            thread.join(timeout=timeout_seconds)
            logger.info("session_reaper_scheduler: stopped")

    def tick(self) -> SweepResult | None:
        try:
            result = self._reaper.sweep_exclusive()
        except Exception:
            logger.exception("session_reaper_scheduler: sweep_failed")
            return None
        if result is None:
            logger.info("session_reaper_scheduler: tick_skipped reason=sweep_in_progress")
        return result

    def _run(self) -> None:
        while not self._stop.is_set():
            delay = seconds_until_next_boundary(self._clock(), self._interval_seconds)
            if self._stop.wait(delay):
                break
            self.tick()
