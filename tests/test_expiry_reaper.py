from __future__ import annotations

from datetime import datetime, timedelta, timezone

from app.application.dto.auth import ClientMeta
from app.application.use_cases.session_store import SessionStore
from app.application.use_cases.sweep_expired_sessions import ExpiryReaper
from app.infrastructure.jobs.session_reaper_scheduler import (
    SessionReaperScheduler,
    seconds_until_next_boundary,
)

from conftest import make_user


META = ClientMeta(ip_address=None, user_agent=None)


def test_sweep_deletes_only_expired_sessions_and_is_idempotent(auth_port, session_port, token_service, clock):
    user = auth_port.add_user(make_user())
    store = SessionStore(session_port=session_port, token_port=token_service, clock=clock)
    store.issue(user_id=user.id, client_meta=META)
    store.issue(user_id=user.id, client_meta=META)
    clock.advance(days=3)
    survivor = store.issue(user_id=user.id, client_meta=META)
    clock.advance(days=5)
    reaper = ExpiryReaper(session_port=session_port, clock=clock)

    first = reaper.sweep()
    second = reaper.sweep()

    assert first.deleted_count == 2
    assert first.timestamp == clock.now
    assert second.deleted_count == 0
    assert [session.id for session in session_port.sessions.values()] == [survivor.session.id]


def test_sweep_keeps_session_expiring_exactly_now(auth_port, session_port, token_service, clock):
    user = auth_port.add_user(make_user())
    store = SessionStore(session_port=session_port, token_port=token_service, clock=clock)
    issued = store.issue(user_id=user.id, client_meta=META)
    clock.now = issued.session.expires_at

    result = ExpiryReaper(session_port=session_port, clock=clock).sweep()

    assert result.deleted_count == 0
    assert len(session_port.sessions) == 1


def test_sweep_exclusive_skips_while_running(session_port, clock):
    reaper = ExpiryReaper(session_port=session_port, clock=clock)

    reaper._running.acquire()
    try:
        assert reaper.is_running is True
        assert reaper.sweep_exclusive() is None
    finally:
        reaper._running.release()

    assert reaper.is_running is False
    assert reaper.sweep_exclusive().deleted_count == 0


class _FailingSessionPort:
    def __init__(self):
        self.calls = 0

    def delete_expired_sessions(self, *, now):
        self.calls += 1
        raise RuntimeError("database unavailable")


def test_scheduler_tick_survives_failing_sweep(clock):
    port = _FailingSessionPort()
    reaper = ExpiryReaper(session_port=port, clock=clock)
    scheduler = SessionReaperScheduler(reaper=reaper, interval_seconds=3600, clock=clock)

    assert scheduler.tick() is None
    assert scheduler.tick() is None
    assert port.calls == 2
    assert reaper.is_running is False


def test_scheduler_tick_skips_when_manual_sweep_holds_lock(session_port, clock):
    reaper = ExpiryReaper(session_port=session_port, clock=clock)
    scheduler = SessionReaperScheduler(reaper=reaper, clock=clock)

    reaper._running.acquire()
    try:
        assert scheduler.tick() is None
    finally:
        reaper._running.release()

    assert "delete_expired_sessions" not in session_port.calls


def test_seconds_until_next_boundary_aligns_to_wall_clock():
    now = datetime(2024, 1, 1, 12, 59, 30, tzinfo=timezone.utc)

    assert seconds_until_next_boundary(now, 3600) == 30
    assert seconds_until_next_boundary(now.replace(minute=0, second=0), 3600) == 3600
    assert seconds_until_next_boundary(now, 60) == 30


def test_scheduler_start_stop_is_idempotent(session_port):
    fixed_now = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=1)
    reaper = ExpiryReaper(session_port=session_port)
    scheduler = SessionReaperScheduler(reaper=reaper, interval_seconds=3600, clock=lambda: fixed_now)

    scheduler.start()
    scheduler.start()
    assert scheduler.running is True

    scheduler.stop()
    scheduler.stop()
    assert scheduler.running is False
    assert "delete_expired_sessions" not in session_port.calls
