"""Operational session routes.

Both routes answer 404 unless ``DEBUG_ROUTES_ENABLED`` is set to a true value.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_expiry_reaper, get_session_store, require_debug_routes
from app.api.schemas.sessions import CleanupSessionsResponse, SessionStatsResponse
from app.application.use_cases.session_store import SessionStore
from app.application.use_cases.sweep_expired_sessions import ExpiryReaper


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/debug", dependencies=[Depends(require_debug_routes)])


@router.get("/session-stats", response_model=SessionStatsResponse)
def session_stats(session_store: SessionStore = Depends(get_session_store)):
    stats = session_store.stats()
    return SessionStatsResponse(
        total=stats.total,
        active=stats.active,
        expired=stats.expired,
        timestamp=stats.timestamp,
    )


@router.post("/cleanup-sessions", response_model=CleanupSessionsResponse)
def cleanup_sessions(reaper: ExpiryReaper = Depends(get_expiry_reaper)):
    result = reaper.sweep_exclusive()
    if result is None:
        raise HTTPException(status_code=409, detail="sweep_in_progress")
    logger.info("debug: manual_cleanup deleted=%s", result.deleted_count)
    return CleanupSessionsResponse(
        message="Expired sessions cleaned up",
        deleted_count=result.deleted_count,
        timestamp=result.timestamp,
    )
