from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_session_store, require_identity
from app.api.errors import auth_http_error
from app.api.routers.auth import to_session_response
from app.api.schemas.sessions import (
    RevokeAllSessionsResponse,
    RevokeSessionResponse,
    SessionItemResponse,
    SessionListResponse,
)
from app.application.dto.auth import AuthenticatedIdentity
from app.application.use_cases.session_store import SessionStore
from app.domain.result import Err


router = APIRouter()


@router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    identity: AuthenticatedIdentity = Depends(require_identity),
    session_store: SessionStore = Depends(get_session_store),
):
    sessions = session_store.list(user_id=identity.user.id)
    items = [
        SessionItemResponse(
            **to_session_response(session).model_dump(),
            current=session.id == identity.session.id,
        )
        for session in sessions
    ]
    return SessionListResponse(
        message="Active sessions retrieved",
        sessions=items,
        count=len(items),
    )


@router.post("/sessions/revoke-all", response_model=RevokeAllSessionsResponse)
def revoke_other_sessions(
    identity: AuthenticatedIdentity = Depends(require_identity),
    session_store: SessionStore = Depends(get_session_store),
):
    revoked = session_store.revoke_all_except(
        user_id=identity.user.id,
        keep_session_id=identity.session.id,
    )
    return RevokeAllSessionsResponse(
        message="All other sessions revoked",
        revoked_count=revoked,
    )


@router.delete("/sessions/{session_id}", response_model=RevokeSessionResponse)
def revoke_session(
    session_id: str,
    identity: AuthenticatedIdentity = Depends(require_identity),
    session_store: SessionStore = Depends(get_session_store),
):
    result = session_store.revoke_by_id(user_id=identity.user.id, session_id=session_id)
    if isinstance(result, Err):
        raise auth_http_error(result.error)
    return RevokeSessionResponse(message="Session revoked", session_id=result.value.id)
