from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from uuid import uuid4

from app.application.dto.auth import ClientMeta, IssuedSession
from app.application.dto.sessions import SessionStats
from app.application.ports.session_port import SessionPort
from app.application.ports.token_port import TokenPort
from app.domain.entities.user import Session, SessionPolicy, User
from app.domain.exceptions import AuthError, AuthErrorKind
from app.domain.result import Err, Ok, Result

from .auth_common import utcnow


logger = logging.getLogger(__name__)


class SessionStore:
    """Issues, validates and revokes opaque bearer sessions.

    Only the SHA-256 hash of a token is persisted. A session is active while
    ``now < expires_at``; at ``expires_at`` it is already expired.
    """

    def __init__(
        self,
        *,
        session_port: SessionPort,
        token_port: TokenPort,
        policy: SessionPolicy = SessionPolicy.MULTI,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_port = session_port
        self._token_port = token_port
        self._policy = policy
        self._clock = clock

    def issue(self, *, user_id: str, client_meta: ClientMeta) -> IssuedSession:
        now = self._clock()
        token = self._token_port.generate_session_token(now=now)
        expires_at = self._token_port.session_expires_at(now=now)
        if expires_at <= now:
            raise ValueError("Session TTL must be positive.")

        params = {
            "session_id": str(uuid4()),
            "user_id": user_id,
            "token_hash": self._token_port.hash_session_token(token=token),
            "expires_at": expires_at,
            "ip_address": client_meta.ip_address,
            "user_agent": client_meta.user_agent,
            "created_at": now,
        }
        if self._policy is SessionPolicy.SINGLE:
            session = self._session_port.replace_user_sessions(**params)
        else:
            session = self._session_port.create_session(**params)

        logger.info(
            "session_store: issued session_id=%s user_id=%s policy=%s expires_at=%s",
            session.id,
            user_id,
            self._policy.value,
            session.expires_at.isoformat(),
        )
        return IssuedSession(session=session, token=token)

    def validate(self, token: str) -> Result[tuple[User, Session], AuthError]:
        found = self._session_port.get_session_with_user(
            token_hash=self._token_port.hash_session_token(token=token),
        )
        if found is None:
            return Err(AuthError(AuthErrorKind.SESSION_NOT_FOUND))

        session, user = found
        if not session.is_active(self._clock()):
            return Err(AuthError(AuthErrorKind.SESSION_EXPIRED))
        return Ok((user, session))

    def revoke(self, token: str) -> Result[Session, AuthError]:
        session = self._session_port.delete_session_by_token_hash(
            token_hash=self._token_port.hash_session_token(token=token),
        )
        if session is None:
            return Err(AuthError(AuthErrorKind.SESSION_NOT_FOUND))
        logger.info("session_store: revoked session_id=%s user_id=%s", session.id, session.user_id)
        return Ok(session)

    def revoke_by_id(self, *, user_id: str, session_id: str) -> Result[Session, AuthError]:
        session = self._session_port.delete_user_session(user_id=user_id, session_id=session_id)
        if session is None:
            return Err(AuthError(AuthErrorKind.SESSION_NOT_FOUND))
        logger.info("session_store: revoked session_id=%s user_id=%s", session.id, user_id)
        return Ok(session)

    def revoke_all_except(self, *, user_id: str, keep_session_id: str) -> int:
        count = self._session_port.delete_user_sessions_except(
            user_id=user_id,
            keep_session_id=keep_session_id,
        )
        logger.info(
            "session_store: revoked_others user_id=%s kept=%s count=%s",
            user_id,
            keep_session_id,
            count,
        )
        return count

    def list(self, *, user_id: str) -> list[Session]:
        return self._session_port.list_active_sessions(user_id=user_id, now=self._clock())

    def stats(self) -> SessionStats:
        now = self._clock()
        total, expired = self._session_port.count_sessions(now=now)
        return SessionStats(total=total, active=total - expired, expired=expired, timestamp=now)
