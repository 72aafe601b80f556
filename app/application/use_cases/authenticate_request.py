from __future__ import annotations

import logging

from app.application.dto.auth import AuthenticatedIdentity
from app.domain.exceptions import AuthError, AuthErrorKind
from app.domain.result import Err, Ok, Result

from .auth_common import extract_bearer_token
from .session_store import SessionStore


logger = logging.getLogger(__name__)


class AuthGuard:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def authenticate(self, authorization: str | None) -> Result[AuthenticatedIdentity, AuthError]:
        token = extract_bearer_token(authorization)
        if token is None:
            return Err(
                AuthError(
                    AuthErrorKind.MISSING_CREDENTIAL,
                    "Missing or invalid authorization header.",
                )
            )

        result = self._session_store.validate(token)
        if isinstance(result, Err):
            # Not-found and expired stay indistinguishable to the caller.
            logger.info("auth_guard: rejected reason=%s", result.error.kind.value)
            return Err(AuthError(AuthErrorKind.UNAUTHORIZED, "Invalid or expired session."))

        user, session = result.value
        return Ok(AuthenticatedIdentity(user=user, session=session))
