from __future__ import annotations

from app.domain.entities.user import Session
from app.domain.exceptions import AuthError, AuthErrorKind
from app.domain.result import Err, Result

from .auth_common import extract_bearer_token
from .session_store import SessionStore


class SignOutUseCase:
    def __init__(self, *, session_store: SessionStore):
        self._session_store = session_store

    def execute(self, *, authorization: str | None) -> Result[Session, AuthError]:
        token = extract_bearer_token(authorization)
        if token is None:
            return Err(AuthError(AuthErrorKind.MISSING_CREDENTIAL, "Missing authorization header."))
        return self._session_store.revoke(token)
