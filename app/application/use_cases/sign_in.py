from __future__ import annotations

from app.application.dto.auth import SignInInput, SignInOutput
from app.domain.exceptions import ResolutionError, VerificationError
from app.domain.result import Err, Ok, Result

from .auth_common import build_auth_user_output
from .resolve_identity import IdentityResolver
from .session_store import SessionStore
from .verify_identity import IdentityVerifier


class SignInUseCase:
    def __init__(
        self,
        *,
        identity_verifier: IdentityVerifier,
        identity_resolver: IdentityResolver,
        session_store: SessionStore,
    ):
        self._identity_verifier = identity_verifier
        self._identity_resolver = identity_resolver
        self._session_store = session_store

    def execute(self, command: SignInInput) -> Result[SignInOutput, VerificationError | ResolutionError]:
        verified = self._identity_verifier.verify(
            provider=command.provider,
            raw_token=command.id_token,
            user_info=command.user_info,
        )
        if isinstance(verified, Err):
            return verified

        resolved = self._identity_resolver.resolve(verified.value)
        if isinstance(resolved, Err):
            return resolved

        user = resolved.value
        issued = self._session_store.issue(user_id=user.id, client_meta=command.client_meta)
        return Ok(
            SignInOutput(
                provider=command.provider,
                user=build_auth_user_output(user),
                token=issued.token,
                session_id=issued.session.id,
                expires_at=issued.session.expires_at,
            )
        )
