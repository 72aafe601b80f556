from __future__ import annotations

import logging

from google.auth import exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from app.application.dto.auth import AppleUserInfo, VerifiedProfile
from app.application.ports.identity_provider_port import IdentityProviderPort
from app.domain.entities.user import Provider
from app.domain.exceptions import VerificationError, VerificationErrorKind
from app.domain.result import Err, Ok, Result

from .provider_errors import classify_token_error, is_timeout_error


logger = logging.getLogger(__name__)


class GoogleOidcClient(IdentityProviderPort):
    def __init__(self, *, client_ids: tuple[str, ...], timeout_seconds: float):
        self._client_ids = tuple(client_id for client_id in client_ids if client_id)
        self._timeout_seconds = timeout_seconds

    def verify_id_token(
        self,
        *,
        id_token: str,
        user_info: AppleUserInfo | None = None,
    ) -> Result[VerifiedProfile, VerificationError]:
        if not self._client_ids:
            logger.error("google_oidc_client: no client ids configured, rejecting token")
            return Err(VerificationError(VerificationErrorKind.INVALID_TOKEN, "Google sign-in is not configured."))

        try:
            payload = id_token_verify(
                token=id_token,
                audience=list(self._client_ids),
                timeout_seconds=self._timeout_seconds,
            )
        except exceptions.TransportError as exc:
            kind = (
                VerificationErrorKind.PROVIDER_UNAVAILABLE
                if is_timeout_error(exc)
                else VerificationErrorKind.INVALID_TOKEN
            )
            logger.warning("google_oidc_client: certs_fetch_failed kind=%s error=%s", kind.value, exc)
            return Err(VerificationError(kind, "Google key verification failed."))
        except (ValueError, exceptions.GoogleAuthError) as exc:
            return Err(VerificationError(classify_token_error(exc), "Invalid Google id_token."))

        email = payload.get("email")
        subject = payload.get("sub")
        if not email or not subject:
            return Err(
                VerificationError(
                    VerificationErrorKind.MISSING_CLAIMS,
                    "Google id_token missing required claims.",
                )
            )

        email = str(email)
        name = payload.get("name") if isinstance(payload.get("name"), str) else None
        picture = payload.get("picture") if isinstance(payload.get("picture"), str) else None
        return Ok(
            VerifiedProfile(
                provider=Provider.GOOGLE,
                provider_user_id=str(subject),
                email=email,
                name=name.strip() if name and name.strip() else email.split("@")[0],
                picture=picture,
                # Google only issues id_tokens for addresses it has verified.
                email_verified=True,
            )
        )


class _TimeoutRequest(google_requests.Request):
    def __init__(self, *, timeout_seconds: float):
        super().__init__()
        self._timeout_seconds = timeout_seconds

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        return super().__call__(
            url,
            method=method,
            body=body,
            headers=headers,
            timeout=self._timeout_seconds,
            **kwargs,
        )


def id_token_verify(*, token: str, audience: list[str], timeout_seconds: float) -> dict:
    request = _TimeoutRequest(timeout_seconds=timeout_seconds)
    return id_token.verify_oauth2_token(token, request, audience)
