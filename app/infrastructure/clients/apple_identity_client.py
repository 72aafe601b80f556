from __future__ import annotations

import logging

import jwt

from app.application.dto.auth import AppleUserInfo, VerifiedProfile
from app.application.ports.identity_provider_port import IdentityProviderPort
from app.domain.entities.user import Provider
from app.domain.exceptions import VerificationError, VerificationErrorKind
from app.domain.result import Err, Ok, Result

from .provider_errors import is_timeout_error


logger = logging.getLogger(__name__)

APPLE_ISSUER = "https://appleid.apple.com"
APPLE_KEYS_URL = "https://appleid.apple.com/auth/keys"
APPLE_PRIVATE_RELAY_DOMAIN = "privaterelay.appleid.com"


def private_relay_email(subject: str) -> str:
    return f"{subject}@{APPLE_PRIVATE_RELAY_DOMAIN}"


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _display_name(user_info: AppleUserInfo | None) -> str | None:
    if user_info is None or user_info.name is None:
        return None
    parts = [
        part.strip()
        for part in (user_info.name.first_name, user_info.name.last_name)
        if part and part.strip()
    ]
    return " ".join(parts) or None


class AppleIdentityClient(IdentityProviderPort):
    """Verifies Sign in with Apple identity tokens against Apple's JWKS.

    Apple only reveals the user's name (and sometimes email) on the first
    authorization, through a payload the app forwards as ``user_info``. When
    neither the token nor that payload carries an email, a private relay
    address derived from the subject is used so the stored email is never null.
    """

    def __init__(
        self,
        *,
        client_ids: tuple[str, ...],
        timeout_seconds: float,
        keys_url: str = APPLE_KEYS_URL,
        jwks_client: jwt.PyJWKClient | None = None,
    ):
        self._client_ids = tuple(client_id for client_id in client_ids if client_id)
        self._jwks_client = jwks_client or jwt.PyJWKClient(
            keys_url,
            cache_keys=True,
            timeout=timeout_seconds,
        )

    def verify_id_token(
        self,
        *,
        id_token: str,
        user_info: AppleUserInfo | None = None,
    ) -> Result[VerifiedProfile, VerificationError]:
        if not self._client_ids:
            logger.error("apple_identity_client: no client ids configured, rejecting token")
            return Err(VerificationError(VerificationErrorKind.INVALID_TOKEN, "Apple sign-in is not configured."))

        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(id_token)
            claims = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=["RS256"],
                audience=list(self._client_ids),
                issuer=APPLE_ISSUER,
                options={"require": ["sub", "iss", "aud", "exp"]},
            )
        except jwt.PyJWKClientConnectionError as exc:
            kind = (
                VerificationErrorKind.PROVIDER_UNAVAILABLE
                if is_timeout_error(exc)
                else VerificationErrorKind.INVALID_TOKEN
            )
            logger.warning("apple_identity_client: keys_fetch_failed kind=%s error=%s", kind.value, exc)
            return Err(VerificationError(kind, "Apple key verification failed."))
        except jwt.ExpiredSignatureError:
            return Err(VerificationError(VerificationErrorKind.EXPIRED_TOKEN, "Apple id_token expired."))
        except jwt.InvalidAudienceError:
            return Err(VerificationError(VerificationErrorKind.AUDIENCE_MISMATCH, "Apple id_token audience mismatch."))
        except jwt.MissingRequiredClaimError:
            return Err(VerificationError(VerificationErrorKind.MISSING_CLAIMS, "Apple id_token missing required claims."))
        except jwt.PyJWTError:
            return Err(VerificationError(VerificationErrorKind.INVALID_TOKEN, "Invalid Apple id_token."))

        subject = str(claims.get("sub") or "").strip()
        if not subject:
            return Err(VerificationError(VerificationErrorKind.MISSING_CLAIMS, "Missing Apple user id."))

        token_email = claims.get("email") if isinstance(claims.get("email"), str) else None
        fallback_email = user_info.email.strip() if user_info and user_info.email else None
        if token_email:
            email = token_email
            email_verified = _as_bool(claims.get("email_verified", False))
        else:
            email = fallback_email or private_relay_email(subject)
            email_verified = False

        return Ok(
            VerifiedProfile(
                provider=Provider.APPLE,
                provider_user_id=subject,
                email=email,
                name=_display_name(user_info),
                picture=None,
                email_verified=email_verified,
            )
        )
