from __future__ import annotations

import logging
from typing import Mapping

from app.application.dto.auth import AppleUserInfo, VerifiedProfile
from app.application.ports.identity_provider_port import IdentityProviderPort
from app.domain.entities.user import Provider
from app.domain.exceptions import VerificationError, VerificationErrorKind
from app.domain.result import Err, Result


logger = logging.getLogger(__name__)


class IdentityVerifier:
    """Dispatches an identity token to the verifier registered for its provider.

    Every ``Provider`` member must be registered; a missing variant is a wiring
    error caught at construction rather than a runtime lookup miss.
    """

    def __init__(self, *, verifiers: Mapping[Provider, IdentityProviderPort]):
        missing = [provider.value for provider in Provider if provider not in verifiers]
        if missing:
            raise ValueError(f"Identity verifiers missing for providers: {', '.join(missing)}")
        self._verifiers = dict(verifiers)

    def verify(
        self,
        *,
        provider: Provider,
        raw_token: str,
        user_info: AppleUserInfo | None = None,
    ) -> Result[VerifiedProfile, VerificationError]:
        token = raw_token.strip()
        if not token:
            return Err(VerificationError(VerificationErrorKind.INVALID_TOKEN, "Empty identity token."))

        result = self._verifiers[provider].verify_id_token(id_token=token, user_info=user_info)
        if isinstance(result, Err):
            logger.warning(
                "identity_verifier: rejected provider=%s kind=%s",
                provider.value,
                result.error.kind.value,
            )
        return result
