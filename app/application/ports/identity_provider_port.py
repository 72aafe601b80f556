from __future__ import annotations

from typing import Protocol

from app.application.dto.auth import AppleUserInfo, VerifiedProfile
from app.domain.exceptions import VerificationError
from app.domain.result import Result


class IdentityProviderPort(Protocol):
    def verify_id_token(
        self,
        *,
        id_token: str,
        user_info: AppleUserInfo | None,
    ) -> Result[VerifiedProfile, VerificationError]:
        ...
