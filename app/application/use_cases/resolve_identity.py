from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable
from uuid import uuid4

from app.application.dto.auth import VerifiedProfile
from app.application.ports.auth_port import AuthPort
from app.domain.entities.user import User
from app.domain.exceptions import ResolutionError, ResolutionErrorKind
from app.domain.result import Err, Ok, Result

from .auth_common import normalize_email, utcnow


logger = logging.getLogger(__name__)


def fallback_display_name(profile: VerifiedProfile) -> str:
    return f"{profile.provider.value.title()} User"


class IdentityResolver:
    """Maps a verified profile onto a local user and its provider account link.

    Lookup order is the provider account link first, then the email. A user
    found only by email is linked to a new provider account when both the
    incoming and the stored email are verified; anything else is rejected.
    """

    def __init__(self, *, auth_port: AuthPort, clock: Callable[[], datetime] = utcnow):
        self._auth_port = auth_port
        self._clock = clock

    def resolve(self, profile: VerifiedProfile) -> Result[User, ResolutionError]:
        email = normalize_email(profile.email)

        def _tx(auth_port: AuthPort) -> Result[User, ResolutionError]:
            now = self._clock()
            account = auth_port.get_account_by_provider_account(
                provider_id=profile.provider,
                provider_account_id=profile.provider_user_id,
            )
            if account is not None:
                user = auth_port.get_user_by_id(user_id=account.user_id)
                if user is None:
                    return Err(
                        ResolutionError(
                            ResolutionErrorKind.USER_NOT_FOUND,
                            "User linked to provider account was not found.",
                        )
                    )
                return Ok(self._refresh(auth_port, user=user, profile=profile, now=now))

            user, created = auth_port.insert_user_if_absent(
                user_id=str(uuid4()),
                name=profile.name or fallback_display_name(profile),
                email=email,
                email_verified=profile.email_verified,
                image=profile.picture,
                created_at=now,
            )
            if not created:
                # A concurrent first sign-in for this identity may have committed
                # the user and its link after the lookup above.
                account = auth_port.get_account_by_provider_account(
                    provider_id=profile.provider,
                    provider_account_id=profile.provider_user_id,
                )
                if account is not None and account.user_id == user.id:
                    return Ok(self._refresh(auth_port, user=user, profile=profile, now=now))

            if not created and not (profile.email_verified and user.email_verified):
                logger.warning(
                    "identity_resolver: link_rejected provider=%s user_id=%s profile_verified=%s user_verified=%s",
                    profile.provider.value,
                    user.id,
                    profile.email_verified,
                    user.email_verified,
                )
                return Err(
                    ResolutionError(
                        ResolutionErrorKind.EMAIL_CONFLICT,
                        "Email belongs to another account and cannot be linked.",
                    )
                )

            auth_port.link_account_if_absent(
                account_id=str(uuid4()),
                user_id=user.id,
                provider_id=profile.provider,
                provider_account_id=profile.provider_user_id,
                created_at=now,
            )
            if created:
                logger.info(
                    "identity_resolver: user_created provider=%s user_id=%s",
                    profile.provider.value,
                    user.id,
                )
                return Ok(user)

            logger.info(
                "identity_resolver: account_linked provider=%s user_id=%s",
                profile.provider.value,
                user.id,
            )
            return Ok(self._refresh(auth_port, user=user, profile=profile, now=now))

        return self._auth_port.execute_in_transaction(_tx)

    @staticmethod
    def _refresh(auth_port: AuthPort, *, user: User, profile: VerifiedProfile, now: datetime) -> User:
        updated = auth_port.update_user_profile(
            user_id=user.id,
            name=profile.name or user.name,
            image=profile.picture or user.image,
            email_verified=user.email_verified or profile.email_verified,
            updated_at=now,
        )
        return updated or user
