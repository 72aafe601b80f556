from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.deps import get_update_profile_use_case, require_identity
from app.api.errors import auth_http_error
from app.api.routers.auth import to_session_response, to_user_response
from app.api.schemas.profile import ProfileResponse, UpdateProfileRequest, UpdateProfileResponse
from app.application.dto.auth import AuthenticatedIdentity
from app.application.use_cases.update_profile import UpdateProfileUseCase
from app.domain.exceptions import AuthError, AuthErrorKind


router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
def get_profile(identity: AuthenticatedIdentity = Depends(require_identity)):
    return ProfileResponse(
        message="Profile retrieved",
        user=to_user_response(identity.user),
        session=to_session_response(identity.session),
        timestamp=datetime.now(timezone.utc),
    )


@router.put("/profile", response_model=UpdateProfileResponse)
def update_profile(
    req: UpdateProfileRequest,
    identity: AuthenticatedIdentity = Depends(require_identity),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
):
    user = use_case.execute(user=identity.user, name=req.name, image=req.image)
    if user is None:
        # The user row vanished between authentication and the update.
        raise auth_http_error(AuthError(AuthErrorKind.UNAUTHORIZED))
    return UpdateProfileResponse(message="Profile updated", user=to_user_response(user))
