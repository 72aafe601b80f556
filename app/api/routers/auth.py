from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException

from app.api.deps import (
    get_client_meta,
    get_sign_in_use_case,
    get_sign_out_use_case,
    require_identity,
)
from app.api.errors import auth_http_error, resolution_http_error, verification_http_error
from app.api.schemas.auth import (
    IssuedSessionResponse,
    MeResponse,
    ProvidersResponse,
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignOutResponse,
    UserResponse,
)
from app.application.dto.auth import (
    AppleUserInfo,
    AppleUserName,
    AuthenticatedIdentity,
    ClientMeta,
    SignInInput,
)
from app.application.use_cases.sign_in import SignInUseCase
from app.application.use_cases.sign_out import SignOutUseCase
from app.domain.entities.user import Provider
from app.domain.exceptions import VerificationError
from app.domain.result import Err


router = APIRouter()

PROVIDER_LABELS = {
    Provider.GOOGLE: "Google",
    Provider.APPLE: "Apple",
}


def to_user_response(user) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        image=user.image,
        email_verified=user.email_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def to_session_response(session) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        expires_at=session.expires_at,
        created_at=session.created_at,
        ip_address=session.ip_address,
        user_agent=session.user_agent,
    )


def _user_info_from_request(req: SignInRequest) -> AppleUserInfo | None:
    if req.user is None:
        return None
    name = None
    if req.user.name is not None:
        name = AppleUserName(
            first_name=req.user.name.first_name,
            last_name=req.user.name.last_name,
        )
    return AppleUserInfo(name=name, email=req.user.email)


@router.post("/auth/sign-out", response_model=SignOutResponse)
def sign_out(
    authorization: str | None = Header(default=None),
    use_case: SignOutUseCase = Depends(get_sign_out_use_case),
):
    result = use_case.execute(authorization=authorization)
    if isinstance(result, Err):
        raise auth_http_error(result.error)
    return SignOutResponse(message="Successfully signed out", session_id=result.value.id)


@router.get("/auth/me", response_model=MeResponse)
def get_me(identity: AuthenticatedIdentity = Depends(require_identity)):
    return MeResponse(
        user=to_user_response(identity.user),
        session=to_session_response(identity.session),
    )


@router.get("/auth/providers", response_model=ProvidersResponse)
def list_providers():
    return ProvidersResponse(providers=[provider.value for provider in Provider])


@router.post("/auth/{provider}", response_model=SignInResponse)
def sign_in(
    provider: str,
    req: SignInRequest,
    client_meta: ClientMeta = Depends(get_client_meta),
    use_case: SignInUseCase = Depends(get_sign_in_use_case),
):
    try:
        parsed_provider = Provider.parse(provider)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="unsupported_provider") from exc

    result = use_case.execute(
        SignInInput(
            provider=parsed_provider,
            id_token=req.id_token,
            user_info=_user_info_from_request(req),
            client_meta=client_meta,
        )
    )
    if isinstance(result, Err):
        if isinstance(result.error, VerificationError):
            raise verification_http_error(result.error)
        raise resolution_http_error(result.error)

    output = result.value
    return SignInResponse(
        message=f"Successfully signed in with {PROVIDER_LABELS[output.provider]}",
        provider=output.provider.value,
        user=to_user_response(output.user),
        token=output.token,
        session=IssuedSessionResponse(id=output.session_id, expires_at=output.expires_at),
    )
