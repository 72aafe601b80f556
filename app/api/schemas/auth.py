from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AppleNameRequest(CamelModel):
    first_name: str | None = Field(None, alias="firstName", max_length=120)
    last_name: str | None = Field(None, alias="lastName", max_length=120)


class SignInUserRequest(CamelModel):
    name: AppleNameRequest | None = None
    email: str | None = Field(None, max_length=320)


class SignInRequest(CamelModel):
    id_token: str = Field(..., alias="idToken", min_length=1)
    user: SignInUserRequest | None = Field(
        None,
        description="First-authorization payload Apple hands the client; ignored for Google.",
    )


class UserResponse(CamelModel):
    id: str
    email: str
    name: str
    image: str | None
    email_verified: bool = Field(..., alias="emailVerified")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class IssuedSessionResponse(CamelModel):
    id: str
    expires_at: datetime = Field(..., alias="expiresAt")


class SignInResponse(CamelModel):
    message: str
    provider: str
    user: UserResponse
    token: str
    session: IssuedSessionResponse


class SignOutResponse(CamelModel):
    message: str
    session_id: str = Field(..., alias="sessionId")


class SessionResponse(CamelModel):
    id: str
    expires_at: datetime = Field(..., alias="expiresAt")
    created_at: datetime = Field(..., alias="createdAt")
    ip_address: str | None = Field(None, alias="ipAddress")
    user_agent: str | None = Field(None, alias="userAgent")


class MeResponse(CamelModel):
    user: UserResponse
    session: SessionResponse


class ProvidersResponse(CamelModel):
    providers: list[str]
