from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities.user import Provider, Session, User


@dataclass(frozen=True)
class AppleUserName:
    first_name: str | None
    last_name: str | None


@dataclass(frozen=True)
class AppleUserInfo:
    """Payload Apple hands the client on the first authorization only."""

    name: AppleUserName | None
    email: str | None


@dataclass(frozen=True)
class VerifiedProfile:
    provider: Provider
    provider_user_id: str
    email: str
    name: str | None
    picture: str | None
    email_verified: bool


@dataclass(frozen=True)
class ClientMeta:
    ip_address: str | None
    user_agent: str | None


@dataclass(frozen=True)
class IssuedSession:
    session: Session
    token: str


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user: User
    session: Session


@dataclass(frozen=True)
class AuthUserOutput:
    id: str
    name: str
    email: str
    email_verified: bool
    image: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class SignInInput:
    provider: Provider
    id_token: str
    user_info: AppleUserInfo | None
    client_meta: ClientMeta


@dataclass(frozen=True)
class SignInOutput:
    provider: Provider
    user: AuthUserOutput
    token: str
    session_id: str
    expires_at: datetime
