from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request

from app.api.errors import auth_http_error
from app.application.dto.auth import AuthenticatedIdentity, ClientMeta
from app.application.use_cases.authenticate_request import AuthGuard
from app.application.use_cases.resolve_identity import IdentityResolver
from app.application.use_cases.session_store import SessionStore
from app.application.use_cases.sign_in import SignInUseCase
from app.application.use_cases.sign_out import SignOutUseCase
from app.application.use_cases.sweep_expired_sessions import ExpiryReaper
from app.application.use_cases.update_profile import UpdateProfileUseCase
from app.application.use_cases.verify_identity import IdentityVerifier
from app.domain.entities.user import Provider
from app.domain.result import Err
from app.infrastructure.clients.apple_identity_client import AppleIdentityClient
from app.infrastructure.clients.google_oidc_client import GoogleOidcClient
from app.infrastructure.db.engine import get_engine
from app.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from app.infrastructure.db.repositories.sessions_repository import SqlSessionsRepository
from app.infrastructure.security.token_service import SessionTokenService
from app.shared.config import get_settings


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


def _get_sessions_repository() -> SqlSessionsRepository:
    return SqlSessionsRepository(_get_db_engine())


@lru_cache(maxsize=1)
def _get_token_service() -> SessionTokenService:
    settings = get_settings()
    return SessionTokenService(session_ttl_days=settings.session_ttl_days)


@lru_cache(maxsize=1)
def _get_google_oidc_client() -> GoogleOidcClient:
    settings = get_settings()
    return GoogleOidcClient(
        client_ids=settings.google_client_ids,
        timeout_seconds=settings.identity_provider_timeout_seconds,
    )


@lru_cache(maxsize=1)
def _get_apple_identity_client() -> AppleIdentityClient:
    settings = get_settings()
    return AppleIdentityClient(
        client_ids=settings.apple_client_ids,
        timeout_seconds=settings.identity_provider_timeout_seconds,
        keys_url=settings.apple_keys_url,
    )


@lru_cache(maxsize=1)
def get_expiry_reaper() -> ExpiryReaper:
    # One per process: the scheduler and the debug route share its sweep lock.
    return ExpiryReaper(session_port=_get_sessions_repository())


def get_identity_verifier() -> IdentityVerifier:
    return IdentityVerifier(
        verifiers={
            Provider.GOOGLE: _get_google_oidc_client(),
            Provider.APPLE: _get_apple_identity_client(),
        }
    )


def get_identity_resolver() -> IdentityResolver:
    return IdentityResolver(auth_port=_get_accounts_repository())


def get_session_store() -> SessionStore:
    settings = get_settings()
    return SessionStore(
        session_port=_get_sessions_repository(),
        token_port=_get_token_service(),
        policy=settings.session_policy,
    )


def get_auth_guard(session_store: SessionStore = Depends(get_session_store)) -> AuthGuard:
    return AuthGuard(session_store=session_store)


def get_sign_in_use_case(
    identity_verifier: IdentityVerifier = Depends(get_identity_verifier),
    identity_resolver: IdentityResolver = Depends(get_identity_resolver),
    session_store: SessionStore = Depends(get_session_store),
) -> SignInUseCase:
    return SignInUseCase(
        identity_verifier=identity_verifier,
        identity_resolver=identity_resolver,
        session_store=session_store,
    )


def get_sign_out_use_case(session_store: SessionStore = Depends(get_session_store)) -> SignOutUseCase:
    return SignOutUseCase(session_store=session_store)


def get_update_profile_use_case() -> UpdateProfileUseCase:
    return UpdateProfileUseCase(auth_port=_get_accounts_repository())


def get_client_meta(
    request: Request,
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
    x_real_ip: str | None = Header(default=None),
) -> ClientMeta:
    ip_address = None
    if x_forwarded_for:
        ip_address = x_forwarded_for.split(",")[0].strip() or None
    if ip_address is None and x_real_ip:
        ip_address = x_real_ip.strip() or None
    if ip_address is None and request.client is not None:
        ip_address = request.client.host
    return ClientMeta(ip_address=ip_address, user_agent=user_agent)


def require_identity(
    authorization: str | None = Header(default=None),
    auth_guard: AuthGuard = Depends(get_auth_guard),
) -> AuthenticatedIdentity:
    result = auth_guard.authenticate(authorization)
    if isinstance(result, Err):
        raise auth_http_error(result.error)
    return result.value


def require_debug_routes() -> None:
    if not get_settings().debug_routes_enabled:
        raise HTTPException(status_code=404, detail="not_found")
