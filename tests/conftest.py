from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from threading import RLock

import pytest

from app.domain.entities.user import Account, Provider, Session, User
from app.infrastructure.security.token_service import SessionTokenService


T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeAuthPort:
    def __init__(self):
        self.users: dict[str, User] = {}
        self.accounts: dict[str, Account] = {}
        self.transactions = 0
        self._lock = RLock()

    def execute_in_transaction(self, fn):
        with self._lock:
            self.transactions += 1
            return fn(self)

    def add_user(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def get_user_by_email(self, *, email: str) -> User | None:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def insert_user_if_absent(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        email_verified: bool,
        image: str | None,
        created_at: datetime,
    ) -> tuple[User, bool]:
        with self._lock:
            existing = self.get_user_by_email(email=email)
            if existing is not None:
                return existing, False
            user = User(
                id=user_id,
                name=name,
                email=email,
                email_verified=email_verified,
                image=image,
                created_at=created_at,
                updated_at=created_at,
            )
            self.users[user.id] = user
            return user, True

    def update_user_profile(
        self,
        *,
        user_id: str,
        name: str,
        image: str | None,
        email_verified: bool,
        updated_at: datetime,
    ) -> User | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        updated = replace(
            user,
            name=name,
            image=image,
            email_verified=email_verified,
            updated_at=updated_at,
        )
        self.users[user_id] = updated
        return updated

    def get_account_by_provider_account(
        self,
        *,
        provider_id: Provider,
        provider_account_id: str,
    ) -> Account | None:
        for account in self.accounts.values():
            if account.provider_id == provider_id and account.provider_account_id == provider_account_id:
                return account
        return None

    def link_account_if_absent(
        self,
        *,
        account_id: str,
        user_id: str,
        provider_id: Provider,
        provider_account_id: str,
        created_at: datetime,
    ) -> Account:
        with self._lock:
            existing = self.get_account_by_provider_account(
                provider_id=provider_id,
                provider_account_id=provider_account_id,
            )
            if existing is not None:
                return existing
            account = Account(
                id=account_id,
                user_id=user_id,
                provider_id=provider_id,
                provider_account_id=provider_account_id,
                created_at=created_at,
                updated_at=created_at,
            )
            self.accounts[account.id] = account
            return account


class FakeSessionPort:
    def __init__(self, auth_port: FakeAuthPort):
        self.auth_port = auth_port
        self.sessions: dict[str, Session] = {}
        self.calls: list[str] = []

    def _insert(self, *, session_id, user_id, token_hash, expires_at, ip_address, user_agent, created_at) -> Session:
        session = Session(
            id=session_id,
            user_id=user_id,
            expires_at=expires_at,
            created_at=created_at,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.sessions[token_hash] = session
        return session

    def create_session(self, **kwargs) -> Session:
        self.calls.append("create_session")
        return self._insert(**kwargs)

    def replace_user_sessions(self, **kwargs) -> Session:
        self.calls.append("replace_user_sessions")
        self.sessions = {
            token_hash: session
            for token_hash, session in self.sessions.items()
            if session.user_id != kwargs["user_id"]
        }
        return self._insert(**kwargs)

    def get_session_with_user(self, *, token_hash: str) -> tuple[Session, User] | None:
        self.calls.append("get_session_with_user")
        session = self.sessions.get(token_hash)
        if session is None:
            return None
        user = self.auth_port.get_user_by_id(user_id=session.user_id)
        if user is None:
            return None
        return session, user

    def delete_session_by_token_hash(self, *, token_hash: str) -> Session | None:
        self.calls.append("delete_session_by_token_hash")
        return self.sessions.pop(token_hash, None)

    def delete_user_session(self, *, user_id: str, session_id: str) -> Session | None:
        for token_hash, session in list(self.sessions.items()):
            if session.id == session_id and session.user_id == user_id:
                return self.sessions.pop(token_hash)
        return None

    def delete_user_sessions_except(self, *, user_id: str, keep_session_id: str) -> int:
        doomed = [
            token_hash
            for token_hash, session in self.sessions.items()
            if session.user_id == user_id and session.id != keep_session_id
        ]
        for token_hash in doomed:
            del self.sessions[token_hash]
        return len(doomed)

    def list_active_sessions(self, *, user_id: str, now: datetime) -> list[Session]:
        active = [
            session
            for session in self.sessions.values()
            if session.user_id == user_id and session.expires_at > now
        ]
        return sorted(active, key=lambda session: session.created_at)

    def count_sessions(self, *, now: datetime) -> tuple[int, int]:
        total = len(self.sessions)
        expired = sum(1 for session in self.sessions.values() if session.expires_at <= now)
        return total, expired

    def delete_expired_sessions(self, *, now: datetime) -> int:
        self.calls.append("delete_expired_sessions")
        doomed = [token_hash for token_hash, session in self.sessions.items() if session.expires_at < now]
        for token_hash in doomed:
            del self.sessions[token_hash]
        return len(doomed)


def make_user(
    *,
    user_id: str = "user-1",
    email: str = "alice@example.com",
    name: str = "Alice",
    email_verified: bool = True,
    image: str | None = None,
) -> User:
    return User(
        id=user_id,
        name=name,
        email=email,
        email_verified=email_verified,
        image=image,
        created_at=T0,
        updated_at=T0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_port() -> FakeAuthPort:
    return FakeAuthPort()


@pytest.fixture
def session_port(auth_port: FakeAuthPort) -> FakeSessionPort:
    return FakeSessionPort(auth_port)


@pytest.fixture
def token_service() -> SessionTokenService:
    return SessionTokenService(session_ttl_days=7)


@pytest.fixture
def session_store(session_port, token_service, clock):
    from app.application.use_cases.session_store import SessionStore

    return SessionStore(session_port=session_port, token_port=token_service, clock=clock)


@pytest.fixture
def client(auth_port, session_store):
    from fastapi.testclient import TestClient

    from app.api.deps import get_session_store, get_update_profile_use_case
    from app.application.use_cases.update_profile import UpdateProfileUseCase
    from app.main import app

    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_update_profile_use_case] = lambda: UpdateProfileUseCase(auth_port=auth_port)
    yield TestClient(app)
    app.dependency_overrides.clear()
