from __future__ import annotations

from datetime import datetime
from typing import Protocol

from app.domain.entities.user import Session, User


class SessionPort(Protocol):
    def create_session(
        self,
        *,
        session_id: str,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None,
        user_agent: str | None,
        created_at: datetime,
    ) -> Session:
        ...

    def replace_user_sessions(
        self,
        *,
        session_id: str,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: str | None,
        user_agent: str | None,
        created_at: datetime,
    ) -> Session:
        """Delete every session of the user and insert the new one in one transaction."""
        ...

    def get_session_with_user(self, *, token_hash: str) -> tuple[Session, User] | None:
        ...

    def delete_session_by_token_hash(self, *, token_hash: str) -> Session | None:
        ...

    def delete_user_session(self, *, user_id: str, session_id: str) -> Session | None:
        ...

    def delete_user_sessions_except(self, *, user_id: str, keep_session_id: str) -> int:
        ...

    def list_active_sessions(self, *, user_id: str, now: datetime) -> list[Session]:
        ...

    def count_sessions(self, *, now: datetime) -> tuple[int, int]:
        """Return (total, expired) where expired means expires_at <= now."""
        ...

    def delete_expired_sessions(self, *, now: datetime) -> int:
        ...
