from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, TypeVar

from app.domain.entities.user import Account, Provider, User


TAuthResult = TypeVar("TAuthResult")


class AuthPort(Protocol):
    def execute_in_transaction(self, fn: Callable[[AuthPort], TAuthResult]) -> TAuthResult:
        ...

    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

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
        """Insert keyed on email; returns the stored user and whether this call created it."""
        ...

    def update_user_profile(
        self,
        *,
        user_id: str,
        name: str,
        image: str | None,
        email_verified: bool,
        updated_at: datetime,
    ) -> User | None:
        ...

    def get_account_by_provider_account(
        self,
        *,
        provider_id: Provider,
        provider_account_id: str,
    ) -> Account | None:
        ...

    def link_account_if_absent(
        self,
        *,
        account_id: str,
        user_id: str,
        provider_id: Provider,
        provider_account_id: str,
        created_at: datetime,
    ) -> Account:
        ...
