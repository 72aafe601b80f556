from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from app.application.ports.auth_port import AuthPort
from app.domain.entities.user import Provider
from app.domain.exceptions import StorageError
from app.infrastructure.db.mappers.accounts_mapper import map_row_to_account, map_row_to_user

from .sql_base import SqlRepository


_USER_COLUMNS = "id, name, email, email_verified, image, created_at, updated_at"
_ACCOUNT_COLUMNS = "id, user_id, provider_id, provider_account_id, created_at, updated_at"


class SqlAccountsRepository(SqlRepository, AuthPort):
    def get_user_by_id(self, *, user_id: str):
        sql = f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_email(self, *, email: str):
        sql = f"""
            SELECT {_USER_COLUMNS}
            FROM users
            WHERE lower(email) = :email
            LIMIT 1
        """
        with self._connect() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def insert_user_if_absent(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        email_verified: bool,
        image: str | None,
        created_at: datetime,
    ):
        # Concurrent first sign-ins race on the unique email; the loser reads the winner's row.
        sql = f"""
            INSERT INTO users (
                id, name, email, email_verified, image, created_at, updated_at
            ) VALUES (
                :id, :name, :email, :email_verified, :image, :created_at, :created_at
            )
            ON CONFLICT (email) DO NOTHING
            RETURNING {_USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "name": name,
            "email": email,
            "email_verified": email_verified,
            "image": image,
            "created_at": created_at,
        }
        with self._connect(write=True) as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is not None:
            return map_row_to_user(row), True

        existing = self.get_user_by_email(email=email)
        if existing is None:
            raise StorageError("User insert conflicted but no row was found for the email.")
        return existing, False

    def update_user_profile(
        self,
        *,
        user_id: str,
        name: str,
        image: str | None,
        email_verified: bool,
        updated_at: datetime,
    ):
        sql = f"""
            UPDATE users
            SET name = :name,
                image = :image,
                email_verified = :email_verified,
                updated_at = :updated_at
            WHERE id = :user_id
            RETURNING {_USER_COLUMNS}
        """
        params = {
            "user_id": user_id,
            "name": name,
            "image": image,
            "email_verified": email_verified,
            "updated_at": updated_at,
        }
        with self._connect(write=True) as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_account_by_provider_account(self, *, provider_id: Provider, provider_account_id: str):
        sql = f"""
            SELECT {_ACCOUNT_COLUMNS}
            FROM accounts
            WHERE provider_id = :provider_id
              AND provider_account_id = :provider_account_id
            LIMIT 1
        """
        with self._connect() as conn:
            row = conn.execute(
                text(sql),
                {
                    "provider_id": provider_id.value,
                    "provider_account_id": provider_account_id,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_account(row)

    def link_account_if_absent(
        self,
        *,
        account_id: str,
        user_id: str,
        provider_id: Provider,
        provider_account_id: str,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO accounts (
                id, user_id, provider_id, provider_account_id, created_at, updated_at
            ) VALUES (
                :id, :user_id, :provider_id, :provider_account_id, :created_at, :created_at
            )
            ON CONFLICT (provider_id, provider_account_id) DO NOTHING
            RETURNING {_ACCOUNT_COLUMNS}
        """
        params = {
            "id": account_id,
            "user_id": user_id,
            "provider_id": provider_id.value,
            "provider_account_id": provider_account_id,
            "created_at": created_at,
        }
        with self._connect(write=True) as conn:
            row = conn.execute(text(sql), params).mappings().first()
        if row is not None:
            return map_row_to_account(row)

        existing = self.get_account_by_provider_account(
            provider_id=provider_id,
            provider_account_id=provider_account_id,
        )
        if existing is None:
            raise StorageError("Account insert conflicted but no row was found for the provider account.")
        return existing
