from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from app.domain.entities.user import Account, Provider, Session, User


def _as_str(value: Any) -> str:
    return str(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        name=row["name"],
        email=row["email"],
        email_verified=bool(row["email_verified"]),
        image=row.get("image"),
        created_at=_as_utc(row["created_at"]),
        updated_at=_as_utc(row["updated_at"]),
    )


def map_row_to_account(row: Mapping[str, Any]) -> Account:
    return Account(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        provider_id=Provider(row["provider_id"]),
        provider_account_id=row["provider_account_id"],
        created_at=_as_utc(row["created_at"]),
        updated_at=_as_utc(row["updated_at"]),
    )


def map_row_to_session(row: Mapping[str, Any]) -> Session:
    return Session(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        expires_at=_as_utc(row["expires_at"]),
        created_at=_as_utc(row["created_at"]),
        ip_address=row.get("ip_address"),
        user_agent=row.get("user_agent"),
    )


def map_joined_row_to_session_and_user(row: Mapping[str, Any]) -> tuple[Session, User]:
    session = map_row_to_session(
        {
            "id": row["session_id"],
            "user_id": row["user_id"],
            "expires_at": row["session_expires_at"],
            "created_at": row["session_created_at"],
            "ip_address": row["ip_address"],
            "user_agent": row["user_agent"],
        }
    )
    user = map_row_to_user(
        {
            "id": row["user_id"],
            "name": row["name"],
            "email": row["email"],
            "email_verified": row["email_verified"],
            "image": row["image"],
            "created_at": row["user_created_at"],
            "updated_at": row["user_updated_at"],
        }
    )
    return session, user
