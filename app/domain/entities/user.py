from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Provider(str, Enum):
    GOOGLE = "google"
    APPLE = "apple"

    @classmethod
    def parse(cls, value: str) -> Provider:
        return cls(value.strip().lower())


class SessionPolicy(str, Enum):
    SINGLE = "single"
    MULTI = "multi"


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    email_verified: bool
    image: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Account:
    id: str
    user_id: str
    provider_id: Provider
    provider_account_id: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Session:
    id: str
    user_id: str
    expires_at: datetime
    created_at: datetime
    ip_address: str | None
    user_agent: str | None

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now
