from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TokenPort(Protocol):
    def generate_session_token(self, *, now: datetime) -> str:
        ...

    def hash_session_token(self, *, token: str) -> str:
        ...

    def session_expires_at(self, *, now: datetime) -> datetime:
        ...
