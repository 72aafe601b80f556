from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta

from app.application.ports.token_port import TokenPort


_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

# 32 bytes from secrets gives 256 bits; the timestamp prefix adds none.
SESSION_TOKEN_RANDOM_BYTES = 32


def _to_base36(value: int) -> str:
    if value <= 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


class SessionTokenService(TokenPort):
    def __init__(self, *, session_ttl_days: int):
        if session_ttl_days <= 0:
            raise ValueError("session_ttl_days must be positive.")
        self._session_ttl = timedelta(days=session_ttl_days)

    def generate_session_token(self, *, now: datetime) -> str:
        prefix = _to_base36(int(now.timestamp() * 1000))
        return f"{prefix}.{secrets.token_urlsafe(SESSION_TOKEN_RANDOM_BYTES)}"

    def hash_session_token(self, *, token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def session_expires_at(self, *, now: datetime) -> datetime:
        return now + self._session_ttl
