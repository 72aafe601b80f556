from __future__ import annotations

import requests

from app.domain.exceptions import VerificationErrorKind


def is_timeout_error(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, (TimeoutError, requests.exceptions.Timeout)):
            return True
        reason = getattr(current, "reason", None)
        if isinstance(reason, TimeoutError):
            return True
        current = current.__cause__ or current.__context__
    return False


def classify_token_error(exc: BaseException) -> VerificationErrorKind:
    message = str(exc).lower()
    if "expired" in message:
        return VerificationErrorKind.EXPIRED_TOKEN
    if "audience" in message:
        return VerificationErrorKind.AUDIENCE_MISMATCH
    return VerificationErrorKind.INVALID_TOKEN
